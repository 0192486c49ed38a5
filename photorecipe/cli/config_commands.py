"""
Configuration CLI commands for PhotoRecipe

Shows the effective configuration and writes config.yaml files that the
export commands pick up through --config.
"""

import click
import logging
from pathlib import Path

import yaml

from ..config import get_config_value, get_default_config, load_config, save_config, update_config_value

logger = logging.getLogger(__name__)


@click.group()
def config():
    """Configuration file commands"""
    pass


@config.command()
@click.argument('key', required=False)
@click.pass_context
def show(ctx, key):
    """Print the effective configuration, or a single dotted KEY."""
    current = ctx.obj.get('config') or get_default_config()
    if key:
        value = get_config_value(current, key)
        if value is None:
            raise click.ClickException(f"Unknown config key: {key}")
        if not isinstance(value, dict):
            click.echo(value)
            return
        current = value
    click.echo(yaml.safe_dump(current, default_flow_style=False, sort_keys=False).rstrip())


@config.command()
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--force', is_flag=True, help='Overwrite an existing file')
def init(path: Path, force: bool):
    """Write the default configuration to PATH."""
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    if not save_config(get_default_config(), path):
        raise click.ClickException(f"Could not write {path}")
    click.echo(f"✓ {path}")


@config.command(name='set')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.argument('key')
@click.argument('value')
def set_value(path: Path, key: str, value: str):
    """
    Set a dotted KEY to VALUE in the config file at PATH.

    VALUE is read as YAML, so 'true', '17' and '0.8' keep their types.
    """
    if '.' not in key:
        raise click.ClickException("KEY must be dotted, e.g. export.masks")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        parsed = value

    current = load_config(path)
    try:
        update_config_value(current, key, parsed)
    except TypeError:
        raise click.ClickException(f"{key.rsplit('.', 1)[0]} is not a section")
    if not save_config(current, path):
        raise click.ClickException(f"Could not write {path}")
    logger.debug(f"Set {key}={parsed!r} in {path}")
    click.echo(f"✓ {key} = {parsed}")
