#!/usr/bin/env python3
"""
PhotoRecipe Command Line Interface

Main CLI entry point: bakes recipe files into LUTs and editor presets,
and reads Lightroom presets back into recipes.
"""

import click
import logging
from typing import Optional

from ..config import get_config_value, load_config
from ..utils.logging import DEFAULT_FORMAT, setup_console_logging
from .config_commands import config as config_group
from .export_commands import costyle, inspect, lut, profile, xmp

logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.version_option(package_name='photorecipe')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    PhotoRecipe - turn color recipes into LUTs and editor presets

    Recipes are JSON or YAML files describing a look (basic tone, HSL,
    color grading, curves, grain, masks). Each command writes one output
    per recipe file.
    """
    ctx.ensure_object(dict)

    ctx.obj['config'] = load_config(config)

    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    setup_console_logging(
        level=level,
        color=bool(get_config_value(ctx.obj['config'], 'logging.color', True)),
        fmt=get_config_value(ctx.obj['config'], 'logging.format', DEFAULT_FORMAT),
    )

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


main.add_command(lut)
main.add_command(xmp)
main.add_command(costyle)
main.add_command(profile)
main.add_command(inspect)
main.add_command(config_group)


if __name__ == '__main__':
    main()
