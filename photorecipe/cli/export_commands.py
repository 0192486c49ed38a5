"""
Export CLI commands for PhotoRecipe

Each command takes one or more recipe files and writes one output per
recipe into the output directory; `inspect` goes the other way and prints
the recipe recovered from a Lightroom preset.
"""

import json
import click
import logging
from functools import partial
from pathlib import Path
from typing import Callable, Dict, Optional

import yaml
from tqdm import tqdm

from ..config import get_config_value
from ..export import (
    ExportError, ExportOptions, generate_camera_profile, generate_capture_one_basic_style,
    generate_capture_one_style, generate_xmp, parse_xmp, write_lut,
)
from ..export.lut import DEFAULT_SIZE, SUPPORTED_FORMATS, normalize_format, normalize_size
from ..recipe.models import AdjustmentVector
from ..utils.logging import ExportStats, StructuredLogger
from .recipe_io import RecipeLoadError, load_recipe

logger = logging.getLogger(__name__)
slog = StructuredLogger(__name__)

recipe_argument = click.argument('recipes', nargs=-1, required=True,
                                 type=click.Path(exists=True, dir_okay=False, path_type=Path))
output_option = click.option('--output-dir', '-o', type=click.Path(file_okay=False, path_type=Path),
                             default='.', show_default=True, help='Directory for generated files')


def preset_options(func):
    """Inclusion flags shared by the preset commands; unset flags use the config."""
    options = [
        click.option('--strength', type=click.FloatRange(0.0, 2.0), help='Slider multiplier (0-2)'),
        click.option('--group', 'group_name', help='Preset group name'),
        click.option('--masks/--no-masks', default=None, help='Include local masks'),
        click.option('--exposure/--no-exposure', default=None, help='Include exposure'),
        click.option('--hsl/--no-hsl', default=None, help='Include HSL / color mixer'),
        click.option('--color-grading/--no-color-grading', default=None, help='Include color grading'),
        click.option('--curves/--no-curves', default=None, help='Include tone curves'),
        click.option('--grain/--no-grain', default=None, help='Include grain'),
        click.option('--vignette/--no-vignette', default=None, help='Include vignette'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_options(config: Dict, overrides: Dict) -> ExportOptions:
    """Config defaults with explicit command-line flags on top."""
    options = ExportOptions.from_config(config)
    changes = {key: value for key, value in overrides.items() if value is not None}
    return options.replace(**changes) if changes else options


def run_batch(ctx, recipes, output_dir: Path, kind: str, suffix: str,
              write: Callable[[AdjustmentVector, Path], None]):
    """
    Export every recipe into output_dir.

    Recipe or export failures are collected; the command fails at the end
    if any recipe could not be exported.
    """
    quiet = ctx.obj.get('quiet', False)
    output_dir.mkdir(parents=True, exist_ok=True)
    stats = ExportStats()

    for recipe_path in recipes:
        target = output_dir / f"{recipe_path.stem}{suffix}"
        try:
            write(load_recipe(recipe_path), target)
        except (RecipeLoadError, ExportError, ValueError, OSError) as e:
            logger.error(f"Failed to export {recipe_path}: {e}")
            stats.add_error(str(recipe_path), str(e))
            continue

        stats.add_output(str(recipe_path), str(target), kind)
        slog.info("Wrote output", kind=kind, source=str(recipe_path), path=str(target))
        if not quiet:
            click.echo(f"✓ {target}")

    if len(recipes) > 1 and not quiet:
        stats.print_summary()
    if stats.errors:
        raise click.ClickException(f"{len(stats.errors)} of {len(recipes)} recipe(s) failed")


def text_writer(render: Callable[[AdjustmentVector], str]) -> Callable[[AdjustmentVector, Path], None]:
    def write(vector: AdjustmentVector, target: Path):
        target.write_text(render(vector), encoding='utf-8')
    return write


@click.command()
@recipe_argument
@output_option
@click.option('--size', '-s', type=int, help='Grid points per axis (default from config)')
@click.option('--format', '-f', 'fmt', type=click.Choice(SUPPORTED_FORMATS, case_sensitive=False),
              help='LUT format (default from config)')
@click.pass_context
def lut(ctx, recipes, output_dir: Path, size: Optional[int], fmt: Optional[str]):
    """Bake recipes into 3D LUT files (.cube or .3dl)."""
    config = ctx.obj.get('config', {})
    size = normalize_size(size or get_config_value(config, 'lut.size', DEFAULT_SIZE))
    try:
        fmt = normalize_format(fmt or get_config_value(config, 'lut.format', 'cube'))
    except ExportError as e:
        raise click.ClickException(str(e))
    quiet = ctx.obj.get('quiet', False)

    def write(vector: AdjustmentVector, target: Path):
        progress = partial(tqdm, total=size, unit='slab', desc=target.stem,
                           disable=quiet, leave=False)
        write_lut(target, vector, size=size, fmt=fmt, progress=progress)

    run_batch(ctx, recipes, output_dir, fmt, f'.{fmt}', write)


@click.command()
@recipe_argument
@output_option
@preset_options
@click.pass_context
def xmp(ctx, recipes, output_dir: Path, **flags):
    """Generate Lightroom presets (.xmp)."""
    options = build_options(ctx.obj.get('config', {}), flags)
    run_batch(ctx, recipes, output_dir, 'xmp', '.xmp', text_writer(partial(generate_xmp, options=options)))


@click.command()
@recipe_argument
@output_option
@preset_options
@click.option('--basic', is_flag=True, help='Basic tone adjustments only')
@click.pass_context
def costyle(ctx, recipes, output_dir: Path, basic: bool, **flags):
    """Generate Capture One styles (.costyle)."""
    options = build_options(ctx.obj.get('config', {}), flags)
    generator = generate_capture_one_basic_style if basic else generate_capture_one_style
    run_batch(ctx, recipes, output_dir, 'costyle', '.costyle', text_writer(partial(generator, options=options)))


@click.command()
@recipe_argument
@output_option
@preset_options
@click.option('--name', '-n', 'profile_name', help='Profile name (defaults to the recipe name)')
@click.pass_context
def profile(ctx, recipes, output_dir: Path, profile_name: Optional[str], **flags):
    """Generate Lightroom camera profiles (Look .xmp)."""
    options = build_options(ctx.obj.get('config', {}), flags)
    run_batch(ctx, recipes, output_dir, 'profile', '.profile.xmp',
              text_writer(lambda vector: generate_camera_profile(vector, profile_name, options)))


@click.command()
@click.argument('xmp_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--format', '-f', 'fmt', type=click.Choice(['json', 'yaml']), default='json',
              show_default=True, help='Output format')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Write the recipe to a file instead of stdout')
def inspect(xmp_file: Path, fmt: str, output: Optional[Path]):
    """Read a Lightroom preset and print the recovered recipe."""
    try:
        text = xmp_file.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {xmp_file}: {e}")

    result = parse_xmp(text)
    if not result.success:
        raise click.ClickException(f"{xmp_file}: {result.error}")

    document = {
        'preset_name': result.preset_name,
        'metadata': result.metadata,
        'recipe': result.adjustments.to_dict(),
    }
    if fmt == 'yaml':
        rendered = yaml.safe_dump(document, default_flow_style=False, sort_keys=False)
    else:
        rendered = json.dumps(document, indent=2)

    if output:
        output.write_text(rendered, encoding='utf-8')
        logger.info(f"Wrote recipe to {output}")
    else:
        click.echo(rendered)
