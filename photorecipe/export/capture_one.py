"""
Capture One style (.costyle) generator.

A style is a flat, key-sorted list of <E K="..." V="..." /> entries inside
<SL Engine="1300">, followed by an <LDS> block of local-adjustment layers.
"""

import math
import uuid
import logging
from typing import Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from ..recipe.curves import CurvePoint
from ..recipe.masks import AIRegion, Mask, MaskKind
from ..recipe.models import AdjustmentVector
from ..recipe.ranges import BAND_GEOMETRY, clamp, clean_text, is_number, is_zero
from .options import ExportOptions

logger = logging.getLogger(__name__)

ENGINE_VERSION = '1300'
DEFAULT_STYLE_NAME = 'Custom Recipe'

ZONE_FIELDS = 18
ZONE_HALF_WIDTH = 30.0
# Ninth zone is never driven by a recipe
DISABLED_ZONE = ','.join(['0', '1', '1'] + ['0'] * (ZONE_FIELDS - 3))

BW_KEYS = (
    ('red', 'BwRed'),
    ('green', 'BwGreen'),
    ('blue', 'BwBlue'),
    ('yellow', 'BwYellow'),
    ('aqua', 'BwCyan'),
    ('magenta', 'BwMagenta'),
)

GRADATION_KEYS = (
    ('composite', 'GradationCurve'),
    ('red', 'GradationCurveRed'),
    ('green', 'GradationCurveGreen'),
    ('blue', 'GradationCurveBlue'),
)

RETOUCHING_DEFAULTS = {
    'RetouchingBlemishRemovalAmount': '0',
    'RetouchingDarkCirclesReductionAmount': '0',
    'RetouchingFaceSculptingContouring': '0',
    'RetouchingOpacity': '100',
    'RetouchingSkinEveningAmount': '0',
    'RetouchingSkinEveningTexture': '0',
}

# MaskType codes inside <MD>
MASK_TYPE_BRUSH = 0
MASK_TYPE_LINEAR = 1
MASK_TYPE_RADIAL = 2
MASK_TYPE_BACKGROUND = 3
MASK_TYPE_AI = 4
MASK_TYPE_FULL_IMAGE = 5

SUBJECT_OPTIONS: Tuple[Tuple[str, Tuple[AIRegion, ...]], ...] = (
    ('Body', (AIRegion.BODY_SKIN,)),
    ('Clothes', (AIRegion.CLOTHING,)),
    ('Eyebrows', (AIRegion.EYEBROWS,)),
    ('Face', (AIRegion.FACE_SKIN,)),
    ('Hair', (AIRegion.HAIR,)),
    ('IrisAndPupil', (AIRegion.IRIS_PUPIL,)),
    ('Lips', (AIRegion.LIPS,)),
    ('Sclera', (AIRegion.EYE_WHITES,)),
)

LOCAL_EXPOSURE_STOPS = 4.0


def format_number(value: float) -> str:
    """Integer text when the value is integral, else six decimals."""
    if abs(value - round(value)) < 1e-4:
        return str(int(round(value)))
    return f"{value:.6f}"


def gradation_curve(points: Sequence[CurvePoint]) -> Optional[str]:
    """'x,y;x,y' in 0..1 from 0..255 curve points, or None for an absent curve."""
    if not points:
        return None
    return ';'.join(f"{format_number(p.input / 255.0)},{format_number(p.output / 255.0)}"
                    for p in points)


def _escape(text: str) -> str:
    return escape(clean_text(text) or '', {'"': '&quot;', "'": '&apos;'})


def _entry(key: str, value: str, indent: str = '\t') -> str:
    return f'{indent}<E K="{key}" V="{value}" />'


class StyleBuilder:
    """Collects style entries, dropping anything non-finite."""

    def __init__(self):
        self.entries: Dict[str, str] = {}

    def add(self, key: str, value):
        if value is None:
            return
        if isinstance(value, str):
            self.entries[key] = value
        elif is_number(value):
            self.entries[key] = format_number(float(value))
        else:
            logger.debug(f"Dropping non-numeric style value {key}={value!r}")

    def lines(self) -> List[str]:
        keys = sorted(self.entries, key=lambda k: (k.lower(), k))
        return [_entry(key, self.entries[key]) for key in keys]


def _band_zone(center: float, hue: Optional[float], saturation: Optional[float],
               luminance: Optional[float]) -> str:
    enabled = not (is_zero(hue) and is_zero(saturation) and is_zero(luminance))
    radians = math.radians(center)
    r, g, b = (0.5 + 0.5 * math.cos(radians - math.radians(offset)) for offset in (0.0, 120.0, 240.0))
    start = (center - ZONE_HALF_WIDTH) % 360.0
    end = (center + ZONE_HALF_WIDTH) % 360.0
    fields = [
        '1' if enabled else '0', '1', '1',
        format_number(hue or 0.0), format_number(saturation or 0.0), format_number(luminance or 0.0),
        format_number(r), format_number(g), format_number(b),
        format_number(start), format_number(end), '0.5',
    ] + ['0'] * (ZONE_FIELDS - 12)
    return ','.join(fields)


def color_corrections(vector: AdjustmentVector, options: ExportOptions) -> Optional[str]:
    """
    Build the ColorCorrections value from the HSL bands.

    Returns:
        Nine ';'-separated zones, or None for monochrome / neutral HSL
    """
    hsl = vector.hsl
    if hsl is None or hsl.is_neutral():
        return None
    zones = []
    for band, values in hsl.bands():
        center, _ = BAND_GEOMETRY[band]
        saturation = options.scale(values.saturation)
        luminance = options.scale(values.luminance)
        zones.append(_band_zone(
            center, values.hue,
            None if saturation is None else clamp(saturation, -100.0, 100.0),
            None if luminance is None else clamp(luminance, -100.0, 100.0),
        ))
    zones.append(DISABLED_ZONE)
    return ';'.join(zones)


def _style_name(vector: AdjustmentVector) -> str:
    name = vector.name.strip() if vector.name else ''
    return name or DEFAULT_STYLE_NAME


def _mask_type(mask: Mask) -> int:
    if mask.kind is MaskKind.BRUSH:
        return MASK_TYPE_BRUSH
    if mask.kind is MaskKind.LINEAR:
        return MASK_TYPE_LINEAR
    if mask.kind is MaskKind.RADIAL:
        return MASK_TYPE_RADIAL
    if mask.region is AIRegion.BACKGROUND:
        return MASK_TYPE_BACKGROUND
    return MASK_TYPE_AI


def _layer(name: str, local: Dict[str, str], mask_type: int,
           subject_options: Optional[List[str]] = None) -> str:
    entries = {
        'AIColorGrade': '0',
        'Enabled': '1',
        'Moire': '0;0',
        'Name': _escape(name),
        'Opacity': '100',
        'UsmMethod': '0',
    }
    entries.update(local)
    lines = ['\t<LD>', '\t\t<LA>']
    lines += [_entry(key, entries[key], '\t\t\t') for key in sorted(entries, key=str.lower)]
    lines += ['\t\t</LA>', '\t\t<MD>', _entry('MaskType', str(mask_type), '\t\t\t')]
    if subject_options is not None:
        lines.append('\t\t\t<SO>')
        lines += subject_options
        lines.append('\t\t\t</SO>')
    lines += ['\t\t</MD>', '\t</LD>']
    return '\n'.join(lines)


def _local_entries(mask: Mask, options: ExportOptions) -> Dict[str, str]:
    """Local -1..1 values scaled to Capture One units."""
    local = mask.adjustments
    entries: Dict[str, str] = {}

    def scaled(value, factor, limit):
        return clamp(options.scale(value) * factor, -limit, limit)

    if local.exposure is not None:
        entries['Exposure'] = format_number(scaled(local.exposure, LOCAL_EXPOSURE_STOPS, LOCAL_EXPOSURE_STOPS))
    for attr, key, sign in (('contrast', 'Contrast', 1),
                            ('saturation', 'Saturation', 1), ('highlights', 'HighlightRecoveryEx', -1),
                            ('shadows', 'ShadowRecovery', 1)):
        value = getattr(local, attr)
        if value is not None:
            entries[key] = format_number(sign * scaled(value, 100.0, 100.0))
    return entries


def _subject_options(region: Optional[AIRegion]) -> List[str]:
    flags = [(key, region in regions) for key, regions in SUBJECT_OPTIONS]
    if not any(enabled for _, enabled in flags):
        # A subject layer needs at least one part
        flags = [(key, key == 'Face') for key, _ in flags]
    return [_entry(key, '1' if enabled else '0', '\t\t\t\t') for key, enabled in flags]


def generate_layers(vector: AdjustmentVector, options: ExportOptions) -> str:
    """Build the <LDS> block: a full-image main layer, then one layer per mask."""
    if not options.masks or not vector.masks:
        return '<LDS>\n</LDS>\n'

    layers = [_layer('Main', {}, MASK_TYPE_FULL_IMAGE)]
    for index, mask in enumerate(vector.masks, start=1):
        mask_type = _mask_type(mask)
        subject = _subject_options(mask.region) if mask_type == MASK_TYPE_AI else None
        layers.append(_layer(mask.name or f"Mask {index}", _local_entries(mask, options),
                             mask_type, subject))
    return '<LDS>\n' + '\n'.join(layers) + '\n</LDS>\n'


def generate_capture_one_style(vector: AdjustmentVector,
                               options: Optional[ExportOptions] = None) -> str:
    """
    Generate a Capture One style document.

    Args:
        vector: Adjustments to export
        options: Inclusion flags and strength (defaults when None)

    Returns:
        Style text ending with the <LDS> layer block
    """
    options = options or ExportOptions()
    style = StyleBuilder()

    style.add('Name', _escape(_style_name(vector)))
    style.add('UUID', str(uuid.uuid4()).upper())
    style.add('StyleSource', 'Styles')

    exposure = vector.exposure if vector.exposure is not None else 0.0
    style.add('Exposure', clamp(options.scale(exposure), -5.0, 5.0))

    if options.wb_basic:
        def slider(value):
            return None if value is None else clamp(options.scale(value), -100.0, 100.0)

        style.add('Contrast', slider(vector.contrast))
        style.add('Brightness', slider(vector.brightness))
        highlights = slider(vector.highlights)
        style.add('HighlightRecoveryEx', None if highlights is None else -highlights)
        style.add('ShadowRecovery', slider(vector.shadows))
        style.add('WhiteRecovery', slider(vector.whites))
        style.add('BlackRecovery', slider(vector.blacks))
        style.add('Clarity', slider(vector.clarity))
        style.add('Vibrance', slider(vector.vibrance))
        if not vector.is_monochrome:
            style.add('Saturation', slider(vector.saturation))

    if vector.is_monochrome:
        style.add('Saturation', -100)
        style.add('BwEnabled', '1')
        mixer = vector.gray_mixer
        for band, key in BW_KEYS:
            value = getattr(mixer, band)
            style.add(key, 0 if value is None else value)

    style.add('ColorBalance', '1;1;1')

    if options.hsl:
        style.add('ColorCorrections', color_corrections(vector, options))

    if options.curves:
        for channel, key in GRADATION_KEYS:
            style.add(key, gradation_curve(getattr(vector.curves, channel)))

    if options.grain:
        grain = vector.grain
        style.add('FilmGrainAmount', grain.amount)
        style.add('FilmGrainGranularity', grain.size)
        style.add('FilmGrainDensity', grain.frequency)
        if grain.amount is not None and grain.amount > 0:
            style.add('FilmGrainType', 1)

    for key, value in RETOUCHING_DEFAULTS.items():
        style.add(key, value)

    lines = ['<?xml version="1.0"?>', f'<SL Engine="{ENGINE_VERSION}">']
    lines += style.lines()
    lines.append('</SL>')
    document = '\n'.join(lines) + '\n' + generate_layers(vector, options)

    logger.debug(f"Generated Capture One style '{_style_name(vector)}' with {len(style.entries)} entries")
    return document


def generate_capture_one_basic_style(vector: AdjustmentVector,
                                     options: Optional[ExportOptions] = None) -> str:
    """Style with the basic tone group only."""
    options = (options or ExportOptions()).replace(
        hsl=False, color_grading=False, curves=False, grain=False, vignette=False, masks=False,
    )
    return generate_capture_one_style(vector, options)
