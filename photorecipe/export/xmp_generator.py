"""
Lightroom / Camera Raw XMP preset generator.

Builds the preset document element by element with ElementTree. Each
adjustment group is written only when its inclusion flag is set and the
vector actually carries values for it, so nothing has to be stripped
afterwards.
"""

import re
import logging
from datetime import datetime
from typing import Iterable, List, Optional
import xml.etree.ElementTree as ET

from ..recipe.curves import CurvePoint
from ..recipe.masks import Mask, MaskKind
from ..recipe.models import AdjustmentVector
from ..recipe.ranges import BANDS, LOCAL, clamp
from .options import ExportOptions
from .xmp_common import (
    add_alt, add_seq, add_text, create_packet, crs, format_bool, format_fixed,
    format_int, new_sync_id, prettify_xml, rdf, round_half_up, settings_description,
)

logger = logging.getLogger(__name__)

XMP_VERSION = '17.5'
PROCESS_VERSION = '15.4'

PROFILE_COLOR = 'Adobe Color'
PROFILE_MONOCHROME = 'Adobe Monochrome'
PROFILE_PORTRAIT = 'Adobe Portrait'
PROFILE_LANDSCAPE = 'Adobe Landscape'

TREATMENT_COLOR = 'Color'
TREATMENT_BW = 'Black & White'

BAND_TAGS = {band: band.capitalize() for band in BANDS}

BASIC_TAGS = (
    ('contrast', 'Contrast2012'),
    ('highlights', 'Highlights2012'),
    ('shadows', 'Shadows2012'),
    ('whites', 'Whites2012'),
    ('blacks', 'Blacks2012'),
    ('clarity', 'Clarity2012'),
    ('vibrance', 'Vibrance'),
    ('brightness', 'Brightness'),
)

PARAMETRIC_TAGS = (
    ('shadows', 'ParametricShadows', True),
    ('darks', 'ParametricDarks', True),
    ('lights', 'ParametricLights', True),
    ('highlights', 'ParametricHighlights', True),
    ('shadow_split', 'ParametricShadowSplit', False),
    ('midtone_split', 'ParametricMidtoneSplit', False),
    ('highlight_split', 'ParametricHighlightSplit', False),
)

CURVE_TAGS = (
    ('composite', 'ToneCurvePV2012'),
    ('red', 'ToneCurvePV2012Red'),
    ('green', 'ToneCurvePV2012Green'),
    ('blue', 'ToneCurvePV2012Blue'),
)

GRADE_WHEEL_TAGS = (
    ('shadow', 'Shadow'),
    ('midtone', 'Midtone'),
    ('highlight', 'Highlight'),
    ('global', 'Global'),
)

GRAIN_TAGS = (('amount', 'GrainAmount'), ('size', 'GrainSize'), ('frequency', 'GrainFrequency'))

VIGNETTE_TAGS = (
    ('amount', 'PostCropVignetteAmount'),
    ('midpoint', 'PostCropVignetteMidpoint'),
    ('feather', 'PostCropVignetteFeather'),
    ('roundness', 'PostCropVignetteRoundness'),
    ('style', 'PostCropVignetteStyle'),
    ('highlight_contrast', 'PostCropVignetteHighlightContrast'),
)

LOCAL_TAGS = (
    ('exposure', 'LocalExposure2012'),
    ('contrast', 'LocalContrast2012'),
    ('highlights', 'LocalHighlights2012'),
    ('shadows', 'LocalShadows2012'),
    ('whites', 'LocalWhites2012'),
    ('blacks', 'LocalBlacks2012'),
    ('clarity', 'LocalClarity2012'),
    ('dehaze', 'LocalDehaze'),
    ('texture', 'LocalTexture'),
    ('saturation', 'LocalSaturation'),
    ('temperature', 'LocalTemperature'),
    ('tint', 'LocalTint'),
)

MASK_WHAT = {
    MaskKind.RADIAL: 'Mask/CircularGradient',
    MaskKind.LINEAR: 'Mask/Gradient',
    MaskKind.BRUSH: 'Mask/Brush',
    MaskKind.REGION: 'Mask/Image',
    MaskKind.RANGE_COLOR: 'Mask/RangeMask',
    MaskKind.RANGE_LUMINANCE: 'Mask/RangeMask',
}

# Words the analysis step tends to leave in generated names
_NAME_NOISE = re.compile(r'\b(image\s*match|imagematch|match|target|base|ai|photo)\b', re.IGNORECASE)


def default_preset_name() -> str:
    return f"Preset-{datetime.now().strftime('%Y-%m-%dT%H-%M-%S')}"


def clean_preset_name(name: Optional[str]) -> str:
    """Strip generator noise words; fall back to a timestamped name."""
    fallback = default_preset_name()
    if not name or not name.strip():
        return fallback
    cleaned = re.sub(r'\s{2,}', ' ', _NAME_NOISE.sub('', name)).strip()
    return cleaned or fallback


def normalize_profile_name(name: Optional[str]) -> Optional[str]:
    """Map a free-form profile name onto Adobe's built-in set."""
    if not name:
        return None
    n = name.lower()
    if re.search(r'mono|black\s*&?\s*(and\s*)?white|b\s*&\s*w', n):
        return PROFILE_MONOCHROME
    if re.search(r'portrait|people|skin', n):
        return PROFILE_PORTRAIT
    if re.search(r'landscape|sky|mountain|nature', n):
        return PROFILE_LANDSCAPE
    return PROFILE_COLOR


def resolve_profile_name(vector: AdjustmentVector) -> str:
    """
    Pick the camera profile for a vector.

    Monochrome vectors always use Adobe Monochrome. Otherwise an explicit
    profile is normalized; when absent, face/subject masks suggest
    Portrait and sky/landscape/background masks suggest Landscape.
    """
    if vector.is_monochrome:
        return PROFILE_MONOCHROME
    normalized = normalize_profile_name(vector.profile_name)
    if normalized:
        return normalized

    regions = [mask.region for mask in vector.masks if mask.region is not None]
    if any(r.category in ('face', 'subject') for r in regions):
        return PROFILE_PORTRAIT
    if any(r.category in ('landscape', 'background') for r in regions):
        return PROFILE_LANDSCAPE
    return PROFILE_COLOR


def _curve_items(points: Iterable[CurvePoint]) -> List[str]:
    return [f"{round_half_up(p.input)}, {round_half_up(p.output)}" for p in points]


class XMPSettingsWriter:
    """
    Writes adjustment groups into a crs settings rdf:Description

    Shared by the preset generator and the camera-profile generator; each
    _write_* method covers one group and is a no-op when the vector has
    nothing to say about it.
    """

    def __init__(self, vector: AdjustmentVector, options: ExportOptions):
        self.vector = vector
        self.options = options

    def write(self, description: ET.Element):
        """Write every group enabled in the options."""
        opts = self.options
        self._write_treatment(description)
        if opts.wb_basic:
            self._write_white_balance(description)
            self._write_basic(description)
        if opts.exposure:
            self._write_exposure(description)
        if opts.curves:
            self._write_parametric(description)
            self._write_curves(description)
        if opts.hsl:
            self._write_hsl(description)
            self._write_gray_mixer(description)
        if opts.color_grading:
            self._write_color_grading(description)
        if opts.point_color:
            self._write_point_colors(description)
        if opts.grain:
            self._write_grain(description)
        if opts.vignette:
            self._write_vignette(description)
        if opts.masks:
            self._write_masks(description)

    def _scaled_int(self, value: Optional[float], low: float = -100.0, high: float = 100.0) -> Optional[str]:
        if value is None:
            return None
        return format_int(clamp(self.options.scale(value), low, high))

    def _write_treatment(self, description: ET.Element):
        if self.vector.is_monochrome:
            add_text(description, 'Treatment', TREATMENT_BW)
            add_text(description, 'ConvertToGrayscale', 'True')
        else:
            add_text(description, 'Treatment', TREATMENT_COLOR)

    def _write_white_balance(self, description: ET.Element):
        v = self.vector
        if v.temperature is not None:
            add_text(description, 'Temperature', format_int(v.temperature))
        if v.tint is not None:
            add_text(description, 'Tint', format_int(v.tint))

    def _write_basic(self, description: ET.Element):
        v = self.vector
        for attr, tag in BASIC_TAGS:
            add_text(description, tag, self._scaled_int(getattr(v, attr)))

        if v.is_monochrome:
            # Grayscale conversion does the desaturation
            add_text(description, 'Saturation', '0')
        else:
            add_text(description, 'Saturation', self._scaled_int(v.saturation))

    def _write_exposure(self, description: ET.Element):
        exposure = self.vector.exposure
        if exposure is not None:
            value = clamp(self.options.scale(exposure), -5.0, 5.0)
            add_text(description, 'Exposure2012', format_fixed(value, 2))

    def _write_parametric(self, description: ET.Element):
        parametric = self.vector.parametric
        for attr, tag, scalable in PARAMETRIC_TAGS:
            value = getattr(parametric, attr)
            if value is None:
                continue
            if scalable:
                add_text(description, tag, self._scaled_int(value))
            else:
                add_text(description, tag, format_int(value))

    def _write_curves(self, description: ET.Element):
        curves = self.vector.curves
        if not curves.has_values():
            return
        add_text(description, 'ToneCurveName2012', 'Custom')
        for attr, tag in CURVE_TAGS:
            points = getattr(curves, attr)
            if points:
                add_seq(description, tag, _curve_items(points))

    def _write_hsl(self, description: ET.Element):
        hsl = self.vector.hsl
        if hsl is None:
            # Black & white: color mixer does not apply
            return
        for band, values in hsl.bands():
            if values.hue is not None:
                add_text(description, f'HueAdjustment{BAND_TAGS[band]}', format_int(values.hue))
        for band, values in hsl.bands():
            add_text(description, f'SaturationAdjustment{BAND_TAGS[band]}',
                     self._scaled_int(values.saturation))
        for band, values in hsl.bands():
            add_text(description, f'LuminanceAdjustment{BAND_TAGS[band]}',
                     self._scaled_int(values.luminance))

    def _write_gray_mixer(self, description: ET.Element):
        mixer = self.vector.gray_mixer
        if mixer is None or not mixer.has_values():
            return
        for band, value in mixer.bands():
            if value is not None:
                add_text(description, f'GrayMixer{BAND_TAGS[band]}', format_int(value))

    def _write_color_grading(self, description: ET.Element):
        grading = self.vector.grading
        for wheel_name, tag in GRADE_WHEEL_TAGS:
            wheel = grading.wheel(wheel_name)
            if wheel.hue is not None:
                add_text(description, f'ColorGrade{tag}Hue', str(round_half_up(wheel.hue) % 360))
            add_text(description, f'ColorGrade{tag}Sat', self._scaled_int(wheel.saturation, 0.0, 100.0))
            add_text(description, f'ColorGrade{tag}Lum', self._scaled_int(wheel.luminance))
        if grading.blending is not None:
            add_text(description, 'ColorGradeBlending', format_int(grading.blending))
        if grading.balance is not None:
            add_text(description, 'ColorGradeBalance', format_int(grading.balance))

    def _write_point_colors(self, description: ET.Element):
        for index, row in enumerate(self.vector.point_colors.colors[:4], start=1):
            add_text(description, f'PointColor{index}', ','.join(format_fixed(v, 6) for v in row))

    def _write_grain(self, description: ET.Element):
        grain = self.vector.grain
        for attr, tag in GRAIN_TAGS:
            value = getattr(grain, attr)
            if value is not None:
                add_text(description, tag, format_int(value))

    def _write_vignette(self, description: ET.Element):
        vignette = self.vector.vignette
        for attr, tag in VIGNETTE_TAGS:
            value = getattr(vignette, attr)
            if value is not None:
                add_text(description, tag, format_int(value))

    def _write_masks(self, description: ET.Element):
        masks = self.vector.masks
        if not masks:
            return
        container = ET.SubElement(description, crs('MaskGroupBasedCorrections'))
        seq = ET.SubElement(container, rdf('Seq'))
        for index, mask in enumerate(masks, start=1):
            li = ET.SubElement(seq, rdf('li'))
            self._write_correction(li, mask, mask.name or f"Mask {index}")

    def _write_correction(self, li: ET.Element, mask: Mask, name: str):
        correction = ET.SubElement(li, rdf('Description'))
        correction.set(crs('What'), 'Correction')
        correction.set(crs('CorrectionAmount'), '1')
        correction.set(crs('CorrectionActive'), 'true')
        correction.set(crs('CorrectionName'), name)
        correction.set(crs('CorrectionSyncID'), new_sync_id())

        local = mask.adjustments
        for attr, tag in LOCAL_TAGS:
            value = getattr(local, attr)
            if value is not None:
                scaled = clamp(self.options.scale(value), LOCAL[0], LOCAL[1])
                correction.set(crs(tag), format_fixed(scaled, 3))
        correction.set(crs('LocalCurveRefineSaturation'), '100')

        masks_elem = ET.SubElement(correction, crs('CorrectionMasks'))
        mask_seq = ET.SubElement(masks_elem, rdf('Seq'))
        mask_li = ET.SubElement(mask_seq, rdf('li'))

        if mask.kind in (MaskKind.RANGE_COLOR, MaskKind.RANGE_LUMINANCE):
            target = ET.SubElement(mask_li, rdf('Description'))
        else:
            target = mask_li
        self._write_mask_common(target, mask, name)

        geometry = mask.geometry
        if mask.kind is MaskKind.LINEAR:
            for attr, tag in (('zero_x', 'ZeroX'), ('zero_y', 'ZeroY'),
                              ('full_x', 'FullX'), ('full_y', 'FullY')):
                target.set(crs(tag), format_fixed(getattr(geometry, attr), 3))
        elif mask.kind is MaskKind.RADIAL:
            for attr, tag in (('top', 'Top'), ('left', 'Left'),
                              ('bottom', 'Bottom'), ('right', 'Right'), ('angle', 'Angle')):
                target.set(crs(tag), format_fixed(getattr(geometry, attr), 3))
            target.set(crs('Midpoint'), format_int(geometry.midpoint))
            target.set(crs('Roundness'), format_int(geometry.roundness))
            target.set(crs('Feather'), format_int(geometry.feather))
            target.set(crs('Flipped'), format_bool(mask.flipped))
            target.set(crs('Version'), '2')
        elif mask.kind is MaskKind.BRUSH:
            if geometry.size is not None:
                target.set(crs('SizeX'), format_fixed(geometry.size, 3))
            if geometry.flow is not None:
                target.set(crs('Flow'), format_int(geometry.flow))
            if geometry.density is not None:
                target.set(crs('Density'), format_int(geometry.density))
        elif mask.kind is MaskKind.REGION:
            spec = geometry.region.spec
            target.set(crs('MaskVersion'), '1')
            target.set(crs('MaskSubType'), spec.sub_type)
            sub_category = geometry.resolved_sub_category
            if sub_category:
                target.set(crs('MaskSubCategoryID'), sub_category)
            target.set(crs('ReferencePoint'),
                       f"{format_fixed(geometry.reference_x, 3)} {format_fixed(geometry.reference_y, 3)}")
            target.set(crs('ErrorReason'), '0')
        elif mask.kind is MaskKind.RANGE_COLOR:
            range_elem = ET.SubElement(target, crs('CorrectionRangeMask'))
            range_desc = ET.SubElement(range_elem, rdf('Description'))
            range_desc.set(crs('Version'), '3')
            range_desc.set(crs('Type'), '1')
            range_desc.set(crs('ColorAmount'), format_fixed(geometry.color_amount, 3))
            range_desc.set(crs('Invert'), format_bool(geometry.invert))
            range_desc.set(crs('SampleType'), '0')
            if geometry.point_models:
                add_seq(range_desc, 'PointModels',
                        [' '.join(format_fixed(v, 6) for v in row) for row in geometry.point_models])
        elif mask.kind is MaskKind.RANGE_LUMINANCE:
            range_elem = ET.SubElement(target, crs('CorrectionRangeMask'))
            range_elem.set(crs('Version'), '3')
            range_elem.set(crs('Type'), '2')
            range_elem.set(crs('Invert'), format_bool(geometry.invert))
            range_elem.set(crs('SampleType'), '0')
            range_elem.set(crs('LumRange'), ' '.join(format_fixed(v, 6) for v in geometry.lum_range))
            range_elem.set(crs('LuminanceDepthSampleInfo'),
                           ' '.join(format_fixed(v, 6) for v in geometry.depth_sample_info))

    def _write_mask_common(self, target: ET.Element, mask: Mask, name: str):
        target.set(crs('What'), MASK_WHAT[mask.kind])
        target.set(crs('MaskActive'), 'true')
        target.set(crs('MaskName'), name)
        target.set(crs('MaskBlendMode'), '0')
        target.set(crs('MaskInverted'), format_bool(mask.inverted))
        if mask.kind in (MaskKind.REGION, MaskKind.RANGE_COLOR, MaskKind.RANGE_LUMINANCE):
            target.set(crs('MaskSyncID'), new_sync_id())
        target.set(crs('MaskValue'), '1')


def generate_xmp(vector: AdjustmentVector, options: Optional[ExportOptions] = None) -> str:
    """
    Generate a Lightroom preset (.xmp) for a vector.

    Args:
        vector: Adjustments to export
        options: Inclusion flags and strength (defaults when None)

    Returns:
        Complete XMP packet as a string
    """
    options = options or ExportOptions()
    preset_name = clean_preset_name(vector.name)
    profile_name = resolve_profile_name(vector)

    root = create_packet()
    description = settings_description(root)
    header = (
        ('Version', XMP_VERSION),
        ('ProcessVersion', PROCESS_VERSION),
        ('ProfileName', profile_name),
        ('Look', ''),
        ('HasSettings', 'True'),
        ('PresetType', 'Normal'),
        ('Cluster', options.group_name),
        ('ClusterGroup', options.group_name),
        ('PresetSubtype', 'Normal'),
        ('SupportsAmount', 'True'),
        ('SupportsAmount2', 'True'),
        ('SupportsColor', 'True'),
        ('SupportsMonochrome', 'True'),
    )
    for name, value in header:
        description.set(crs(name), value)

    add_alt(description, 'Name', preset_name)
    add_alt(description, 'Group', options.group_name)
    if vector.description:
        add_alt(description, 'Description', vector.description)

    XMPSettingsWriter(vector, options).write(description)

    logger.debug(f"Generated XMP preset '{preset_name}' ({profile_name}, "
                 f"{len(vector.masks) if options.masks else 0} masks)")
    return prettify_xml(root)
