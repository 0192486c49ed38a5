"""
Lightroom / Camera Raw XMP preset parser.

Recovers an AdjustmentVector from preset text. Parsing never raises:
malformed documents produce an unsuccessful XMPParseResult, and
individual unreadable values are skipped.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import xml.etree.ElementTree as ET

from ..recipe.masks import AIRegion, region_from_xmp
from ..recipe.models import BLACK_AND_WHITE, AdjustmentVector
from ..recipe.ranges import BANDS
from .xmp_common import XMP_NAMESPACES, rdf
from .xmp_generator import (
    BASIC_TAGS, CURVE_TAGS, GRADE_WHEEL_TAGS, GRAIN_TAGS, LOCAL_TAGS,
    PARAMETRIC_TAGS, TREATMENT_BW, VIGNETTE_TAGS,
)

logger = logging.getLogger(__name__)

_CRS_PREFIX = f"{{{XMP_NAMESPACES['crs']}}}"

# crs tag -> flat recipe key
SCALAR_KEYS: Dict[str, str] = {
    'Temperature': 'temperature',
    'Tint': 'tint',
    'Exposure2012': 'exposure',
    'Saturation': 'saturation',
    'ColorGradeBlending': 'color_grade_blending',
    'ColorGradeBalance': 'color_grade_balance',
}
SCALAR_KEYS.update({tag: attr for attr, tag in BASIC_TAGS})
SCALAR_KEYS.update({tag: f'parametric_{attr}' for attr, tag, _ in PARAMETRIC_TAGS})
SCALAR_KEYS.update({tag: f'grain_{attr}' for attr, tag in GRAIN_TAGS})
SCALAR_KEYS.update({tag: f'vignette_{attr}' for attr, tag in VIGNETTE_TAGS})
for _band in BANDS:
    _tag = _band.capitalize()
    SCALAR_KEYS[f'HueAdjustment{_tag}'] = f'hue_{_band}'
    SCALAR_KEYS[f'SaturationAdjustment{_tag}'] = f'sat_{_band}'
    SCALAR_KEYS[f'LuminanceAdjustment{_tag}'] = f'lum_{_band}'
    SCALAR_KEYS[f'GrayMixer{_tag}'] = f'gray_{_band}'
for _wheel, _tag in GRADE_WHEEL_TAGS:
    for _suffix, _xmp_suffix in (('hue', 'Hue'), ('sat', 'Sat'), ('lum', 'Lum')):
        SCALAR_KEYS[f'ColorGrade{_tag}{_xmp_suffix}'] = f'color_grade_{_wheel}_{_suffix}'

CURVE_KEYS = {tag: key for key, tag in zip(
    ('tone_curve', 'tone_curve_red', 'tone_curve_green', 'tone_curve_blue'),
    (tag for _, tag in CURVE_TAGS))}

_POINT_COLOR = re.compile(r'^PointColor([1-9])$')


@dataclass
class XMPParseResult:
    """Outcome of parsing one preset."""
    success: bool
    adjustments: Optional[AdjustmentVector] = None
    error: Optional[str] = None
    preset_name: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def _local(tag: str) -> Optional[str]:
    """Local name of a crs-namespaced tag, else None."""
    if tag.startswith(_CRS_PREFIX):
        return tag[len(_CRS_PREFIX):]
    return None


def _to_float(text: Any) -> Optional[float]:
    if text is None:
        return None
    try:
        return float(str(text).strip())
    except ValueError:
        return None


def _floats(text: str, separator: Optional[str] = None) -> List[float]:
    """Parse a list of numbers; any bad token drops the whole list."""
    pattern = r'\s*,\s*' if separator == ',' else r'[,\s]+'
    tokens = [t for t in re.split(pattern, (text or '').strip()) if t]
    values = [_to_float(t) for t in tokens]
    if not values or any(v is None for v in values):
        return []
    return values


def _properties(elem: ET.Element) -> Dict[str, Any]:
    """
    Collect crs properties written as attributes or as simple child elements.

    Child elements holding an rdf:Alt, an rdf:Seq or attributes are returned as the
    element itself so callers can decide how to read them.
    """
    props: Dict[str, Any] = {}
    for key, value in elem.attrib.items():
        name = _local(key)
        if name:
            props[name] = value
    for child in elem:
        name = _local(child.tag)
        if not name:
            continue
        if len(child) or child.attrib:
            props[name] = child
        elif child.text is not None and child.text.strip():
            props[name] = child.text.strip()
    return props


def _alt_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, ET.Element):
        li = value.find(f"{rdf('Alt')}/{rdf('li')}")
        if li is not None and li.text:
            return li.text.strip()
    return None


def _seq_items(value: Any) -> List[str]:
    if not isinstance(value, ET.Element):
        return []
    return [li.text.strip() for li in value.iter(rdf('li')) if li.text and li.text.strip()]


def _parse_curve(value: Any) -> List[List[float]]:
    points = []
    for item in _seq_items(value):
        pair = _floats(item)
        if len(pair) == 2:
            points.append(pair)
        else:
            logger.debug(f"Skipping malformed curve point '{item}'")
    return points


def _mask_target(li: ET.Element) -> ET.Element:
    """Mask attributes sit on the li itself or on a nested rdf:Description."""
    nested = li.find(rdf('Description'))
    return nested if nested is not None else li


def _parse_geometry(props: Dict[str, Any], mask: Dict[str, Any]) -> bool:
    """Fill mask type and geometry keys; False when the kind is unknown."""
    what = str(props.get('What', ''))

    if what == 'Mask/CircularGradient':
        mask['type'] = 'radial'
        for tag, key in (('Top', 'top'), ('Left', 'left'), ('Bottom', 'bottom'),
                         ('Right', 'right'), ('Angle', 'angle'), ('Midpoint', 'midpoint'),
                         ('Roundness', 'roundness'), ('Feather', 'feather')):
            value = _to_float(props.get(tag))
            if value is not None:
                mask[key] = value
        mask['flipped'] = str(props.get('Flipped', '')).lower() == 'true'
    elif what == 'Mask/Gradient':
        mask['type'] = 'linear'
        for tag, key in (('ZeroX', 'zeroX'), ('ZeroY', 'zeroY'),
                         ('FullX', 'fullX'), ('FullY', 'fullY')):
            value = _to_float(props.get(tag))
            if value is not None:
                mask[key] = value
    elif what == 'Mask/Brush':
        mask['type'] = 'brush'
        for tag, key in (('SizeX', 'brushSize'), ('Flow', 'brushFlow'), ('Density', 'brushDensity')):
            value = _to_float(props.get(tag))
            if value is not None:
                mask[key] = value
    elif what == 'Mask/Image':
        sub_category = props.get('MaskSubCategoryID')
        region = region_from_xmp(props.get('MaskSubType'), sub_category)
        mask['type'] = region.value
        point = _floats(str(props.get('ReferencePoint', '')))
        if len(point) == 2:
            mask['referenceX'], mask['referenceY'] = point
        sub_category_value = _to_float(sub_category)
        if sub_category_value is not None and region is not AIRegion.SUBJECT:
            mask['subCategoryId'] = sub_category_value
    elif what == 'Mask/RangeMask':
        range_elem = props.get('CorrectionRangeMask')
        if not isinstance(range_elem, ET.Element):
            return False
        range_props = _properties(range_elem)
        nested = range_elem.find(rdf('Description'))
        if nested is not None:
            range_props.update(_properties(nested))
        invert = str(range_props.get('Invert', '')).lower() == 'true'
        range_type = str(range_props.get('Type', '')).strip()
        if range_type == '1':
            mask['type'] = 'range_color'
            mask['invert'] = invert
            amount = _to_float(range_props.get('ColorAmount'))
            if amount is not None:
                mask['colorAmount'] = amount
            rows = [_floats(item) for item in _seq_items(range_props.get('PointModels'))]
            mask['pointModels'] = [row for row in rows if row]
        elif range_type == '2':
            mask['type'] = 'range_luminance'
            mask['invert'] = invert
            lum_range = _floats(str(range_props.get('LumRange', '')))
            if lum_range:
                mask['lumRange'] = lum_range
            depth = _floats(str(range_props.get('LuminanceDepthSampleInfo', '')))
            if depth:
                mask['luminanceDepthSampleInfo'] = depth
        else:
            return False
    else:
        return False
    return True


def _parse_masks(corrections: Any) -> List[Dict[str, Any]]:
    masks = []
    if not isinstance(corrections, ET.Element):
        return masks
    seq = corrections.find(rdf('Seq'))
    if seq is None:
        return masks

    for li in seq.findall(rdf('li')):
        correction = _mask_target(li)
        props = _properties(correction)
        mask: Dict[str, Any] = {'name': props.get('CorrectionName')}

        adjustments = {}
        for attr, tag in LOCAL_TAGS:
            value = _to_float(props.get(tag))
            if value is not None:
                adjustments[attr] = value
        mask['adjustments'] = adjustments

        mask_seq = props.get('CorrectionMasks')
        mask_li = mask_seq.find(f"{rdf('Seq')}/{rdf('li')}") if isinstance(mask_seq, ET.Element) else None
        if mask_li is None:
            logger.debug(f"Correction '{mask['name']}' has no mask geometry, skipping")
            continue
        mask_props = _properties(_mask_target(mask_li))
        mask['inverted'] = str(mask_props.get('MaskInverted', '')).lower() == 'true'
        if not _parse_geometry(mask_props, mask):
            logger.debug(f"Unknown mask kind '{mask_props.get('What')}', skipping")
            continue
        masks.append(mask)
    return masks


def _validate(text: Any) -> Optional[str]:
    if not isinstance(text, str) or not text.strip():
        return "Invalid XMP content"
    if 'crs:' not in text or 'rdf:RDF' not in text:
        return "Not a valid Lightroom XMP preset"
    return None


def parse_xmp(text: str) -> XMPParseResult:
    """
    Parse a Lightroom preset into an AdjustmentVector.

    Args:
        text: XMP packet text (with or without the xpacket wrapper)

    Returns:
        XMPParseResult; success is False with an error message when the
        text is not a readable preset
    """
    error = _validate(text)
    if error:
        return XMPParseResult(success=False, error=error)

    body = text.lstrip('\ufeff')
    try:
        root = ET.fromstring(body.strip())
    except ET.ParseError as e:
        logger.warning(f"XMP parse error: {e}")
        return XMPParseResult(success=False, error=f"Invalid XMP content: {e}")

    rdf_root = root if root.tag == rdf('RDF') else root.find(f".//{rdf('RDF')}")
    if rdf_root is None:
        return XMPParseResult(success=False, error="Not a valid Lightroom XMP preset")

    props: Dict[str, Any] = {}
    for description in rdf_root.findall(rdf('Description')):
        props.update(_properties(description))

    data: Dict[str, Any] = {}
    skipped = []
    for tag, key in SCALAR_KEYS.items():
        if tag not in props:
            continue
        value = _to_float(props[tag])
        if value is None:
            skipped.append(tag)
        else:
            data[key] = value

    for tag, key in CURVE_KEYS.items():
        points = _parse_curve(props.get(tag))
        if points:
            data[key] = points

    point_colors = []
    for tag in sorted(t for t in props if _POINT_COLOR.match(t)):
        values = _floats(str(props[tag]), ',')
        if values:
            point_colors.append(values)
        else:
            skipped.append(tag)
    if point_colors:
        data['point_colors'] = point_colors

    treatment = props.get('Treatment')
    if treatment == TREATMENT_BW or str(props.get('ConvertToGrayscale', '')).lower() == 'true':
        data['treatment'] = BLACK_AND_WHITE

    profile = props.get('ProfileName')
    if isinstance(profile, str) and profile:
        data['camera_profile'] = profile

    preset_name = _alt_text(props.get('Name'))
    description = _alt_text(props.get('Description'))
    data['preset_name'] = preset_name
    data['description'] = description

    masks = _parse_masks(props.get('MaskGroupBasedCorrections'))
    if masks:
        data['masks'] = masks

    if skipped:
        logger.debug(f"Skipped unreadable XMP values: {', '.join(skipped)}")

    vector = AdjustmentVector.from_dict(data)
    metadata = {
        'preset_type': props.get('PresetType') if isinstance(props.get('PresetType'), str) else None,
        'version': props.get('Version') if isinstance(props.get('Version'), str) else None,
        'has_masks': bool(masks),
        'has_color_grading': any(t.startswith('ColorGrade') for t in props),
        'has_hsl': any(t.startswith(('HueAdjustment', 'SaturationAdjustment', 'LuminanceAdjustment'))
                       for t in props),
        'has_curves': any(key in data for key in CURVE_KEYS.values()),
    }

    logger.debug(f"Parsed XMP preset '{preset_name}' ({len(data)} fields, {len(masks)} masks)")
    return XMPParseResult(
        success=True,
        adjustments=vector,
        preset_name=preset_name,
        description=description,
        metadata=metadata,
    )
