"""
Local mask taxonomy for recipes.

Masks are a closed set of kinds, each carrying only the geometry that
kind needs. AI-detected regions share one geometry and are resolved
through REGION_TABLE, the single place that knows Lightroom's
MaskSubType / MaskSubCategoryID numbering.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .ranges import (
    LOCAL, PERCENT, SLIDER, UNIT, clean_text, is_number, numeric_values, sanitize, sanitize_fields,
)

logger = logging.getLogger(__name__)


class MaskKind(Enum):
    """Geometry families a mask can belong to."""
    RADIAL = "radial"
    LINEAR = "linear"
    BRUSH = "brush"
    RANGE_COLOR = "range_color"
    RANGE_LUMINANCE = "range_luminance"
    REGION = "region"  # AI-detected subject, face part, or scene part


class AIRegion(Enum):
    """AI-detected regions Lightroom can mask."""
    FACE_SKIN = "face_skin"
    IRIS_PUPIL = "iris_pupil"
    EYEBROWS = "eyebrows"
    LIPS = "lips"
    FACIAL_HAIR = "facial_hair"
    BODY_SKIN = "body_skin"
    EYE_WHITES = "eye_whites"
    HAIR = "hair"
    CLOTHING = "clothing"
    TEETH = "teeth"
    BACKGROUND = "background"
    ARCHITECTURE = "architecture"
    MOUNTAINS = "mountains"
    ARTIFICIAL_GROUND = "artificial_ground"
    NATURAL_GROUND = "natural_ground"
    VEGETATION = "vegetation"
    SKY = "sky"
    WATER = "water"
    SUBJECT = "subject"
    PERSON = "person"
    VEHICLE = "vehicle"
    ANIMAL = "animal"
    OBJECT = "object"

    @property
    def spec(self) -> 'RegionSpec':
        return REGION_TABLE[self]

    @property
    def category(self) -> str:
        return REGION_TABLE[self].category


@dataclass(frozen=True)
class RegionSpec:
    """Lightroom identifiers for one AI region."""
    sub_type: str
    sub_category_id: str  # empty when Lightroom uses none
    category: str  # face, landscape, subject, background, other
    description: str


REGION_TABLE: Dict[AIRegion, RegionSpec] = {
    AIRegion.FACE_SKIN: RegionSpec('3', '2', 'face', 'Facial skin'),
    AIRegion.IRIS_PUPIL: RegionSpec('3', '3', 'face', 'Iris and pupil'),
    AIRegion.EYEBROWS: RegionSpec('3', '9', 'face', 'Eyebrows'),
    AIRegion.LIPS: RegionSpec('3', '6', 'face', 'Lips'),
    AIRegion.FACIAL_HAIR: RegionSpec('3', '13', 'face', 'Facial hair'),
    AIRegion.BODY_SKIN: RegionSpec('3', '4', 'face', 'Body skin'),
    AIRegion.EYE_WHITES: RegionSpec('3', '8', 'face', 'Eye whites (sclera)'),
    AIRegion.HAIR: RegionSpec('3', '5', 'face', 'Hair'),
    AIRegion.CLOTHING: RegionSpec('3', '11', 'face', 'Clothing'),
    AIRegion.TEETH: RegionSpec('3', '12', 'face', 'Teeth'),
    AIRegion.BACKGROUND: RegionSpec('0', '22', 'background', 'General background'),
    AIRegion.ARCHITECTURE: RegionSpec('0', '50001', 'landscape', 'Architecture and buildings'),
    AIRegion.MOUNTAINS: RegionSpec('0', '50002', 'landscape', 'Mountains'),
    AIRegion.ARTIFICIAL_GROUND: RegionSpec('0', '50003', 'landscape', 'Artificial ground'),
    AIRegion.NATURAL_GROUND: RegionSpec('0', '50004', 'landscape', 'Natural ground'),
    AIRegion.VEGETATION: RegionSpec('0', '50005', 'landscape', 'Vegetation'),
    AIRegion.SKY: RegionSpec('0', '50006', 'landscape', 'Sky'),
    AIRegion.WATER: RegionSpec('0', '50007', 'landscape', 'Water'),
    AIRegion.SUBJECT: RegionSpec('1', '0', 'subject', 'Subject or person'),
    AIRegion.PERSON: RegionSpec('1', '0', 'subject', 'Person'),
    AIRegion.VEHICLE: RegionSpec('1', '', 'other', 'Vehicle'),
    AIRegion.ANIMAL: RegionSpec('1', '', 'other', 'Animal'),
    AIRegion.OBJECT: RegionSpec('1', '', 'other', 'General object'),
}

# Reverse lookup for parsing; the first region listed for a key wins
_XMP_REGION_LOOKUP: Dict[Tuple[str, str], AIRegion] = {}
for _region, _spec in REGION_TABLE.items():
    _XMP_REGION_LOOKUP.setdefault((_spec.sub_type, _spec.sub_category_id), _region)

_MASK_SYNONYMS = {
    'face': 'face_skin',
    'skin': 'face_skin',
    'facial_skin': 'face_skin',
    'face skin': 'face_skin',
    'eye': 'iris_pupil',
    'eyes': 'iris_pupil',
    'iris': 'iris_pupil',
    'pupil': 'iris_pupil',
    'eye_white': 'eye_whites',
    'sclera': 'eye_whites',
    'tooth': 'teeth',
    'clothes': 'clothing',
    'beard': 'facial_hair',
    'body': 'body_skin',
    'people': 'subject',
    'landscape': 'background',
    'gradient': 'linear',
    'circular': 'radial',
    'color_range': 'range_color',
    'luminance_range': 'range_luminance',
}

GEOMETRIC_TYPES = {kind.value for kind in MaskKind if kind is not MaskKind.REGION}


def normalize_mask_type(text: Any) -> str:
    """
    Map a loosely specified mask type onto a canonical label.

    Geometric kinds pass through, AI region labels pass through,
    common synonyms are translated, and anything unknown becomes 'subject'.
    """
    if not text or not isinstance(text, str):
        return AIRegion.SUBJECT.value
    label = text.strip().lower()
    if label in GEOMETRIC_TYPES:
        return label
    if label in _MASK_SYNONYMS:
        return _MASK_SYNONYMS[label]
    try:
        return AIRegion(label).value
    except ValueError:
        logger.debug(f"Unknown mask type '{text}', using subject")
        return AIRegion.SUBJECT.value


def region_from_xmp(sub_type: Any, sub_category: Any = None) -> AIRegion:
    """Resolve XMP MaskSubType / MaskSubCategoryID to a region (subject if unknown)."""
    key = (str(sub_type).strip() if sub_type is not None else '',
           str(sub_category).strip() if sub_category is not None else '')
    return _XMP_REGION_LOOKUP.get(key, AIRegion.SUBJECT)


@dataclass(frozen=True)
class LocalAdjustments:
    """Per-mask adjustments, all in -1..1."""
    exposure: Optional[float] = None
    contrast: Optional[float] = None
    highlights: Optional[float] = None
    shadows: Optional[float] = None
    whites: Optional[float] = None
    blacks: Optional[float] = None
    clarity: Optional[float] = None
    dehaze: Optional[float] = None
    texture: Optional[float] = None
    saturation: Optional[float] = None
    temperature: Optional[float] = None
    tint: Optional[float] = None

    NAMES = ('exposure', 'contrast', 'highlights', 'shadows', 'whites', 'blacks',
             'clarity', 'dehaze', 'texture', 'saturation', 'temperature', 'tint')

    def __post_init__(self):
        sanitize_fields(self, {name: LOCAL for name in self.NAMES})

    def values(self) -> Dict[str, float]:
        return numeric_values(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'LocalAdjustments':
        """Accepts both 'local_exposure' and 'exposure' style keys."""
        data = data or {}
        kwargs = {}
        for name in cls.NAMES:
            if f'local_{name}' in data:
                kwargs[name] = data[f'local_{name}']
            elif name in data:
                kwargs[name] = data[name]
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, float]:
        return {f'local_{name}': value for name, value in self.values().items()}


@dataclass(frozen=True)
class RadialGeometry:
    """Ellipse bounding box (normalized) plus shape controls."""
    top: float = 0.2
    left: float = 0.2
    bottom: float = 0.8
    right: float = 0.8
    angle: float = 0.0
    midpoint: float = 50.0
    roundness: float = 0.0
    feather: float = 75.0

    _DEFAULTS = {'top': 0.2, 'left': 0.2, 'bottom': 0.8, 'right': 0.8,
                 'angle': 0.0, 'midpoint': 50.0, 'roundness': 0.0, 'feather': 75.0}

    def __post_init__(self):
        bounds = {'top': UNIT, 'left': UNIT, 'bottom': UNIT, 'right': UNIT,
                  'angle': (-360.0, 360.0), 'midpoint': PERCENT,
                  'roundness': SLIDER, 'feather': PERCENT}
        _sanitize_with_defaults(self, bounds, self._DEFAULTS)


@dataclass(frozen=True)
class LinearGeometry:
    """Gradient from the zero point (no effect) to the full point."""
    zero_x: float = 0.5
    zero_y: float = 0.5
    full_x: float = 0.5
    full_y: float = 0.8

    _DEFAULTS = {'zero_x': 0.5, 'zero_y': 0.5, 'full_x': 0.5, 'full_y': 0.8}

    def __post_init__(self):
        _sanitize_with_defaults(self, {name: UNIT for name in self._DEFAULTS}, self._DEFAULTS)


@dataclass(frozen=True)
class BrushGeometry:
    size: Optional[float] = None
    flow: Optional[float] = None
    density: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {'size': (0.0, 1000.0), 'flow': PERCENT, 'density': PERCENT})


@dataclass(frozen=True)
class ColorRangeGeometry:
    color_amount: float = 0.5
    invert: bool = False
    point_models: Tuple[Tuple[float, ...], ...] = ()

    def __post_init__(self):
        _sanitize_with_defaults(self, {'color_amount': UNIT}, {'color_amount': 0.5})
        object.__setattr__(self, 'invert', bool(self.invert))
        object.__setattr__(self, 'point_models', _float_rows(self.point_models))


@dataclass(frozen=True)
class LuminanceRangeGeometry:
    lum_range: Tuple[float, float, float, float] = (0.0, 1.0, 1.0, 1.0)
    depth_sample_info: Tuple[float, float, float] = (0.0, 0.5, 0.5)
    invert: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'lum_range',
                           _fixed_floats(self.lum_range, (0.0, 1.0, 1.0, 1.0)))
        object.__setattr__(self, 'depth_sample_info',
                           _fixed_floats(self.depth_sample_info, (0.0, 0.5, 0.5)))
        object.__setattr__(self, 'invert', bool(self.invert))


@dataclass(frozen=True)
class RegionGeometry:
    """AI region with an optional reference point the detector keyed on."""
    region: AIRegion = AIRegion.SUBJECT
    reference_x: float = 0.5
    reference_y: float = 0.5
    sub_category_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.region, AIRegion):
            label = normalize_mask_type(self.region)
            region = AIRegion.SUBJECT if label in GEOMETRIC_TYPES else AIRegion(label)
            object.__setattr__(self, 'region', region)
        _sanitize_with_defaults(self, {'reference_x': UNIT, 'reference_y': UNIT},
                                {'reference_x': 0.5, 'reference_y': 0.5})
        if self.sub_category_id is not None:
            object.__setattr__(self, 'sub_category_id', str(self.sub_category_id))

    @property
    def resolved_sub_category(self) -> str:
        """Table value wins; an explicit id is used only when the table has none."""
        table_value = self.region.spec.sub_category_id
        if table_value:
            return table_value
        return self.sub_category_id or ''


Geometry = Union[RadialGeometry, LinearGeometry, BrushGeometry, ColorRangeGeometry,
                 LuminanceRangeGeometry, RegionGeometry]

GEOMETRY_TYPES = {
    MaskKind.RADIAL: RadialGeometry,
    MaskKind.LINEAR: LinearGeometry,
    MaskKind.BRUSH: BrushGeometry,
    MaskKind.RANGE_COLOR: ColorRangeGeometry,
    MaskKind.RANGE_LUMINANCE: LuminanceRangeGeometry,
    MaskKind.REGION: RegionGeometry,
}


@dataclass(frozen=True)
class Mask:
    """A named local correction with geometry matching its kind."""
    kind: MaskKind
    name: Optional[str] = None
    geometry: Optional[Geometry] = None
    adjustments: LocalAdjustments = field(default_factory=LocalAdjustments)
    inverted: bool = False
    flipped: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'name', clean_text(self.name))
        expected = GEOMETRY_TYPES[self.kind]
        if self.geometry is None:
            object.__setattr__(self, 'geometry', expected())
        elif not isinstance(self.geometry, expected):
            raise TypeError(
                f"{self.kind.value} mask needs {expected.__name__}, "
                f"got {type(self.geometry).__name__}"
            )

    @property
    def label(self) -> str:
        """Canonical type label ('radial', 'sky', 'face_skin', ...)."""
        if self.kind is MaskKind.REGION:
            return self.geometry.region.value
        return self.kind.value

    @property
    def region(self) -> Optional[AIRegion]:
        return self.geometry.region if self.kind is MaskKind.REGION else None

    @classmethod
    def radial(cls, name: str = None, **geometry) -> 'Mask':
        return cls(MaskKind.RADIAL, name, RadialGeometry(**geometry))

    @classmethod
    def linear(cls, name: str = None, **geometry) -> 'Mask':
        return cls(MaskKind.LINEAR, name, LinearGeometry(**geometry))

    @classmethod
    def ai_region(cls, region: Union[AIRegion, str], name: str = None, **geometry) -> 'Mask':
        return cls(MaskKind.REGION, name, RegionGeometry(region=region, **geometry))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Mask':
        """Create from the flat collaborator keys ('top', 'zeroX', 'referenceX', ...)."""
        label = normalize_mask_type(data.get('type'))
        name = data.get('name') if isinstance(data.get('name'), str) else None

        if label == 'radial':
            kind = MaskKind.RADIAL
            geometry = RadialGeometry(**_pick(data, {
                'top': 'top', 'left': 'left', 'bottom': 'bottom', 'right': 'right',
                'angle': 'angle', 'midpoint': 'midpoint', 'roundness': 'roundness',
                'feather': 'feather'}))
        elif label == 'linear':
            kind = MaskKind.LINEAR
            geometry = LinearGeometry(**_pick(data, {
                'zeroX': 'zero_x', 'zeroY': 'zero_y', 'fullX': 'full_x', 'fullY': 'full_y'}))
        elif label == 'brush':
            kind = MaskKind.BRUSH
            geometry = BrushGeometry(**_pick(data, {
                'brushSize': 'size', 'brushFlow': 'flow', 'brushDensity': 'density'}))
        elif label == 'range_color':
            kind = MaskKind.RANGE_COLOR
            geometry = ColorRangeGeometry(
                color_amount=data.get('colorAmount'),
                invert=bool(data.get('invert', False)),
                point_models=data.get('pointModels') or (),
            )
        elif label == 'range_luminance':
            kind = MaskKind.RANGE_LUMINANCE
            geometry = LuminanceRangeGeometry(
                lum_range=data.get('lumRange'),
                depth_sample_info=data.get('luminanceDepthSampleInfo'),
                invert=bool(data.get('invert', False)),
            )
        else:
            kind = MaskKind.REGION
            sub_category = data.get('subCategoryId')
            geometry = RegionGeometry(
                region=AIRegion(label),
                reference_x=data.get('referenceX'),
                reference_y=data.get('referenceY'),
                sub_category_id=str(int(sub_category)) if is_number(sub_category) else None,
            )

        return cls(
            kind=kind,
            name=name,
            geometry=geometry,
            adjustments=LocalAdjustments.from_dict(data.get('adjustments')),
            inverted=bool(data.get('inverted', False)),
            flipped=bool(data.get('flipped', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the flat collaborator keys."""
        result: Dict[str, Any] = {'type': self.label}
        if self.name:
            result['name'] = self.name
        g = self.geometry
        if self.kind is MaskKind.RADIAL:
            result.update(top=g.top, left=g.left, bottom=g.bottom, right=g.right,
                          angle=g.angle, midpoint=g.midpoint, roundness=g.roundness,
                          feather=g.feather)
        elif self.kind is MaskKind.LINEAR:
            result.update(zeroX=g.zero_x, zeroY=g.zero_y, fullX=g.full_x, fullY=g.full_y)
        elif self.kind is MaskKind.BRUSH:
            for key, value in (('brushSize', g.size), ('brushFlow', g.flow),
                               ('brushDensity', g.density)):
                if value is not None:
                    result[key] = value
        elif self.kind is MaskKind.RANGE_COLOR:
            result.update(colorAmount=g.color_amount, invert=g.invert,
                          pointModels=[list(row) for row in g.point_models])
        elif self.kind is MaskKind.RANGE_LUMINANCE:
            result.update(lumRange=list(g.lum_range),
                          luminanceDepthSampleInfo=list(g.depth_sample_info),
                          invert=g.invert)
        else:
            result.update(referenceX=g.reference_x, referenceY=g.reference_y)
            if g.sub_category_id:
                result['subCategoryId'] = int(g.sub_category_id) \
                    if g.sub_category_id.lstrip('-').isdigit() else g.sub_category_id
        result['inverted'] = self.inverted
        result['flipped'] = self.flipped
        adjustments = self.adjustments.to_dict()
        if adjustments:
            result['adjustments'] = adjustments
        return result


def _pick(data: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    return {attr: data[key] for key, attr in mapping.items() if key in data}


def _sanitize_with_defaults(instance: Any, bounds: Dict[str, Tuple[float, float]],
                            defaults: Dict[str, float]) -> None:
    """Like sanitize_fields, but absent values fall back to the geometry default."""
    for name, limits in bounds.items():
        value = sanitize(getattr(instance, name), limits)
        object.__setattr__(instance, name, defaults[name] if value is None else value)


def _fixed_floats(values: Any, default: Tuple[float, ...]) -> Tuple[float, ...]:
    if not isinstance(values, (list, tuple)) or len(values) != len(default) \
            or not all(is_number(v) for v in values):
        return default
    return tuple(float(v) for v in values)


def _float_rows(rows: Any) -> Tuple[Tuple[float, ...], ...]:
    if not isinstance(rows, (list, tuple)):
        return ()
    result = []
    for row in rows:
        if isinstance(row, (list, tuple)):
            values = tuple(float(v) for v in row if is_number(v))
            if values:
                result.append(values)
    return tuple(result)
