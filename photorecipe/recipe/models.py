"""
Data models for photographic recipes.

An AdjustmentVector is the complete, editor-agnostic description of a look.
Vectors are immutable: every constructor path (hand-built, from_dict, the
XMP parser, replace) runs the same sanitizing __post_init__ chain, so
downstream code never has to re-check ranges or finiteness.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .curves import CurvePoint, curve_to_list, is_identity_curve, normalize_curve
from .masks import Mask
from .ranges import (
    BANDS, BASIC_RANGES, NEUTRAL_TEMPERATURE, PERCENT, SLIDER, clean_text,
    is_number, is_zero, numeric_values, sanitize, sanitize_fields,
)

logger = logging.getLogger(__name__)

COLOR = 'color'
BLACK_AND_WHITE = 'black_and_white'


@dataclass(frozen=True)
class HSLBand:
    """Hue / saturation / luminance shift for one band, each -100..100."""
    hue: Optional[float] = None
    saturation: Optional[float] = None
    luminance: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {'hue': SLIDER, 'saturation': SLIDER, 'luminance': SLIDER})

    def is_neutral(self) -> bool:
        return is_zero(self.hue) and is_zero(self.saturation) and is_zero(self.luminance)


def _band_field():
    return field(default_factory=HSLBand)


@dataclass(frozen=True)
class HSLAdjustments:
    """Per-hue color mixer over the eight bands."""
    red: HSLBand = _band_field()
    orange: HSLBand = _band_field()
    yellow: HSLBand = _band_field()
    green: HSLBand = _band_field()
    aqua: HSLBand = _band_field()
    blue: HSLBand = _band_field()
    purple: HSLBand = _band_field()
    magenta: HSLBand = _band_field()

    def __post_init__(self):
        for name in BANDS:
            value = getattr(self, name)
            if isinstance(value, dict):
                object.__setattr__(self, name, HSLBand(**value))
            elif not isinstance(value, HSLBand):
                object.__setattr__(self, name, HSLBand())

    def bands(self) -> List[Tuple[str, HSLBand]]:
        return [(name, getattr(self, name)) for name in BANDS]

    def is_neutral(self) -> bool:
        return all(band.is_neutral() for _, band in self.bands())


@dataclass(frozen=True)
class GrayMixer:
    """Black & white mixer: per-band luminance contribution, -100..100."""
    red: Optional[float] = None
    orange: Optional[float] = None
    yellow: Optional[float] = None
    green: Optional[float] = None
    aqua: Optional[float] = None
    blue: Optional[float] = None
    purple: Optional[float] = None
    magenta: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {name: SLIDER for name in BANDS})

    def bands(self) -> List[Tuple[str, Optional[float]]]:
        return [(name, getattr(self, name)) for name in BANDS]

    def has_values(self) -> bool:
        return any(value is not None for _, value in self.bands())


@dataclass(frozen=True)
class ColorTreatment:
    hsl: HSLAdjustments = field(default_factory=HSLAdjustments)
    name = COLOR


@dataclass(frozen=True)
class MonochromeTreatment:
    gray_mixer: GrayMixer = field(default_factory=GrayMixer)
    name = BLACK_AND_WHITE


Treatment = Union[ColorTreatment, MonochromeTreatment]

_MONOCHROME_NAMES = {BLACK_AND_WHITE, 'black & white', 'black and white', 'monochrome', 'bw'}


def treatment_from_name(name: str) -> Treatment:
    """'black_and_white' (or 'monochrome', 'Black & White') gives a default monochrome treatment."""
    if name.strip().lower() in _MONOCHROME_NAMES:
        return MonochromeTreatment()
    if name.strip().lower() != COLOR:
        logger.warning(f"Unknown treatment {name!r}, using color")
    return ColorTreatment()


@dataclass(frozen=True)
class ColorWheel:
    """One color-grading wheel. Hue wraps into [0, 360)."""
    hue: Optional[float] = None
    saturation: Optional[float] = None
    luminance: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {'saturation': PERCENT, 'luminance': SLIDER}, hue_fields=('hue',))

    def is_neutral(self) -> bool:
        return is_zero(self.saturation) and is_zero(self.luminance)


@dataclass(frozen=True)
class ColorGrading:
    """Three-way color grading plus a global wheel."""
    shadow: ColorWheel = field(default_factory=ColorWheel)
    midtone: ColorWheel = field(default_factory=ColorWheel)
    highlight: ColorWheel = field(default_factory=ColorWheel)
    global_: ColorWheel = field(default_factory=ColorWheel)
    blending: Optional[float] = None
    balance: Optional[float] = None

    WHEELS = ('shadow', 'midtone', 'highlight', 'global')

    def __post_init__(self):
        sanitize_fields(self, {'blending': PERCENT, 'balance': SLIDER})
        for name in ('shadow', 'midtone', 'highlight', 'global_'):
            if not isinstance(getattr(self, name), ColorWheel):
                object.__setattr__(self, name, ColorWheel())

    def wheel(self, name: str) -> ColorWheel:
        return self.global_ if name == 'global' else getattr(self, name)

    def is_neutral(self) -> bool:
        return all(self.wheel(name).is_neutral() for name in self.WHEELS)

    def has_values(self) -> bool:
        if self.blending is not None or self.balance is not None:
            return True
        return any(numeric_values(self.wheel(name)) for name in self.WHEELS)


@dataclass(frozen=True)
class ParametricCurve:
    """Region-based tone curve: four sliders plus three split points."""
    shadows: Optional[float] = None
    darks: Optional[float] = None
    lights: Optional[float] = None
    highlights: Optional[float] = None
    shadow_split: Optional[float] = None
    midtone_split: Optional[float] = None
    highlight_split: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {
            'shadows': SLIDER, 'darks': SLIDER, 'lights': SLIDER, 'highlights': SLIDER,
            'shadow_split': PERCENT, 'midtone_split': PERCENT, 'highlight_split': PERCENT,
        })

    def is_neutral(self) -> bool:
        return all(is_zero(getattr(self, name))
                   for name in ('shadows', 'darks', 'lights', 'highlights'))


@dataclass(frozen=True)
class ToneCurves:
    """Point curves in the 0..255 domain; composite applies to all channels."""
    composite: Tuple[CurvePoint, ...] = ()
    red: Tuple[CurvePoint, ...] = ()
    green: Tuple[CurvePoint, ...] = ()
    blue: Tuple[CurvePoint, ...] = ()

    CHANNELS = ('composite', 'red', 'green', 'blue')

    def __post_init__(self):
        for name in self.CHANNELS:
            object.__setattr__(self, name, normalize_curve(getattr(self, name)))

    def is_neutral(self) -> bool:
        return all(is_identity_curve(getattr(self, name)) for name in self.CHANNELS)

    def has_values(self) -> bool:
        return any(getattr(self, name) for name in self.CHANNELS)


@dataclass(frozen=True)
class Grain:
    amount: Optional[float] = None
    size: Optional[float] = None
    frequency: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {'amount': PERCENT, 'size': PERCENT, 'frequency': PERCENT})


@dataclass(frozen=True)
class Vignette:
    """Post-crop vignette."""
    amount: Optional[float] = None
    midpoint: Optional[float] = None
    feather: Optional[float] = None
    roundness: Optional[float] = None
    style: Optional[int] = None  # 0 highlight priority, 1 color priority, 2 paint overlay
    highlight_contrast: Optional[float] = None

    def __post_init__(self):
        sanitize_fields(self, {
            'amount': SLIDER, 'midpoint': PERCENT, 'feather': PERCENT,
            'roundness': SLIDER, 'highlight_contrast': PERCENT,
        })
        style = sanitize(self.style, (0, 2))
        object.__setattr__(self, 'style', None if style is None else int(round(style)))


@dataclass(frozen=True)
class PointColors:
    """Point color samples (up to four are exported) and their variance."""
    colors: Tuple[Tuple[float, ...], ...] = ()
    variance: Tuple[float, ...] = ()

    def __post_init__(self):
        rows = []
        for row in self.colors if isinstance(self.colors, (list, tuple)) else ():
            if isinstance(row, (list, tuple)):
                values = tuple(float(v) for v in row if is_number(v))
                if values:
                    rows.append(values)
        object.__setattr__(self, 'colors', tuple(rows))
        variance = self.variance if isinstance(self.variance, (list, tuple)) else ()
        object.__setattr__(self, 'variance', tuple(float(v) for v in variance if is_number(v)))


# Flat collaborator keys for the basic scalar fields
BASIC_FIELDS = ('exposure', 'contrast', 'highlights', 'shadows', 'whites', 'blacks',
                'clarity', 'vibrance', 'saturation', 'brightness', 'temperature', 'tint')

_HSL_PREFIXES = {'hue': 'hue', 'sat': 'saturation', 'lum': 'luminance'}
_WHEEL_SUFFIXES = {'hue': 'hue', 'sat': 'saturation', 'lum': 'luminance'}
_PARAMETRIC_FIELDS = ('shadows', 'darks', 'lights', 'highlights',
                      'shadow_split', 'midtone_split', 'highlight_split')
_CURVE_KEYS = {'composite': 'tone_curve', 'red': 'tone_curve_red',
               'green': 'tone_curve_green', 'blue': 'tone_curve_blue'}
_VIGNETTE_FIELDS = ('amount', 'midpoint', 'feather', 'roundness', 'style', 'highlight_contrast')
_GRAIN_FIELDS = ('amount', 'size', 'frequency')

KNOWN_KEYS = set(BASIC_FIELDS) | {
    'preset_name', 'name', 'description', 'reasoning', 'confidence',
    'camera_profile', 'profile_name', 'treatment', 'monochrome',
    'color_grade_blending', 'color_grade_balance',
    'point_colors', 'color_variance', 'masks',
}
KNOWN_KEYS |= {f'{prefix}_{band}' for prefix in _HSL_PREFIXES for band in BANDS}
KNOWN_KEYS |= {f'gray_{band}' for band in BANDS}
KNOWN_KEYS |= {f'color_grade_{wheel}_{suffix}'
               for wheel in ColorGrading.WHEELS for suffix in _WHEEL_SUFFIXES}
KNOWN_KEYS |= {f'parametric_{name}' for name in _PARAMETRIC_FIELDS}
KNOWN_KEYS |= set(_CURVE_KEYS.values())
KNOWN_KEYS |= {f'vignette_{name}' for name in _VIGNETTE_FIELDS}
KNOWN_KEYS |= {f'grain_{name}' for name in _GRAIN_FIELDS}


@dataclass(frozen=True)
class AdjustmentVector:
    """
    Complete description of a photographic look.

    Numeric fields are Optional: None means the field is absent, which the
    engine treats as neutral and the codecs omit from their output.
    """
    # Metadata
    name: Optional[str] = None
    description: Optional[str] = None
    confidence: Optional[float] = None
    profile_name: Optional[str] = None
    treatment: Treatment = field(default_factory=ColorTreatment)

    # Basic tone
    exposure: Optional[float] = None
    contrast: Optional[float] = None
    highlights: Optional[float] = None
    shadows: Optional[float] = None
    whites: Optional[float] = None
    blacks: Optional[float] = None
    clarity: Optional[float] = None
    vibrance: Optional[float] = None
    saturation: Optional[float] = None
    brightness: Optional[float] = None

    # White balance
    temperature: Optional[float] = None
    tint: Optional[float] = None

    grading: ColorGrading = field(default_factory=ColorGrading)
    parametric: ParametricCurve = field(default_factory=ParametricCurve)
    curves: ToneCurves = field(default_factory=ToneCurves)
    grain: Grain = field(default_factory=Grain)
    vignette: Vignette = field(default_factory=Vignette)
    point_colors: PointColors = field(default_factory=PointColors)
    masks: Tuple[Mask, ...] = ()

    def __post_init__(self):
        sanitize_fields(self, BASIC_RANGES)

        for name in ('name', 'description', 'profile_name'):
            object.__setattr__(self, name, clean_text(getattr(self, name)))

        defaults = {
            'grading': ColorGrading, 'parametric': ParametricCurve, 'curves': ToneCurves,
            'grain': Grain, 'vignette': Vignette, 'point_colors': PointColors,
        }
        for name, cls in defaults.items():
            if not isinstance(getattr(self, name), cls):
                object.__setattr__(self, name, cls())

        masks = []
        for mask in self.masks or ():
            if isinstance(mask, dict):
                mask = Mask.from_dict(mask)
            if isinstance(mask, Mask):
                masks.append(mask)
            else:
                logger.warning(f"Ignoring mask of type {type(mask).__name__}")
        object.__setattr__(self, 'masks', tuple(masks))

        treatment = self.treatment
        if isinstance(treatment, str):
            treatment = treatment_from_name(treatment)
        elif treatment is True:
            treatment = MonochromeTreatment()
        elif not isinstance(treatment, (ColorTreatment, MonochromeTreatment)):
            treatment = ColorTreatment()
        if isinstance(treatment, ColorTreatment) and self._implies_monochrome():
            treatment = MonochromeTreatment()
        object.__setattr__(self, 'treatment', treatment)

    def _implies_monochrome(self) -> bool:
        if self.profile_name and 'monochrome' in self.profile_name.lower():
            return True
        return self.saturation is not None and self.saturation <= -100

    @property
    def is_monochrome(self) -> bool:
        return isinstance(self.treatment, MonochromeTreatment)

    @property
    def treatment_name(self) -> str:
        return self.treatment.name

    @property
    def hsl(self) -> Optional[HSLAdjustments]:
        return self.treatment.hsl if isinstance(self.treatment, ColorTreatment) else None

    @property
    def gray_mixer(self) -> Optional[GrayMixer]:
        return self.treatment.gray_mixer if isinstance(self.treatment, MonochromeTreatment) else None

    def replace(self, **changes) -> 'AdjustmentVector':
        """Return a re-sanitized copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def is_neutral(self) -> bool:
        """True when applying the vector would leave an image unchanged."""
        if self.is_monochrome:
            return False
        for name in BASIC_FIELDS:
            value = getattr(self, name)
            if name == 'temperature':
                if value is not None and abs(value - NEUTRAL_TEMPERATURE) > 1e-6:
                    return False
            elif not is_zero(value):
                return False
        return (
            self.hsl.is_neutral()
            and self.grading.is_neutral()
            and self.parametric.is_neutral()
            and self.curves.is_neutral()
            and is_zero(self.grain.amount)
            and is_zero(self.vignette.amount)
            and not self.point_colors.colors
            and not any(mask.adjustments.values() for mask in self.masks)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdjustmentVector':
        """
        Build a vector from the flat key scheme of the analysis collaborator.

        Args:
            data: Mapping such as {'contrast': 20, 'hue_red': -10,
                  'color_grade_shadow_hue': 210, 'tone_curve': [...]}

        Returns:
            Sanitized AdjustmentVector. Unknown keys are ignored.
        """
        data = data or {}
        unknown = sorted(k for k in data if k not in KNOWN_KEYS)
        if unknown:
            logger.debug(f"Ignoring unknown recipe keys: {', '.join(unknown)}")

        monochrome = data.get('treatment') == BLACK_AND_WHITE or data.get('monochrome') is True
        if monochrome:
            treatment: Treatment = MonochromeTreatment(
                GrayMixer(**{band: data.get(f'gray_{band}') for band in BANDS})
            )
        else:
            treatment = ColorTreatment(HSLAdjustments(**{
                band: HSLBand(**{attr: data.get(f'{prefix}_{band}')
                                 for prefix, attr in _HSL_PREFIXES.items()})
                for band in BANDS
            }))

        wheels = {
            ('global_' if wheel == 'global' else wheel): ColorWheel(**{
                attr: data.get(f'color_grade_{wheel}_{suffix}')
                for suffix, attr in _WHEEL_SUFFIXES.items()
            })
            for wheel in ColorGrading.WHEELS
        }
        grading = ColorGrading(blending=data.get('color_grade_blending'),
                               balance=data.get('color_grade_balance'), **wheels)

        curve_data = data.get('tone_curve')
        if isinstance(curve_data, dict):
            # {'rgb': [...], 'red': [...]} style
            curves = ToneCurves(
                composite=curve_data.get('rgb') or curve_data.get('composite') or (),
                red=curve_data.get('red') or (),
                green=curve_data.get('green') or (),
                blue=curve_data.get('blue') or (),
            )
        else:
            curves = ToneCurves(**{name: data.get(key) or () for name, key in _CURVE_KEYS.items()})

        masks = []
        for raw in data.get('masks') or ():
            if isinstance(raw, dict):
                masks.append(Mask.from_dict(raw))
            else:
                logger.warning(f"Skipping malformed mask entry: {raw!r}")

        description = data.get('description')
        if not isinstance(description, str):
            description = data.get('reasoning')

        return cls(
            name=data.get('preset_name', data.get('name')),
            description=description,
            confidence=data.get('confidence'),
            profile_name=data.get('camera_profile', data.get('profile_name')),
            treatment=treatment,
            grading=grading,
            parametric=ParametricCurve(**{name: data.get(f'parametric_{name}')
                                          for name in _PARAMETRIC_FIELDS}),
            curves=curves,
            grain=Grain(**{name: data.get(f'grain_{name}') for name in _GRAIN_FIELDS}),
            vignette=Vignette(**{name: data.get(f'vignette_{name}') for name in _VIGNETTE_FIELDS}),
            point_colors=PointColors(colors=data.get('point_colors') or (),
                                     variance=data.get('color_variance') or ()),
            masks=tuple(masks),
            **{name: data.get(name) for name in BASIC_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the flat key scheme; absent fields are omitted."""
        result: Dict[str, Any] = {'treatment': self.treatment_name}
        if self.name is not None:
            result['preset_name'] = self.name
        if self.description is not None:
            result['description'] = self.description
        if self.confidence is not None:
            result['confidence'] = self.confidence
        if self.profile_name is not None:
            result['camera_profile'] = self.profile_name
        if self.is_monochrome:
            result['monochrome'] = True

        for name in BASIC_FIELDS:
            value = getattr(self, name)
            if value is not None:
                result[name] = value

        if self.hsl is not None:
            for band, values in self.hsl.bands():
                for prefix, attr in _HSL_PREFIXES.items():
                    value = getattr(values, attr)
                    if value is not None:
                        result[f'{prefix}_{band}'] = value
        else:
            for band, value in self.gray_mixer.bands():
                if value is not None:
                    result[f'gray_{band}'] = value

        for wheel in ColorGrading.WHEELS:
            for suffix, attr in _WHEEL_SUFFIXES.items():
                value = getattr(self.grading.wheel(wheel), attr)
                if value is not None:
                    result[f'color_grade_{wheel}_{suffix}'] = value
        if self.grading.blending is not None:
            result['color_grade_blending'] = self.grading.blending
        if self.grading.balance is not None:
            result['color_grade_balance'] = self.grading.balance

        for name, value in numeric_values(self.parametric).items():
            result[f'parametric_{name}'] = value
        for name, key in _CURVE_KEYS.items():
            points = getattr(self.curves, name)
            if points:
                result[key] = curve_to_list(points)
        for name, value in numeric_values(self.grain).items():
            result[f'grain_{name}'] = value
        for name, value in numeric_values(self.vignette).items():
            result[f'vignette_{name}'] = value

        if self.point_colors.colors:
            result['point_colors'] = [list(row) for row in self.point_colors.colors]
        if self.point_colors.variance:
            result['color_variance'] = list(self.point_colors.variance)
        if self.masks:
            result['masks'] = [mask.to_dict() for mask in self.masks]
        return result
