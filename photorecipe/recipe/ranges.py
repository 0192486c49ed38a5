"""
Numeric ranges and sanitizing helpers for recipe values.

Every value that enters an AdjustmentVector passes through here once:
non-finite and non-numeric input becomes None (absent), everything else
is clamped to its documented range, and hue angles wrap.
"""

import math
import re
import logging
from dataclasses import fields
from typing import Any, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

# Eight hue bands shared by HSL, gray mixer, and the style codec zones
BANDS = ('red', 'orange', 'yellow', 'green', 'aqua', 'blue', 'purple', 'magenta')

# Band center and half-width in degrees
BAND_GEOMETRY: Dict[str, Tuple[float, float]] = {
    'red': (0.0, 25.0),
    'orange': (30.0, 25.0),
    'yellow': (60.0, 25.0),
    'green': (120.0, 35.0),
    'aqua': (180.0, 30.0),
    'blue': (240.0, 35.0),
    'purple': (270.0, 25.0),
    'magenta': (300.0, 30.0),
}

SLIDER = (-100.0, 100.0)
PERCENT = (0.0, 100.0)
UNIT = (0.0, 1.0)
LOCAL = (-1.0, 1.0)

BASIC_RANGES: Dict[str, Tuple[float, float]] = {
    'exposure': (-5.0, 5.0),
    'contrast': SLIDER,
    'highlights': SLIDER,
    'shadows': SLIDER,
    'whites': SLIDER,
    'blacks': SLIDER,
    'clarity': SLIDER,
    'vibrance': SLIDER,
    'saturation': SLIDER,
    'brightness': SLIDER,
    'temperature': (2000.0, 50000.0),
    'tint': (-150.0, 150.0),
    'confidence': UNIT,
}

NEUTRAL_TEMPERATURE = 6500.0


def is_number(value: Any) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def sanitize(value: Any, bounds: Tuple[float, float]) -> Optional[float]:
    """
    Clamp a value into bounds, or return None when it is not usable.

    Args:
        value: Raw input value
        bounds: (min, max) inclusive range

    Returns:
        Clamped float, or None for missing, non-numeric, or non-finite input
    """
    if not is_number(value):
        return None
    return float(clamp(float(value), bounds[0], bounds[1]))


def wrap_hue(value: Any) -> Optional[float]:
    """Wrap a hue angle into [0, 360)."""
    if not is_number(value):
        return None
    wrapped = float(value) % 360.0
    # -1e-20 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def sanitize_fields(instance: Any, bounds: Dict[str, Tuple[float, float]],
                    hue_fields: Iterable[str] = ()) -> None:
    """
    Sanitize the numeric fields of a (possibly frozen) dataclass in place.

    Used from ``__post_init__`` of the recipe models so that clamping
    happens in exactly one place.
    """
    hue_fields = set(hue_fields)
    for f in fields(instance):
        if f.name in hue_fields:
            object.__setattr__(instance, f.name, wrap_hue(getattr(instance, f.name)))
        elif f.name in bounds:
            object.__setattr__(instance, f.name, sanitize(getattr(instance, f.name), bounds[f.name]))


def numeric_values(instance: Any) -> Dict[str, float]:
    """Return the present (non-None) numeric fields of a dataclass."""
    return {
        f.name: getattr(instance, f.name)
        for f in fields(instance)
        if is_number(getattr(instance, f.name))
    }


def is_zero(value: Optional[float]) -> bool:
    return value is None or abs(value) < 1e-9


# Characters XML 1.0 does not allow, even escaped
_XML_ILLEGAL = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]')


def clean_text(value: Any) -> Optional[str]:
    """Return value without XML-illegal characters, or None for non-strings."""
    if not isinstance(value, str):
        return None
    return _XML_ILLEGAL.sub('', value)
