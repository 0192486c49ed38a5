"""
White balance stage of the color transform

Converts a temperature/tint pair into per-channel RGB gains. Temperature
follows the editor convention: values above the 6500K reference warm the
image, values below cool it.
"""

import math
import logging
from typing import Optional, Tuple

import numpy as np

from ...recipe.ranges import NEUTRAL_TEMPERATURE, clamp

logger = logging.getLogger(__name__)

# Valid range of the black-body fit
KELVIN_MIN = 1000.0
KELVIN_MAX = 40000.0

# Keep corrections within what a white balance slider can do
MIN_MULTIPLIER = 0.4
MAX_MULTIPLIER = 2.5

TINT_RANGE = 150.0
TINT_STRENGTH = 0.1


def kelvin_to_rgb(kelvin: float) -> Tuple[float, float, float]:
    """
    Approximate the RGB color of a black-body radiator.

    Piecewise logarithmic/power fit valid from 1000K to 40000K. Channels
    are clamped to 0..255 and returned normalized to 0..1.

    Args:
        kelvin: Color temperature in Kelvin (clamped to the valid range)

    Returns:
        (r, g, b) in 0..1
    """
    t = clamp(float(kelvin), KELVIN_MIN, KELVIN_MAX) / 100.0

    if t <= 66.0:
        r = 255.0
        g = 99.4708025861 * math.log(t) - 161.1195681661
    else:
        r = 329.698727446 * math.pow(t - 60.0, -0.1332047592)
        g = 288.1221695283 * math.pow(t - 60.0, -0.0755148492)

    if t >= 66.0:
        b = 255.0
    elif t <= 19.0:
        b = 0.0
    else:
        b = 138.5177312231 * math.log(t - 10.0) - 305.0447927307

    return tuple(clamp(c, 0.0, 255.0) / 255.0 for c in (r, g, b))


def temperature_gains(temperature: Optional[float]) -> np.ndarray:
    """RGB gains for a target temperature relative to the 6500K reference."""
    if temperature is None:
        return np.ones(3)

    reference = np.array(kelvin_to_rgb(NEUTRAL_TEMPERATURE))
    target = np.maximum(np.array(kelvin_to_rgb(temperature)), 1e-3)

    gains = reference / target
    # Normalize so green is 1.0
    gains = gains / gains[1]
    return np.clip(gains, MIN_MULTIPLIER, MAX_MULTIPLIER)


def tint_gains(tint: Optional[float]) -> np.ndarray:
    """
    Green/magenta gains.

    Positive tint boosts red and blue and suppresses green (magenta);
    negative tint boosts green, pulling red and blue down half as much.
    """
    if tint is None:
        return np.ones(3)

    t = clamp(tint / TINT_RANGE, -1.0, 1.0)
    if t >= 0:
        return np.array([1.0 + TINT_STRENGTH * t, 1.0 - TINT_STRENGTH * t, 1.0 + TINT_STRENGTH * t])
    return np.array([1.0 + 0.5 * TINT_STRENGTH * t, 1.0 - TINT_STRENGTH * t, 1.0 + 0.5 * TINT_STRENGTH * t])


def white_balance_gains(temperature: Optional[float], tint: Optional[float]) -> np.ndarray:
    """Combined per-channel multipliers for temperature and tint."""
    return temperature_gains(temperature) * tint_gains(tint)


def apply_white_balance(pixels: np.ndarray, gains: np.ndarray) -> np.ndarray:
    """Multiply (N, 3) pixels by precomputed gains."""
    if np.allclose(gains, 1.0):
        return pixels
    return pixels * gains
