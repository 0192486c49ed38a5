"""
Tone stages of the color transform

Exposure, luminance-weighted region adjustments (shadows, highlights,
whites, blacks), contrast, and point curves. All functions work on
(N, 3) float arrays in display-referred 0..1 space.
"""

import logging
from typing import Optional

import numpy as np

from ...recipe.curves import evaluate_curve
from ...recipe.models import ToneCurves
from ...recipe.ranges import is_zero

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# Maximum offset each region slider adds at full weight
SHADOW_STRENGTH = 0.25
HIGHLIGHT_STRENGTH = 0.25
BLACKS_STRENGTH = 0.15
WHITES_STRENGTH = 0.15

EXPOSURE_SCALE = 0.25


def smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    """Hermite interpolation between two edges."""
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def luma(pixels: np.ndarray) -> np.ndarray:
    """Rec. 601 luma of (N, 3) pixels."""
    return pixels @ LUMA_WEIGHTS


def exposure_factor(exposure: Optional[float]) -> float:
    if is_zero(exposure):
        return 1.0
    return float(2.0 ** (exposure * EXPOSURE_SCALE))


def apply_tone_regions(pixels: np.ndarray, highlights: Optional[float] = None,
                       shadows: Optional[float] = None, whites: Optional[float] = None,
                       blacks: Optional[float] = None,
                       contrast: Optional[float] = None) -> np.ndarray:
    """
    Apply region sliders and contrast.

    Args:
        pixels: (N, 3) array
        highlights, shadows, whites, blacks, contrast: Sliders in -100..100

    Returns:
        Adjusted (N, 3) array (not clamped)
    """
    regions = [
        (shadows, SHADOW_STRENGTH, lambda y: 1.0 - smoothstep(0.0, 0.5, y)),
        (highlights, HIGHLIGHT_STRENGTH, lambda y: smoothstep(0.5, 1.0, y)),
        (blacks, BLACKS_STRENGTH, lambda y: 1.0 - smoothstep(0.0, 0.25, y)),
        (whites, WHITES_STRENGTH, lambda y: smoothstep(0.75, 1.0, y)),
    ]
    active = [(value, strength, weight) for value, strength, weight in regions if not is_zero(value)]

    result = pixels
    if active:
        y = luma(pixels)
        offset = np.zeros_like(y)
        for value, strength, weight in active:
            offset += (value / 100.0) * strength * weight(y)
        result = result + offset[:, np.newaxis]

    if not is_zero(contrast):
        gain = 1.0 + contrast / 100.0
        result = (result - 0.5) * gain + 0.5

    return result


def apply_tone_curves(pixels: np.ndarray, curves: ToneCurves) -> np.ndarray:
    """Composite curve on every channel, then the per-channel curves."""
    if not curves.has_values():
        return pixels

    result = pixels
    if curves.composite:
        result = evaluate_curve(curves.composite, result)

    for channel, name in enumerate(('red', 'green', 'blue')):
        points = getattr(curves, name)
        if points:
            if result is pixels:
                result = result.copy()
            result[:, channel] = evaluate_curve(points, result[:, channel])

    return result
