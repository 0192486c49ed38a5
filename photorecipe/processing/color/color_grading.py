"""
Color stages of the color transform

Includes global saturation/vibrance, the eight-band HSL mixer, the
black & white gray mixer, and three-way color grading with a global wheel.
Hue/lightness/saturation conversion goes through OpenCV on float32 data
(H in degrees, L and S in 0..1).
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ...recipe.models import ColorGrading, GrayMixer, HSLAdjustments
from ...recipe.ranges import BANDS, BAND_GEOMETRY, is_zero
from ..tone.tone_shaping import luma, smoothstep

logger = logging.getLogger(__name__)

# Maximum effect of a band slider at full membership
BAND_HUE_SHIFT = 50.0  # degrees
BAND_SATURATION = 0.6
BAND_LUMINANCE = 0.15
GRAY_MIX_STRENGTH = 0.3

# Pixels below this saturation have no meaningful hue
CHROMA_GATE = 0.15

GRADE_TINT_STRENGTH = 0.5
GRADE_LUMINANCE_STRENGTH = 0.1
BALANCE_SHIFT = 0.2


def rgb_to_hls(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split (N, 3) RGB in 0..1 into hue (degrees), lightness, saturation."""
    img = np.clip(pixels, 0.0, 1.0).astype(np.float32).reshape(-1, 1, 3)
    hls = cv2.cvtColor(img, cv2.COLOR_RGB2HLS).reshape(-1, 3).astype(np.float64)
    return hls[:, 0], hls[:, 1], hls[:, 2]


def hls_to_rgb(h: np.ndarray, l: np.ndarray, s: np.ndarray) -> np.ndarray:
    """Inverse of rgb_to_hls, returning (N, 3) RGB."""
    hls = np.stack([np.mod(h, 360.0), np.clip(l, 0.0, 1.0), np.clip(s, 0.0, 1.0)], axis=1)
    img = hls.astype(np.float32).reshape(-1, 1, 3)
    return cv2.cvtColor(img, cv2.COLOR_HLS2RGB).reshape(-1, 3).astype(np.float64)


def hue_to_rgb(hue: float) -> Tuple[float, float, float]:
    """Convert hue (0-360) to the fully saturated RGB color at 50% lightness"""
    h = (hue % 360.0) / 60.0
    c = 1.0
    x = c * (1 - abs(h % 2 - 1))

    if h < 1:
        r, g, b = c, x, 0.0
    elif h < 2:
        r, g, b = x, c, 0.0
    elif h < 3:
        r, g, b = 0.0, c, x
    elif h < 4:
        r, g, b = 0.0, x, c
    elif h < 5:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return (r, g, b)


def band_weights(hue: np.ndarray, saturation: np.ndarray) -> np.ndarray:
    """
    Triangular membership of each pixel in the eight hue bands.

    Args:
        hue: (N,) hue in degrees
        saturation: (N,) HLS saturation, used to fade out near-gray pixels

    Returns:
        (N, 8) weights, ordered as BANDS, summing to at most 1 per pixel
    """
    weights = np.empty((hue.shape[0], len(BANDS)))
    for i, band in enumerate(BANDS):
        center, half_width = BAND_GEOMETRY[band]
        distance = np.abs(np.mod(hue - center + 180.0, 360.0) - 180.0)
        weights[:, i] = np.maximum(0.0, 1.0 - distance / half_width)

    total = weights.sum(axis=1, keepdims=True)
    weights = np.where(total > 1.0, weights / np.maximum(total, 1e-12), weights)
    return weights * smoothstep(0.0, CHROMA_GATE, saturation)[:, np.newaxis]


def _band_vector(values) -> np.ndarray:
    return np.array([0.0 if v is None else v / 100.0 for v in values])


def apply_color_mixer(pixels: np.ndarray, saturation: Optional[float] = None,
                      vibrance: Optional[float] = None,
                      hsl: Optional[HSLAdjustments] = None) -> np.ndarray:
    """
    Global saturation/vibrance followed by per-band HSL shifts.

    Args:
        pixels: (N, 3) RGB array
        saturation, vibrance: Sliders in -100..100
        hsl: Band adjustments, or None

    Returns:
        Adjusted (N, 3) array
    """
    has_hsl = hsl is not None and not hsl.is_neutral()
    if is_zero(saturation) and is_zero(vibrance) and not has_hsl:
        return pixels

    h, l, s = rgb_to_hls(pixels)

    if not is_zero(saturation):
        s = np.clip(s * (1.0 + saturation / 100.0), 0.0, 1.0)
    if not is_zero(vibrance):
        # Less saturated pixels receive more of the boost
        s = np.clip(s * (1.0 + (vibrance / 100.0) * (1.0 - s)), 0.0, 1.0)

    if has_hsl:
        bands = [band for _, band in hsl.bands()]
        weights = band_weights(h, s)
        h = h + weights @ _band_vector(b.hue for b in bands) * BAND_HUE_SHIFT
        s = s * (1.0 + weights @ _band_vector(b.saturation for b in bands) * BAND_SATURATION)
        l = l + weights @ _band_vector(b.luminance for b in bands) * BAND_LUMINANCE

    return hls_to_rgb(h, l, s)


def apply_gray_mixer(pixels: np.ndarray, mixer: GrayMixer) -> np.ndarray:
    """Convert to gray, brightening or darkening by the source hue's band."""
    gray = luma(pixels)

    if mixer.has_values():
        h, _, s = rgb_to_hls(pixels)
        weights = band_weights(h, s)
        gray = gray + weights @ _band_vector(v for _, v in mixer.bands()) * GRAY_MIX_STRENGTH

    return np.repeat(gray[:, np.newaxis], 3, axis=1)


def grading_weights(y: np.ndarray, balance: Optional[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Shadow, midtone and highlight weights; positive balance favors highlights."""
    pivot = 0.5 - (0.0 if balance is None else balance / 100.0) * BALANCE_SHIFT
    shadow = 1.0 - smoothstep(0.0, pivot, y)
    highlight = smoothstep(pivot, 1.0, y)
    midtone = np.clip(1.0 - shadow - highlight, 0.0, 1.0)
    return shadow, midtone, highlight


def apply_color_grading(pixels: np.ndarray, grading: ColorGrading) -> np.ndarray:
    """
    Three-way color grading, then the global wheel.

    Each wheel blends its region toward the wheel's pure hue in proportion
    to saturation and the blending slider, then offsets lightness.
    """
    if grading.is_neutral():
        return pixels

    blend_factor = 1.0 if grading.blending is None else grading.blending / 50.0
    shadow_w, midtone_w, highlight_w = grading_weights(luma(pixels), grading.balance)

    result = pixels
    regions = (
        (grading.shadow, shadow_w),
        (grading.midtone, midtone_w),
        (grading.highlight, highlight_w),
        (grading.global_, np.ones(pixels.shape[0])),
    )
    for wheel, weight in regions:
        if wheel.is_neutral():
            continue
        if not is_zero(wheel.saturation):
            color = np.array(hue_to_rgb(wheel.hue or 0.0))
            amount = weight * (wheel.saturation / 100.0) * GRADE_TINT_STRENGTH * blend_factor
            result = result + (color - result) * amount[:, np.newaxis]
        if not is_zero(wheel.luminance):
            result = result + (wheel.luminance / 100.0 * GRADE_LUMINANCE_STRENGTH * weight)[:, np.newaxis]

    return result
