"""
Color transform engine for PhotoRecipe

Maps RGB triples through an AdjustmentVector. The same code path serves
single triples, image-shaped arrays, and LUT grids, so a baked LUT and a
direct evaluation always agree.

Pipeline:
1. White balance (temperature + tint gains)
2. Exposure
3. Tone regions and contrast
4. Global saturation / vibrance
5. HSL bands (color) or gray mixer (black & white)
6. Color grading
7. Tone curves
8. Clamp to 0..1
"""

import logging
from typing import Tuple

import numpy as np

from ..recipe.models import AdjustmentVector
from .color.color_grading import apply_color_grading, apply_color_mixer, apply_gray_mixer
from .color.white_balance import apply_white_balance, white_balance_gains
from .tone.tone_shaping import apply_tone_curves, apply_tone_regions, exposure_factor

logger = logging.getLogger(__name__)


class ColorTransform:
    """
    Precomputed transform for one AdjustmentVector

    Construction resolves everything that does not depend on the pixel
    (white balance gains, exposure factor); calling the instance applies
    the pipeline to an (..., 3) array. Never raises for any vector.
    """

    def __init__(self, vector: AdjustmentVector):
        self.vector = vector
        self.gains = white_balance_gains(vector.temperature, vector.tint) * \
            exposure_factor(vector.exposure)
        self.is_identity = vector.is_neutral()

    def __call__(self, rgb: np.ndarray) -> np.ndarray:
        arr = np.asarray(rgb, dtype=np.float64)
        if arr.shape[-1] != 3:
            raise ValueError(f"Expected (..., 3) RGB data, got shape {arr.shape}")

        pixels = np.clip(np.nan_to_num(arr.reshape(-1, 3), nan=0.0), 0.0, 1.0)
        if self.is_identity:
            return pixels.reshape(arr.shape)

        v = self.vector
        pixels = apply_white_balance(pixels, self.gains)
        pixels = apply_tone_regions(pixels, highlights=v.highlights, shadows=v.shadows,
                                    whites=v.whites, blacks=v.blacks, contrast=v.contrast)
        pixels = np.clip(pixels, 0.0, 1.0)

        if v.is_monochrome:
            pixels = apply_gray_mixer(pixels, v.gray_mixer)
        else:
            pixels = apply_color_mixer(pixels, saturation=v.saturation,
                                       vibrance=v.vibrance, hsl=v.hsl)

        pixels = apply_color_grading(pixels, v.grading)
        pixels = np.clip(pixels, 0.0, 1.0)
        pixels = apply_tone_curves(pixels, v.curves)

        return np.clip(pixels, 0.0, 1.0).reshape(arr.shape)


def transform_array(rgb: np.ndarray, vector: AdjustmentVector) -> np.ndarray:
    """
    Apply a vector to an (..., 3) array of RGB values in 0..1.

    Args:
        rgb: Array whose last axis holds R, G, B
        vector: Adjustments to apply

    Returns:
        float64 array of the same shape, clamped to 0..1
    """
    return ColorTransform(vector)(rgb)


def apply_color_transform(r: float, g: float, b: float,
                          vector: AdjustmentVector) -> Tuple[float, float, float]:
    """Transform a single RGB triple."""
    out = transform_array(np.array([r, g, b], dtype=np.float64), vector)
    return float(out[0]), float(out[1]), float(out[2])
