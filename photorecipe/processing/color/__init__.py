"""
Color stages for the PhotoRecipe transform

Includes white balance gains, the HSL and gray mixers, and color grading.
"""

from .white_balance import kelvin_to_rgb, white_balance_gains
from .color_grading import apply_color_grading, apply_color_mixer, apply_gray_mixer, band_weights

__all__ = [
    "kelvin_to_rgb",
    "white_balance_gains",
    "apply_color_grading",
    "apply_color_mixer",
    "apply_gray_mixer",
    "band_weights",
]
