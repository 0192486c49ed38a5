"""
Tone stages for the PhotoRecipe transform

Includes exposure, shadow/highlight/white/black regions, contrast, and point curves.
"""

from .tone_shaping import apply_tone_regions, apply_tone_curves, smoothstep, luma

__all__ = [
    "apply_tone_regions",
    "apply_tone_curves",
    "smoothstep",
    "luma",
]
