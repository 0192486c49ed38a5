"""
Processing modules for PhotoRecipe

The color transform engine and its color and tone stages.
"""

from .transform import ColorTransform, apply_color_transform, transform_array

__all__ = [
    "ColorTransform",
    "apply_color_transform",
    "transform_array",
]
