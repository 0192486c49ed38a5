"""
PhotoRecipe: color recipes to LUTs and editor presets

Turns an editor-agnostic adjustment recipe into 3D LUTs (.cube, .3dl),
Lightroom presets and camera profiles, and Capture One styles, and reads
Lightroom presets back into recipes.
"""

__version__ = "0.1.0"

from .config import load_config
from .recipe import AdjustmentVector
from .processing import apply_color_transform, transform_array
from .export import (
    ExportOptions,
    generate_camera_profile,
    generate_capture_one_style,
    generate_lut,
    generate_xmp,
    parse_xmp,
)

__all__ = [
    "AdjustmentVector",
    "ExportOptions",
    "apply_color_transform",
    "generate_camera_profile",
    "generate_capture_one_style",
    "generate_lut",
    "generate_xmp",
    "load_config",
    "parse_xmp",
    "transform_array",
]
