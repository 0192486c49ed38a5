"""
Export modules for PhotoRecipe

LUT baking and the preset codecs (Lightroom XMP, Capture One styles,
camera profiles).
"""

from .camera_profile import generate_camera_profile
from .capture_one import generate_capture_one_basic_style, generate_capture_one_style
from .errors import ExportError, UnsupportedFormatError
from .lut import SUPPORTED_FORMATS, bake_lut_table, generate_lut, iter_lut_slabs, write_lut
from .options import ExportOptions
from .xmp_generator import generate_xmp, resolve_profile_name
from .xmp_parser import XMPParseResult, parse_xmp

__all__ = [
    "ExportError",
    "ExportOptions",
    "SUPPORTED_FORMATS",
    "UnsupportedFormatError",
    "XMPParseResult",
    "bake_lut_table",
    "generate_camera_profile",
    "generate_capture_one_basic_style",
    "generate_capture_one_style",
    "generate_lut",
    "generate_xmp",
    "iter_lut_slabs",
    "parse_xmp",
    "resolve_profile_name",
    "write_lut",
]
