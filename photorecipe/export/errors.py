"""
Exceptions raised by the export layer.
"""


class ExportError(Exception):
    """Base exception for export operations."""
    pass


class UnsupportedFormatError(ExportError, ValueError):
    """Raised when an unknown output format tag is requested."""

    def __init__(self, fmt, supported=()):
        self.format = fmt
        self.supported = tuple(supported)
        message = f"Unsupported LUT format: {fmt!r}"
        if self.supported:
            message += f" (expected one of: {', '.join(self.supported)})"
        super().__init__(message)
