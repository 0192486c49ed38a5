"""
PhotoRecipe utilities module.

Logging helpers and export statistics.
"""

from .logging import ExportStats, StructuredLogger, setup_console_logging

__all__ = [
    'ExportStats',
    'StructuredLogger',
    'setup_console_logging',
]
