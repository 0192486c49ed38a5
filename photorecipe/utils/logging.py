"""
Logging utilities for PhotoRecipe
Provides structured logging and export statistics
"""

import logging
import sys
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata"""
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message, **kwargs))


class ExportStats:
    """Tracks files written by a batch export"""

    def __init__(self):
        self.start_time = datetime.now()
        self.outputs: List[Dict[str, Any]] = []
        self.errors: List[Dict[str, Any]] = []

    def add_output(self, source: str, path: str, kind: str):
        """
        Record a written file

        Args:
            source: Recipe file the output came from
            path: File written
            kind: Output kind ('cube', 'xmp', 'costyle', ...)
        """
        self.outputs.append({'source': source, 'path': path, 'kind': kind})

    def add_error(self, source: str, error: str):
        self.errors.append({
            'source': source,
            'error': error,
            'time': datetime.now(),
        })

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_summary(self) -> Dict[str, Any]:
        by_kind: Dict[str, int] = {}
        for output in self.outputs:
            by_kind[output['kind']] = by_kind.get(output['kind'], 0) + 1
        return {
            'written': len(self.outputs),
            'by_kind': by_kind,
            'errors': len(self.errors),
            'elapsed_time': self.get_elapsed_time(),
        }

    def print_summary(self):
        """Print export summary to console"""
        summary = self.get_summary()

        print("\n" + "=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Files written:    {summary['written']}")
        for kind, count in sorted(summary['by_kind'].items()):
            print(f"  - {kind}: {count}")
        print(f"Errors:           {summary['errors']}")
        print(f"Elapsed time:     {summary['elapsed_time']:.1f}s")
        print("=" * 60)

        if self.errors:
            print("\nERRORS:")
            for error in self.errors[:10]:
                print(f"  - {error['source']}: {error['error']}")
            if len(self.errors) > 10:
                print(f"  ... and {len(self.errors) - 10} more errors")


def setup_console_logging(level: str = "INFO", color: bool = True, fmt: str = DEFAULT_FORMAT):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level name
        color: Whether to use colored output
        fmt: Record format for the plain formatter
    """
    console_handler = logging.StreamHandler(sys.stderr)

    if color and sys.stderr.isatty():
        try:
            import colorlog
            formatter = colorlog.ColoredFormatter(
                '%(log_color)s%(asctime)s - %(name)s - %(levelname)s%(reset)s - %(message)s',
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            )
        except ImportError:
            # colorlog is an optional extra
            formatter = logging.Formatter(fmt)
    else:
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    # Repeated setup (tests, nested CLI invocations) replaces our handler
    for handler in list(root_logger.handlers):
        if getattr(handler, '_photorecipe', False):
            root_logger.removeHandler(handler)
    console_handler._photorecipe = True
    root_logger.addHandler(console_handler)
    return console_handler
