"""Core configuration, size parsing and the upload dispatch pipeline."""

from .units import format_size, parse_size

__version__ = "1.0.0"

__all__ = [
    '__version__',
    'format_size',
    'parse_size',
]
