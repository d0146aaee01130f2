"""Command-line interface tools."""

from .validate import main, validate_files

__all__ = [
    "main",
    "validate_files",
]
