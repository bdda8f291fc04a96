"""Utilities module for neo-attachments."""

from .naming import (
    FORBIDDEN_FILENAME_CHARS,
    normalize_extension,
    normalize_record_type,
    sanitize_filename,
    split_filename,
    to_snake_case,
)

__all__ = [
    "FORBIDDEN_FILENAME_CHARS",
    "normalize_extension",
    "normalize_record_type",
    "sanitize_filename",
    "split_filename",
    "to_snake_case",
]
