"""Naming helpers shared by path resolution and staging."""

import os
import re
from typing import Tuple

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_WORD = re.compile(r"[^0-9a-zA-Z]+")

# Characters that cannot appear inside a single path component
FORBIDDEN_FILENAME_CHARS = {'<', '>', ':', '"', '|', '?', '*', '/', '\\', '\0'}


def to_snake_case(name: str) -> str:
    """``"DateTimeOriginal"`` -> ``"date_time_original"``."""
    name = _CAMEL_BOUNDARY.sub("_", name)
    name = _NON_WORD.sub("_", name)
    return name.strip("_").lower()


def normalize_record_type(type_name: str) -> str:
    """Convert a record type name to a path segment.

    ``"UserProfile"`` becomes ``"user_profile"`` and a dotted module path
    keeps only its last component.
    """
    return to_snake_case(type_name.rsplit(".", 1)[-1])


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and strip its leading dot."""
    return extension.strip().lstrip(".").lower()


def split_filename(filename: str) -> Tuple[str, str]:
    """Split a filename into basename and normalized extension.

    Returns:
        Tuple of (basename, extension); the extension is empty when absent.
    """
    base, ext = os.path.splitext(filename)
    return base, normalize_extension(ext)


def sanitize_filename(filename: str, fallback: str = "upload") -> str:
    """Reduce a client-supplied filename to a safe single path component.

    Directory components are dropped (both separators, whatever the host
    platform) and characters that are illegal in a component are replaced.
    """
    name = filename.replace("\\", "/").split("/")[-1]
    name = "".join("_" if ch in FORBIDDEN_FILENAME_CHARS or ord(ch) < 32 else ch for ch in name)
    name = name.strip().rstrip(".")
    if not name or name in {".", ".."}:
        return fallback
    if len(name) > 255:
        base, ext = os.path.splitext(name)
        name = base[:255 - len(ext)] + ext
    return name
