"""MIME type value object.

ONLY MIME type - represents validated MIME type with categorization and
extension mapping used by validation, extension fixing and metadata sync.

Following maximum separation architecture - one file = one purpose.
"""

import mimetypes
import re
from dataclasses import dataclass
from typing import Iterable, Optional


# MIME type validation pattern (RFC 6838)
MIME_PATTERN = re.compile(
    r'^([a-zA-Z][a-zA-Z0-9][a-zA-Z0-9!#$&\-^_]*)'  # type
    r'/'  # separator
    r'([a-zA-Z0-9][a-zA-Z0-9!#$&\-^_.+]*)'  # subtype
    r'(;.*)?$'  # optional parameters
)

# Raster formats an image processor can decode into pixel dimensions
RASTER_IMAGE_TYPES = frozenset({
    'image/jpeg', 'image/png', 'image/gif', 'image/webp',
    'image/bmp', 'image/tiff', 'image/x-icon', 'image/heic'
})

DEFAULT_MIME_TYPE = 'application/octet-stream'

# Preferred extension per type, used when fixing stored filenames
CANONICAL_EXTENSIONS = {
    'image/jpeg': 'jpg', 'image/png': 'png', 'image/gif': 'gif',
    'image/webp': 'webp', 'image/bmp': 'bmp', 'image/tiff': 'tiff',
    'image/svg+xml': 'svg', 'application/pdf': 'pdf', 'text/plain': 'txt',
    'text/csv': 'csv', 'application/zip': 'zip', 'application/json': 'json',
    'video/mp4': 'mp4', 'audio/mpeg': 'mp3'
}

# Common file extension mappings, checked before the platform registry
EXTENSION_MAP = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg', 'jpe': 'image/jpeg',
    'png': 'image/png', 'gif': 'image/gif', 'webp': 'image/webp',
    'bmp': 'image/bmp', 'tif': 'image/tiff', 'tiff': 'image/tiff',
    'svg': 'image/svg+xml', 'pdf': 'application/pdf', 'txt': 'text/plain',
    'csv': 'text/csv', 'json': 'application/json', 'zip': 'application/zip',
    'mp4': 'video/mp4', 'mp3': 'audio/mpeg'
}


@dataclass(frozen=True)
class MimeType:
    """MIME type value object.

    Normalized to lower case and validated against RFC 6838. Parameters
    (``; charset=...``) are kept in ``value`` but ignored by ``essence``.
    """

    value: str

    def __post_init__(self):
        """Validate MIME type format."""
        if not isinstance(self.value, str):
            raise ValueError(f"MimeType must be a string, got {type(self.value).__name__}")

        normalized = self.value.strip().lower()
        if not normalized:
            raise ValueError("MIME type cannot be empty")

        if not MIME_PATTERN.match(normalized):
            raise ValueError(f"Invalid MIME type format: {self.value}")

        object.__setattr__(self, 'value', normalized)

    @classmethod
    def default(cls) -> 'MimeType':
        """Generic binary type used when nothing better is known."""
        return cls(DEFAULT_MIME_TYPE)

    @classmethod
    def from_extension(cls, extension: str) -> Optional['MimeType']:
        """Guess a MIME type from a file extension (with or without dot)."""
        ext = extension.strip().lstrip('.').lower()
        if not ext:
            return None

        if ext in EXTENSION_MAP:
            return cls(EXTENSION_MAP[ext])

        guessed, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
        return cls(guessed) if guessed else None

    @property
    def essence(self) -> str:
        """Type and subtype without parameters (e.g. ``text/plain``)."""
        return self.value.split(';', 1)[0].strip()

    def get_main_type(self) -> str:
        """Get the main type part (e.g., 'image' from 'image/jpeg')."""
        return self.essence.split('/')[0]

    def get_sub_type(self) -> str:
        """Get the subtype part (e.g., 'jpeg' from 'image/jpeg')."""
        return self.essence.split('/')[1]

    def is_image(self) -> bool:
        return self.get_main_type() == 'image'

    def is_raster_image(self) -> bool:
        return self.essence in RASTER_IMAGE_TYPES

    def is_jpeg(self) -> bool:
        return self.essence == 'image/jpeg'

    def canonical_extension(self) -> Optional[str]:
        """Preferred extension for this type, without dot."""
        if self.essence in CANONICAL_EXTENSIONS:
            return CANONICAL_EXTENSIONS[self.essence]

        guessed = mimetypes.guess_extension(self.essence, strict=False)
        return guessed.lstrip('.') if guessed else None

    def matches_any(self, patterns: Iterable[str]) -> bool:
        """Check against allow-list entries such as ``image/png`` or ``image/*``."""
        for pattern in patterns:
            pattern = pattern.strip().lower()
            if pattern == '*/*' or pattern == self.essence:
                return True
            if pattern.endswith('/*') and pattern[:-2] == self.get_main_type():
                return True
        return False

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"MimeType('{self.value}')"
