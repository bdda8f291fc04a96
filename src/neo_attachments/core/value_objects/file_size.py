"""File size value object.

ONLY file size - represents validated file size with parsing of
human-readable limits and formatting for messages.

Following maximum separation architecture - one file = one purpose.
"""

import re
from dataclasses import dataclass
from typing import Union

_HUMAN_SIZE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([KMGT]?B?|BYTES?)?\s*$', re.IGNORECASE)


@dataclass(frozen=True)
class FileSize:
    """File size value object.

    Represents a size in bytes. Used for size limits on upload attributes
    and for the ``<attr>_filesize`` metadata field.
    """

    value: int  # Size in bytes

    KILOBYTE = 1024
    MEGABYTE = 1024 ** 2
    GIGABYTE = 1024 ** 3
    TERABYTE = 1024 ** 4

    UNIT_NAMES = ['B', 'KB', 'MB', 'GB', 'TB']

    def __post_init__(self):
        """Validate file size value."""
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"FileSize must be an integer, got {type(self.value).__name__}")

        if self.value < 0:
            raise ValueError(f"File size cannot be negative: {self.value}")

    @classmethod
    def zero(cls) -> 'FileSize':
        """Create a zero-size file size."""
        return cls(0)

    @classmethod
    def from_human_readable(cls, size_str: str) -> 'FileSize':
        """Parse strings such as ``"512"``, ``"200 KB"`` or ``"1.5MB"``."""
        match = _HUMAN_SIZE.match(size_str)
        if not match:
            raise ValueError(f"Invalid size format: {size_str!r}")

        number = float(match.group(1))
        unit = (match.group(2) or 'B').upper().rstrip('S')
        if unit == 'BYTE':
            unit = 'B'
        if not unit.endswith('B'):
            unit += 'B'

        multiplier = 1024 ** cls.UNIT_NAMES.index(unit)
        return cls(int(number * multiplier))

    @classmethod
    def coerce(cls, value: Union[int, str, 'FileSize']) -> 'FileSize':
        """Accept an int (bytes), a human-readable string or a FileSize."""
        if isinstance(value, FileSize):
            return value
        if isinstance(value, str):
            return cls.from_human_readable(value)
        return cls(value)

    def format_human_readable(self, precision: int = 1) -> str:
        """Format as e.g. ``"1.5 MB"``."""
        if self.value < self.KILOBYTE:
            return f"{self.value} B"

        size = float(self.value)
        unit_index = 0
        while size >= 1024 and unit_index < len(self.UNIT_NAMES) - 1:
            size /= 1024
            unit_index += 1
        return f"{size:.{precision}f} {self.UNIT_NAMES[unit_index]}"

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.format_human_readable()

    def __repr__(self) -> str:
        return f"FileSize({self.value})"
