"""File metadata value object.

ONLY derived metadata - what the metadata extractor learned about a
file's bytes: mime type, size, and for raster images dimensions and EXIF.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .mime_type import MimeType


@dataclass(frozen=True)
class FileMetadata:
    """Metadata for one physical file.

    ``width``/``height`` are ``None`` unless the file decoded as a raster
    image; ``exif`` is empty unless the file is a JPEG and EXIF could be
    read. Nothing is ever fabricated as zero.
    """

    mime_type: MimeType
    size_bytes: int
    width: Optional[int] = None
    height: Optional[int] = None
    exif: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.size_bytes < 0:
            raise ValueError(f"File size cannot be negative: {self.size_bytes}")
        if (self.width is None) != (self.height is None):
            raise ValueError("Width and height must both be set or both be absent")

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mime_type": self.mime_type.value,
            "size_bytes": self.size_bytes,
            "width": self.width,
            "height": self.height,
            "exif": dict(self.exif),
        }
