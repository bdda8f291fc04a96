"""Committed file entity.

ONLY committed files - descriptor for one version durably stored at its
final, policy-computed location.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..value_objects import FileMetadata, MimeType, RelativePath


@dataclass(frozen=True)
class CommittedFile:
    """A durably stored version.

    ``metadata`` is present for files committed in this process; files
    rebuilt from a record's stored value carry ``None`` until inspected.
    """

    version_name: str
    relative_path: RelativePath
    path: Path
    metadata: Optional[FileMetadata] = None

    @property
    def filename(self) -> str:
        return self.relative_path.name

    @property
    def size_bytes(self) -> Optional[int]:
        return self.metadata.size_bytes if self.metadata else None

    @property
    def mime_type(self) -> Optional[MimeType]:
        return self.metadata.mime_type if self.metadata else None

    @property
    def width(self) -> Optional[int]:
        return self.metadata.width if self.metadata else None

    @property
    def height(self) -> Optional[int]:
        return self.metadata.height if self.metadata else None

    @property
    def exif(self) -> Dict[str, Any]:
        return dict(self.metadata.exif) if self.metadata else {}

    def exists(self) -> bool:
        return self.path.is_file()

    def __str__(self) -> str:
        return f"{self.version_name}:{self.relative_path}"
