"""Staged file entity.

ONLY staged files - a physical file in the staging area plus the logical
version it holds and the session that owns it.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from ..value_objects import FileMetadata, RelativePath, UploadSessionId
from ...utils import split_filename


@dataclass(frozen=True)
class StagedFile:
    """A version's bytes waiting in temporary storage.

    ``path`` is absolute; ``relative_path`` is relative to the storage
    root. ``metadata`` is filled once the metadata extractor has run and
    replaced whenever the bytes change.
    """

    path: Path
    relative_path: RelativePath
    version_name: str
    session_id: UploadSessionId
    original_filename: str
    metadata: Optional[FileMetadata] = None

    @property
    def extension(self) -> str:
        """Normalized extension of the original filename (no dot)."""
        return split_filename(self.original_filename)[1]

    def exists(self) -> bool:
        return self.path.is_file()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def with_metadata(self, metadata: FileMetadata) -> "StagedFile":
        return replace(self, metadata=metadata)

    def __str__(self) -> str:
        return f"{self.version_name}:{self.relative_path}"
