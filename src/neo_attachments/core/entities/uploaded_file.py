"""Uploaded file value object.

ONLY consumer-facing file handles - wraps a single physical file (staged
or committed) with its path, URL and metadata.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

from ..value_objects import FileMetadata, MimeType, RelativePath
from ...utils import split_filename
from .committed_file import CommittedFile
from .staged_file import StagedFile


def build_url(url_prefix: str, relative_path: RelativePath) -> str:
    """Join a URL prefix and a storage-relative path, percent-encoding components."""
    prefix = url_prefix.rstrip("/")
    return f"{prefix}/{quote(relative_path.as_posix())}"


@dataclass(frozen=True)
class UploadedFile:
    """One version of an upload as exposed to the host application.

    ``committed`` is False while the file still lives in the staging area
    (the URL then points into the tmp dir).
    """

    version_name: str
    path: Path
    relative_path: RelativePath
    url: str
    committed: bool
    metadata: Optional[FileMetadata] = None

    @classmethod
    def from_committed(cls, committed_file: CommittedFile, url_prefix: str) -> "UploadedFile":
        return cls(
            version_name=committed_file.version_name,
            path=committed_file.path,
            relative_path=committed_file.relative_path,
            url=build_url(url_prefix, committed_file.relative_path),
            committed=True,
            metadata=committed_file.metadata,
        )

    @classmethod
    def from_staged(cls, staged_file: StagedFile, url_prefix: str) -> "UploadedFile":
        return cls(
            version_name=staged_file.version_name,
            path=staged_file.path,
            relative_path=staged_file.relative_path,
            url=build_url(url_prefix, staged_file.relative_path),
            committed=False,
            metadata=staged_file.metadata,
        )

    @property
    def filename(self) -> str:
        return self.relative_path.name

    @property
    def basename(self) -> str:
        return split_filename(self.filename)[0]

    @property
    def extension(self) -> str:
        return split_filename(self.filename)[1]

    @property
    def size(self) -> Optional[int]:
        """Byte size from metadata, falling back to the filesystem."""
        if self.metadata is not None:
            return self.metadata.size_bytes
        try:
            return self.path.stat().st_size
        except OSError:
            return None

    @property
    def mime_type(self) -> Optional[str]:
        if self.metadata is not None:
            return self.metadata.mime_type.value
        guessed = MimeType.from_extension(self.extension)
        return guessed.value if guessed else None

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

    def read(self) -> bytes:
        return self.path.read_bytes()

    def __str__(self) -> str:
        return self.url

    def __fspath__(self) -> Union[str, bytes]:
        return str(self.path)
