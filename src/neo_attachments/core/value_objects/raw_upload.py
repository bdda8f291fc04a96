"""Raw upload value object.

ONLY incoming uploads - what the HTTP/form layer hands over: content,
original filename and the client's declared content type.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union


@dataclass(frozen=True)
class RawUpload:
    """Incoming upload as received from the form layer.

    ``content`` is either the full byte string or a readable binary stream.
    ``content_type`` is advisory only; it is never trusted for validation.
    """

    content: Union[bytes, BinaryIO]
    filename: str
    content_type: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.filename, str) or not self.filename.strip():
            raise ValueError("Original filename cannot be empty")

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "RawUpload":
        """Build an upload from a local file, reading it eagerly."""
        path = Path(path)
        return cls(content=path.read_bytes(), filename=path.name, content_type=content_type)

    def read(self) -> bytes:
        """Return the content as bytes, reading the stream from its start if seekable."""
        if isinstance(self.content, (bytes, bytearray, memoryview)):
            return bytes(self.content)

        if hasattr(self.content, "seek"):
            try:
                self.content.seek(0)
            except (OSError, ValueError):
                pass  # non-seekable stream, read from current position
        return self.content.read()
