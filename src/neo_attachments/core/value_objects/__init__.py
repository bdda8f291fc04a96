"""Attachment value objects.

Immutable value objects that encapsulate upload-related rules and provide
type safety with validation.

Following maximum separation architecture - one value object per file.
"""

from .resolver import Static, Dynamic, Resolver, as_resolver
from .relative_path import RelativePath
from .mime_type import MimeType
from .file_size import FileSize
from .dimensions import Dimensions, ResizeSpec
from .upload_session_id import UploadSessionId
from .file_metadata import FileMetadata
from .raw_upload import RawUpload
from .record_identity import RecordIdentity

__all__ = [
    "Static",
    "Dynamic",
    "Resolver",
    "as_resolver",
    "RelativePath",
    "MimeType",
    "FileSize",
    "Dimensions",
    "ResizeSpec",
    "UploadSessionId",
    "FileMetadata",
    "RawUpload",
    "RecordIdentity",
]
