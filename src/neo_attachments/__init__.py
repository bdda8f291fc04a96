"""neo-attachments: upload lifecycle and versioned file storage for records.

Declare upload attributes with ``upload_column`` / ``image_column``,
register them with an AttachmentManager and drive it from the record
lifecycle (assign, save, destroy).
"""

from .__version__ import __version__

from .config import AttachmentSettings, LoggingConfig, get_settings, reset_settings, setup_logging
from .core.entities import (
    ORIGINAL,
    CommittedFile,
    OldFilesPolicy,
    StagedFile,
    UploadAttribute,
    UploadedFile,
    UploadSession,
    UploadState,
    VersionSet,
    VersionSpec,
)
from .core.exceptions import (
    AttachmentError,
    AttachmentIdentityWarning,
    ConfigurationError,
    FileSizeOutOfRange,
    InvalidFileType,
    InvalidStateError,
    RelocationError,
    TransformError,
    UnreadableFileError,
    ValidationError,
    create_error_response,
)
from .core.protocols import HostRecord, ImageInfo, ImageProcessor
from .core.value_objects import (
    Dimensions,
    Dynamic,
    FileMetadata,
    FileSize,
    MimeType,
    RawUpload,
    RelativePath,
    ResizeSpec,
    Static,
)
from .application import (
    AttachmentManager,
    CleanupService,
    CommitEngine,
    MetadataExtractor,
    PathPolicy,
    StagingArea,
    TransformPipeline,
    UploadValidator,
    create_attachment_manager,
    create_cleanup_service,
)
from .infrastructure import LocalFileStorage, PillowImageProcessor
from .integrations import AttachmentRecordMixin
from .declarations import IMAGE_EXTENSIONS, image_column, parse_versions, upload_column

__all__ = [
    "__version__",
    # Configuration
    "AttachmentSettings",
    "LoggingConfig",
    "get_settings",
    "reset_settings",
    "setup_logging",
    # Entities
    "ORIGINAL",
    "CommittedFile",
    "OldFilesPolicy",
    "StagedFile",
    "UploadAttribute",
    "UploadedFile",
    "UploadSession",
    "UploadState",
    "VersionSet",
    "VersionSpec",
    # Exceptions
    "AttachmentError",
    "AttachmentIdentityWarning",
    "ConfigurationError",
    "FileSizeOutOfRange",
    "InvalidFileType",
    "InvalidStateError",
    "RelocationError",
    "TransformError",
    "UnreadableFileError",
    "ValidationError",
    "create_error_response",
    # Protocols
    "HostRecord",
    "ImageInfo",
    "ImageProcessor",
    # Value objects
    "Dimensions",
    "Dynamic",
    "FileMetadata",
    "FileSize",
    "MimeType",
    "RawUpload",
    "RelativePath",
    "ResizeSpec",
    "Static",
    # Services
    "AttachmentManager",
    "CleanupService",
    "CommitEngine",
    "MetadataExtractor",
    "PathPolicy",
    "StagingArea",
    "TransformPipeline",
    "UploadValidator",
    "create_attachment_manager",
    "create_cleanup_service",
    # Infrastructure
    "LocalFileStorage",
    "PillowImageProcessor",
    # Declarations
    "AttachmentRecordMixin",
    "IMAGE_EXTENSIONS",
    "image_column",
    "parse_versions",
    "upload_column",
]
