"""Upload validator.

ONLY upload policy checks - extension allow-list, mime type allow-list and
size limits of an attribute, applied to a staged original.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from ...core.entities import UploadAttribute
from ...core.exceptions import FileSizeOutOfRange, InvalidFileType
from ...core.value_objects import FileMetadata, FileSize
from ...utils import normalize_extension


@dataclass
class UploadValidatorConfig:
    """Configuration for upload validator."""

    attribute_name: Optional[str] = None

    # None means allow all
    allowed_extensions: Optional[FrozenSet[str]] = None
    allowed_mime_types: Optional[FrozenSet[str]] = None

    min_size: Optional[FileSize] = None
    max_size: Optional[FileSize] = None

    @classmethod
    def from_attribute(cls, attribute: UploadAttribute) -> "UploadValidatorConfig":
        return cls(
            attribute_name=attribute.name,
            allowed_extensions=attribute.allowed_extensions,
            allowed_mime_types=attribute.allowed_mime_types,
            min_size=attribute.min_size,
            max_size=attribute.max_size
        )


class UploadValidator:
    """Upload validation service.

    Checks run in a fixed order: extension, mime type, size. The first
    violation is raised.
    """

    def __init__(self, config: Optional[UploadValidatorConfig] = None):
        self._config = config or UploadValidatorConfig()

    def validate(self, filename: str, extension: str, metadata: FileMetadata) -> None:
        """Validate an upload.

        Args:
            filename: Original filename, for messages
            extension: Extension to check (already corrected if extension
                fixing is on)
            metadata: Metadata extracted from the staged bytes

        Raises:
            InvalidFileType: extension or mime type not allowed
            FileSizeOutOfRange: file too small or too large
        """
        self.validate_extension(filename, extension)
        self.validate_mime_type(filename, metadata)
        self.validate_size(filename, metadata.size_bytes)

    def validate_extension(self, filename: str, extension: str) -> None:
        allowed = self._config.allowed_extensions
        if allowed is None:
            return

        ext = normalize_extension(extension)
        if ext not in allowed:
            shown = f".{ext}" if ext else "(none)"
            raise InvalidFileType(
                f"File extension {shown} is not allowed; allowed: {', '.join(sorted(allowed))}",
                attribute_name=self._config.attribute_name,
                filename=filename,
                extension=ext,
                allowed_types=set(allowed),
                rule="extension"
            )

    def validate_mime_type(self, filename: str, metadata: FileMetadata) -> None:
        allowed = self._config.allowed_mime_types
        if allowed is None:
            return

        if not metadata.mime_type.matches_any(allowed):
            raise InvalidFileType(
                f"File type {metadata.mime_type.essence} is not allowed",
                attribute_name=self._config.attribute_name,
                filename=filename,
                mime_type=metadata.mime_type.essence,
                allowed_types=set(allowed),
                rule="mime_type"
            )

    def validate_size(self, filename: str, size_bytes: int) -> None:
        min_size = self._config.min_size
        max_size = self._config.max_size

        if min_size is not None and size_bytes < min_size.value:
            raise FileSizeOutOfRange(
                f"File is too small ({FileSize(size_bytes)}); minimum is {min_size}",
                attribute_name=self._config.attribute_name,
                filename=filename,
                size_bytes=size_bytes,
                min_bytes=min_size.value,
                max_bytes=max_size.value if max_size else None
            )

        if max_size is not None and size_bytes > max_size.value:
            raise FileSizeOutOfRange(
                f"File is too large ({FileSize(size_bytes)}); maximum is {max_size}",
                attribute_name=self._config.attribute_name,
                filename=filename,
                size_bytes=size_bytes,
                min_bytes=min_size.value if min_size else None,
                max_bytes=max_size.value
            )


def create_upload_validator(config: Optional[UploadValidatorConfig] = None) -> UploadValidator:
    """Create upload validator."""
    return UploadValidator(config)
