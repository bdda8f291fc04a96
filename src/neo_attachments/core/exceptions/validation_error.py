"""Validation errors for incoming uploads.

ValidationError is the recoverable, field-level rejection of an upload.
InvalidFileType and FileSizeOutOfRange narrow it down to the rule that was
violated.
"""

from typing import Any, Dict, Optional, Set

from .base import AttachmentError


class ValidationError(AttachmentError):
    """Raised when an upload violates the attribute's policy.

    The upload is rejected and nothing is committed; the record keeps
    whatever value it had before the assignment.
    """

    def __init__(
        self,
        message: str,
        attribute_name: Optional[str] = None,
        filename: Optional[str] = None,
        rule: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        if attribute_name:
            enhanced_details["attribute"] = attribute_name
        if filename:
            enhanced_details["filename"] = filename
        if rule:
            enhanced_details["rule"] = rule

        super().__init__(
            message=message,
            error_code=error_code or "ATTACHMENT_VALIDATION_ERROR",
            details=enhanced_details
        )

        self.attribute_name = attribute_name
        self.filename = filename
        self.rule = rule


class InvalidFileType(ValidationError):
    """Raised when the extension or mime type is not on the allow-list."""

    def __init__(
        self,
        message: str,
        attribute_name: Optional[str] = None,
        filename: Optional[str] = None,
        extension: Optional[str] = None,
        mime_type: Optional[str] = None,
        allowed_types: Optional[Set[str]] = None,
        rule: str = "extension",
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        if extension is not None:
            enhanced_details["extension"] = extension
        if mime_type:
            enhanced_details["mime_type"] = mime_type
        if allowed_types:
            enhanced_details["allowed_types"] = sorted(allowed_types)

        super().__init__(
            message=message,
            attribute_name=attribute_name,
            filename=filename,
            rule=rule,
            error_code="INVALID_FILE_TYPE",
            details=enhanced_details
        )

        self.extension = extension
        self.mime_type = mime_type
        self.allowed_types = allowed_types


class FileSizeOutOfRange(ValidationError):
    """Raised when the upload is smaller or larger than allowed."""

    def __init__(
        self,
        message: str,
        attribute_name: Optional[str] = None,
        filename: Optional[str] = None,
        size_bytes: Optional[int] = None,
        min_bytes: Optional[int] = None,
        max_bytes: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        if size_bytes is not None:
            enhanced_details["size_bytes"] = size_bytes
        if min_bytes is not None:
            enhanced_details["min_bytes"] = min_bytes
        if max_bytes is not None:
            enhanced_details["max_bytes"] = max_bytes

        super().__init__(
            message=message,
            attribute_name=attribute_name,
            filename=filename,
            rule="size",
            error_code="FILE_SIZE_OUT_OF_RANGE",
            details=enhanced_details
        )

        self.size_bytes = size_bytes
        self.min_bytes = min_bytes
        self.max_bytes = max_bytes
