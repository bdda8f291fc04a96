"""Configuration error for attachment declarations.

ONLY configuration failures - raised when an attribute declaration is
invalid or when a path/filename resolver fails or returns an unusable value.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Any, Dict, Optional

from .base import AttachmentError


class ConfigurationError(AttachmentError):
    """Raised when attachment configuration is invalid.

    Fatal: surfaced either at declaration time or the first time a
    resolver is evaluated for a record.
    """

    def __init__(
        self,
        message: str,
        attribute_name: Optional[str] = None,
        option: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize configuration error.

        Args:
            message: Human-readable error message
            attribute_name: Upload attribute the configuration belongs to
            option: Declaration option that is at fault (store_dir, versions, ...)
            error_code: Specific error code for the failure
            details: Additional details about the failure
        """
        enhanced_details = details or {}
        if attribute_name:
            enhanced_details["attribute"] = attribute_name
        if option:
            enhanced_details["option"] = option

        super().__init__(
            message=message,
            error_code=error_code or "ATTACHMENT_CONFIGURATION_ERROR",
            details=enhanced_details
        )

        self.attribute_name = attribute_name
        self.option = option
