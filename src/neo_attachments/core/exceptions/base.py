"""Base exceptions for neo-attachments.

This module defines the root of the attachment exception hierarchy. Every
error carries a machine-readable error code and a details dictionary so
host applications can surface field-level messages or structured API
responses without parsing exception text.
"""

from typing import Any, Dict, Optional


class AttachmentError(Exception):
    """Base exception for all neo-attachments errors.

    All exceptions raised by the upload lifecycle inherit from this class and
    include structured error information for debugging and host responses.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: AttachmentError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The attachment exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
