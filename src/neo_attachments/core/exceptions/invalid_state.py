"""Invalid state error for upload sessions."""

from typing import Any, Dict, Optional

from .base import AttachmentError


class InvalidStateError(AttachmentError):
    """Raised when an upload session is driven out of lifecycle order."""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        requested_state: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        if current_state:
            enhanced_details["current_state"] = current_state
        if requested_state:
            enhanced_details["requested_state"] = requested_state

        super().__init__(
            message=message,
            error_code="INVALID_UPLOAD_STATE",
            details=enhanced_details
        )

        self.current_state = current_state
        self.requested_state = requested_state
