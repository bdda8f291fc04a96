"""Unreadable file error.

ONLY unreadable files - raised when a raw upload or staged file cannot be
opened at all.

Following maximum separation architecture - one file = one purpose.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .base import AttachmentError


class UnreadableFileError(AttachmentError):
    """Raised when a file cannot be opened. Fatal for the owning session."""

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        if path is not None:
            enhanced_details["path"] = str(path)

        super().__init__(
            message=message,
            error_code="ATTACHMENT_UNREADABLE_FILE",
            details=enhanced_details
        )

        self.path = path
