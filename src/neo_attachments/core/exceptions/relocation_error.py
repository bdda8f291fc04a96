"""Relocation error.

ONLY relocation failures - raised when moving staged files into permanent
storage fails at the filesystem level.

Following maximum separation architecture - one file = one purpose.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .base import AttachmentError


class RelocationError(AttachmentError):
    """Raised when a commit cannot place files in permanent storage.

    Fatal for the commit attempt. Files already placed by the attempt are
    rolled back, staged files remain for retry or cleanup, and the record's
    previous committed file is left untouched.
    """

    def __init__(
        self,
        message: str,
        version_name: Optional[str] = None,
        source: Optional[Union[str, Path]] = None,
        destination: Optional[Union[str, Path]] = None,
        attribute_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        if version_name:
            enhanced_details["version"] = version_name
        if source is not None:
            enhanced_details["source"] = str(source)
        if destination is not None:
            enhanced_details["destination"] = str(destination)
        if attribute_name:
            enhanced_details["attribute"] = attribute_name

        super().__init__(
            message=message,
            error_code="ATTACHMENT_RELOCATION_FAILED",
            details=enhanced_details
        )

        self.version_name = version_name
        self.source = source
        self.destination = destination
        self.attribute_name = attribute_name
