"""Transform error.

ONLY transform failures - raised when the built-in resize or a user
processing callback fails for one version of an upload.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Any, Dict, Optional

from .base import AttachmentError


class TransformError(AttachmentError):
    """Raised when processing a version fails.

    The whole attribute commit is aborted; no version of the upload is
    committed and the previously committed file stays untouched.
    """

    def __init__(
        self,
        message: str,
        version_name: str,
        cause: Optional[BaseException] = None,
        attribute_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        enhanced_details = details or {}
        enhanced_details["version"] = version_name
        if attribute_name:
            enhanced_details["attribute"] = attribute_name
        if cause is not None:
            enhanced_details["cause"] = f"{type(cause).__name__}: {cause}"

        super().__init__(
            message=message,
            error_code="ATTACHMENT_TRANSFORM_FAILED",
            details=enhanced_details
        )

        self.version_name = version_name
        self.cause = cause
        self.attribute_name = attribute_name
