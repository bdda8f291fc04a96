"""Attachment exceptions.

Domain-specific exceptions for the upload lifecycle. Each exception
represents a specific error condition and carries structured details.
"""

from .base import AttachmentError, create_error_response
from .configuration_error import ConfigurationError
from .validation_error import ValidationError, InvalidFileType, FileSizeOutOfRange
from .transform_error import TransformError
from .unreadable_file import UnreadableFileError
from .relocation_error import RelocationError
from .invalid_state import InvalidStateError
from .identity_warning import AttachmentIdentityWarning

__all__ = [
    "AttachmentError",
    "create_error_response",
    "ConfigurationError",
    "ValidationError",
    "InvalidFileType",
    "FileSizeOutOfRange",
    "TransformError",
    "UnreadableFileError",
    "RelocationError",
    "InvalidStateError",
    "AttachmentIdentityWarning",
]
