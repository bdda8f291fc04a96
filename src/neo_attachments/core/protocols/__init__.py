"""Attachment protocols.

Contracts for the collaborators the upload lifecycle depends on but does
not implement itself: the host record and the image processor.
"""

from .host_record import HostRecord
from .image_processor import ImageInfo, ImageProcessor, TransformFn

__all__ = [
    "HostRecord",
    "ImageInfo",
    "ImageProcessor",
    "TransformFn",
]
