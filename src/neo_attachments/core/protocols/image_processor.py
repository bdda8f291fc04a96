"""Image processor protocol.

ONLY image processing contract - defines the capability the transform
pipeline and metadata extractor use to decode images, run transform
callbacks and read EXIF.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from typing_extensions import Protocol, runtime_checkable

from ..value_objects.dimensions import Dimensions

# Receives a mutable image handle; may mutate it in place (returning None)
# or return a replacement handle.
TransformFn = Callable[[Any], Optional[Any]]


@dataclass(frozen=True)
class ImageInfo:
    """What an image processor can tell about a decodable image."""

    width: int
    height: int
    format: Optional[str] = None
    mime_type: Optional[str] = None
    exif: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ImageProcessor(Protocol):
    """Image processing capability.

    Implementations must never raise for files that are simply not
    images: ``inspect`` returns ``None`` for those.
    """

    supports_exif: bool

    def inspect(self, path: Path) -> Optional[ImageInfo]:
        """Decode the header of ``path``.

        Returns:
            ImageInfo for raster images, ``None`` when the file is not a
            decodable image. EXIF is only filled for JPEG sources.
        """
        ...

    def process(self, path: Path, callback: TransformFn) -> bytes:
        """Load ``path``, run ``callback`` on the image and return the encoded result.

        The output keeps the source format.
        """
        ...

    def resize_to_fit(self, dimensions: Dimensions) -> TransformFn:
        """Build a transform scaling the image to fit within ``dimensions``, keeping ratio."""
        ...

    def resize_and_crop(self, dimensions: Dimensions) -> TransformFn:
        """Build a transform scaling and center-cropping to exactly ``dimensions``."""
        ...
