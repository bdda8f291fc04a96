"""Metadata extractor.

ONLY metadata derivation - mime type, byte size and, for raster images,
pixel dimensions and EXIF fields of one file.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from pathlib import Path
from typing import Optional

try:
    import magic
    HAS_MAGIC = True
except ImportError:
    HAS_MAGIC = False

from ...core.exceptions import UnreadableFileError
from ...core.protocols import ImageProcessor
from ...core.value_objects import FileMetadata, MimeType
from ...utils import split_filename

logger = logging.getLogger(__name__)

# Bytes handed to libmagic for content sniffing
SNIFF_BYTES = 8192

# Types libmagic reports when it has no real answer
_INCONCLUSIVE_TYPES = {'application/octet-stream', 'inode/x-empty', 'application/x-empty'}


class MetadataExtractor:
    """Derives FileMetadata from a file on disk.

    Mime detection order: content sniffing with python-magic (when
    installed), the image format reported by the image processor, then the
    file extension. Best effort; only a file that cannot be opened at all
    is an error.
    """

    def __init__(self, image_processor: Optional[ImageProcessor] = None, use_magic: bool = True):
        self._image_processor = image_processor
        self._use_magic = use_magic and HAS_MAGIC

    def extract(self, path: Path, filename: Optional[str] = None) -> FileMetadata:
        """Extract metadata for ``path``.

        Args:
            path: File to inspect
            filename: Name whose extension is the last-resort mime hint;
                defaults to the file's own name

        Raises:
            UnreadableFileError: if the file cannot be opened
        """
        try:
            with open(path, 'rb') as handle:
                head = handle.read(SNIFF_BYTES)
            size_bytes = path.stat().st_size
        except OSError as e:
            raise UnreadableFileError(f"Cannot read {path.name}: {e}", path=path) from e

        mime_type = self._sniff(head)

        info = self._image_processor.inspect(path) if self._image_processor else None
        if mime_type is None and info is not None and info.mime_type:
            mime_type = MimeType(info.mime_type)

        if mime_type is None:
            mime_type = MimeType.from_extension(split_filename(filename or path.name)[1]) or MimeType.default()

        width = height = None
        exif = {}
        if info is not None:
            width, height = info.width, info.height
            if mime_type.is_jpeg() and self._image_processor.supports_exif:
                exif = dict(info.exif)

        metadata = FileMetadata(
            mime_type=mime_type,
            size_bytes=size_bytes,
            width=width,
            height=height,
            exif=exif
        )
        logger.debug(f"Metadata for {path.name}: {metadata.to_dict()}")
        return metadata

    def _sniff(self, head: bytes) -> Optional[MimeType]:
        if not self._use_magic or not head:
            return None
        try:
            detected = magic.from_buffer(head, mime=True)
        except magic.MagicException as e:
            logger.debug(f"libmagic could not classify content: {e}")
            return None

        if not detected or detected in _INCONCLUSIVE_TYPES:
            return None
        try:
            return MimeType(detected)
        except ValueError:
            return None


def create_metadata_extractor(
    image_processor: Optional[ImageProcessor] = None,
    use_magic: bool = True
) -> MetadataExtractor:
    """Create metadata extractor."""
    return MetadataExtractor(image_processor, use_magic)
