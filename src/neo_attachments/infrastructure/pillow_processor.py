"""Pillow image processor.

ONLY Pillow-backed image handling - header inspection, EXIF extraction,
transform callbacks and the built-in scale-to-fit / crop transforms.

Following maximum separation architecture - one file = one purpose.
"""

import io
import logging
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, Optional

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from ..core.protocols import ImageInfo, TransformFn
from ..core.value_objects import Dimensions

logger = logging.getLogger(__name__)

# Modes that need flattening before JPEG encoding
_ALPHA_MODES = ('RGBA', 'LA', 'P')


def _exif_value(value: Any) -> Optional[Any]:
    """Reduce an EXIF value to a plain str/int/float, or None to skip it."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return value.strip('\x00 ').strip()
    if isinstance(value, (float, Fraction)):
        return float(value)
    if isinstance(value, bytes):
        text = value.decode('utf-8', errors='ignore').strip('\x00 ').strip()
        return text if text.isprintable() and text else None
    # IFDRational and friends
    if hasattr(value, 'numerator') and hasattr(value, 'denominator'):
        try:
            return float(value)
        except (ZeroDivisionError, ValueError, TypeError):
            return None
    return None


class PillowImageProcessor:
    """Image processor backed by Pillow.

    Output keeps the source format; JPEG output is re-encoded with
    ``jpeg_quality`` and keeps the source EXIF block.
    """

    supports_exif = True

    def __init__(self, jpeg_quality: int = 85):
        self._jpeg_quality = jpeg_quality

    def inspect(self, path: Path) -> Optional[ImageInfo]:
        try:
            with Image.open(path) as image:
                width, height = image.size
                image_format = image.format
                exif = self._read_exif(image) if image_format == 'JPEG' else {}
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.debug(f"{path} is not a decodable image: {e}")
            return None

        return ImageInfo(
            width=width,
            height=height,
            format=image_format,
            mime_type=Image.MIME.get(image_format) if image_format else None,
            exif=exif
        )

    def process(self, path: Path, callback: TransformFn) -> bytes:
        with Image.open(path) as image:
            image.load()
            image_format = image.format or 'PNG'
            exif_block = image.info.get('exif')

            result = callback(image)
            output = result if result is not None else image
            return self._encode(output, image_format, exif_block)

    def resize_to_fit(self, dimensions: Dimensions) -> TransformFn:
        size = dimensions.as_tuple()

        def fit(image):
            image.thumbnail(size, Image.Resampling.LANCZOS)

        return fit

    def resize_and_crop(self, dimensions: Dimensions) -> TransformFn:
        size = dimensions.as_tuple()

        def crop(image):
            return ImageOps.fit(image, size, Image.Resampling.LANCZOS, centering=(0.5, 0.5))

        return crop

    def _encode(self, image: Image.Image, image_format: str, exif_block: Optional[bytes]) -> bytes:
        save_kwargs: Dict[str, Any] = {'format': image_format}

        if image_format == 'JPEG':
            save_kwargs['quality'] = self._jpeg_quality
            if exif_block:
                save_kwargs['exif'] = exif_block
            if image.mode in _ALPHA_MODES:
                if image.mode == 'P':
                    image = image.convert('RGBA')
                background = Image.new('RGB', image.size, (255, 255, 255))
                background.paste(image, mask=image.split()[-1])
                image = background
            elif image.mode not in ('RGB', 'L', 'CMYK'):
                image = image.convert('RGB')

        buffer = io.BytesIO()
        image.save(buffer, **save_kwargs)
        return buffer.getvalue()

    def _read_exif(self, image: Image.Image) -> Dict[str, Any]:
        exif_data: Dict[str, Any] = {}
        try:
            exif = image.getexif()
            tags = dict(exif)
            tags.update(exif.get_ifd(ExifTags.IFD.Exif))
        except (OSError, ValueError, KeyError) as e:
            logger.debug(f"Could not read EXIF: {e}")
            return exif_data

        for tag_id, raw_value in tags.items():
            tag = ExifTags.TAGS.get(tag_id)
            if not tag:
                continue
            value = _exif_value(raw_value)
            if value is not None and value != "":
                exif_data[tag] = value
        return exif_data


def create_pillow_processor(jpeg_quality: int = 85) -> PillowImageProcessor:
    """Create Pillow image processor."""
    return PillowImageProcessor(jpeg_quality)
