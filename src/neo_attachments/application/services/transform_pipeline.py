"""Transform pipeline.

ONLY version processing - runs the built-in resize and user callbacks
against a staged version and writes the result back in place.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from typing import List, Optional

from ...core.entities import StagedFile, UploadAttribute, VersionSpec
from ...core.exceptions import TransformError
from ...core.protocols import ImageProcessor, TransformFn
from ...infrastructure.local_filesystem import LocalFileStorage

logger = logging.getLogger(__name__)


def chain_transforms(transforms: List[TransformFn]) -> TransformFn:
    """Compose transforms; each gets the image returned by the previous one."""
    def run(image):
        for transform in transforms:
            result = transform(image)
            if result is not None:
                image = result
        return image

    return run


class TransformPipeline:
    """Applies processing to staged versions.

    The new bytes replace the staged file atomically; the previous bytes
    are gone once ``apply`` returns.
    """

    def __init__(self, image_processor: Optional[ImageProcessor], storage: LocalFileStorage):
        self._image_processor = image_processor
        self._storage = storage

    def apply(
        self,
        staged: StagedFile,
        transform_fn: TransformFn,
        attribute_name: Optional[str] = None
    ) -> StagedFile:
        """Run ``transform_fn`` on the image in ``staged`` and persist the output.

        Raises:
            TransformError: if there is no image processor, or decoding,
                the callback or encoding fails
        """
        if self._image_processor is None:
            raise TransformError(
                f"No image processor configured to transform '{staged.version_name}'",
                version_name=staged.version_name,
                attribute_name=attribute_name
            )

        try:
            data = self._image_processor.process(staged.path, transform_fn)
        except TransformError:
            raise
        except Exception as e:
            logger.error(f"Transform of {staged} failed: {e}")
            raise TransformError(
                f"Processing version '{staged.version_name}' failed: {e}",
                version_name=staged.version_name,
                cause=e,
                attribute_name=attribute_name
            ) from e

        try:
            self._storage.write_atomic(staged.path, data)
        except OSError as e:
            raise TransformError(
                f"Could not write processed version '{staged.version_name}': {e}",
                version_name=staged.version_name,
                cause=e,
                attribute_name=attribute_name
            ) from e

        logger.debug(f"Transformed {staged} ({len(data)} bytes)")
        # metadata no longer describes the bytes
        return StagedFile(
            path=staged.path,
            relative_path=staged.relative_path,
            version_name=staged.version_name,
            session_id=staged.session_id,
            original_filename=staged.original_filename
        )

    def transforms_for(self, version: VersionSpec, attribute: UploadAttribute) -> List[TransformFn]:
        """Built-in resize first, then the user transform.

        Without an image processor the resize is skipped and the version is
        stored as a plain copy; a user transform still needs a processor.
        """
        transforms: List[TransformFn] = []
        if version.resize is not None:
            dimensions = version.resize.dimensions
            if self._image_processor is None:
                logger.warning(
                    f"No image processor configured; storing '{version.name}' of {attribute.name} "
                    f"without resizing to {dimensions}"
                )
            elif version.resize.crop:
                transforms.append(self._image_processor.resize_and_crop(dimensions))
            else:
                transforms.append(self._image_processor.resize_to_fit(dimensions))
        if version.transform is not None:
            transforms.append(version.transform)
        return transforms

    def run_version(self, staged: StagedFile, version: VersionSpec, attribute: UploadAttribute) -> StagedFile:
        """Process one version; unprocessed versions are returned unchanged."""
        transforms = self.transforms_for(version, attribute)
        if not transforms:
            return staged
        return self.apply(staged, chain_transforms(transforms), attribute.name)


def create_transform_pipeline(
    image_processor: Optional[ImageProcessor],
    storage: LocalFileStorage
) -> TransformPipeline:
    """Create transform pipeline."""
    return TransformPipeline(image_processor, storage)
