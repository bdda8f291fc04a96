"""Attachment manager.

ONLY the host-facing facade - registers upload attributes per record type
and runs the commit engine from the record lifecycle: assignment, save,
destruction and abandoning unsaved uploads.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Type, Union

from ...config import AttachmentSettings, get_settings
from ...core.entities import (
    ORIGINAL,
    UploadAttribute,
    UploadedFile,
    UploadSession,
    UploadState,
    VersionSet,
)
from ...core.exceptions import (
    AttachmentError,
    ConfigurationError,
    TransformError,
    UnreadableFileError,
    ValidationError,
)
from ...core.protocols import HostRecord, ImageProcessor
from ...core.value_objects import RawUpload
from ...infrastructure.local_filesystem import LocalFileStorage
from ...infrastructure.pillow_processor import create_pillow_processor
from ..policies import PathPolicy
from .commit_engine import CommitEngine
from .metadata_extractor import create_metadata_extractor
from .staging_area import StagingArea
from .transform_pipeline import create_transform_pipeline

logger = logging.getLogger(__name__)

# Errors that reject one attribute's upload without failing the save
RECOVERABLE_ERRORS = (ValidationError, TransformError, UnreadableFileError)


class AttachmentManager:
    """Upload attributes for host records.

    Recoverable errors (validation, transform, unreadable upload) are
    reported to the record's error sink and returned from ``save`` per
    attribute; sibling attributes are unaffected. Configuration and
    relocation errors propagate.
    """

    def __init__(self, engine: CommitEngine, url_prefix: str = "/"):
        self._engine = engine
        self._url_prefix = url_prefix
        self._attributes: Dict[type, Dict[str, UploadAttribute]] = {}

    @property
    def engine(self) -> CommitEngine:
        return self._engine

    # Declaration

    def register(self, record_type: type, *attributes: UploadAttribute) -> None:
        """Declare upload attributes for ``record_type`` and its subclasses."""
        declared = self._attributes.setdefault(record_type, {})
        for attribute in attributes:
            if attribute.name in declared:
                raise ConfigurationError(
                    f"Upload attribute '{attribute.name}' is already declared on {record_type.__name__}",
                    attribute_name=attribute.name
                )
            declared[attribute.name] = attribute
            logger.debug(f"Declared {attribute!r} on {record_type.__name__}")

    def declare(self, *attributes: UploadAttribute):
        """Class decorator form of ``register``."""
        def decorator(record_type: Type) -> Type:
            self.register(record_type, *attributes)
            return record_type
        return decorator

    def attributes_for(self, record: Union[HostRecord, type]) -> Dict[str, UploadAttribute]:
        """All attributes declared for the record's type, base classes first."""
        record_type = record if isinstance(record, type) else type(record)
        result: Dict[str, UploadAttribute] = {}
        for klass in reversed(record_type.__mro__):
            result.update(self._attributes.get(klass, {}))
        return result

    def get_attribute(self, record: Union[HostRecord, type], name: str) -> UploadAttribute:
        attributes = self.attributes_for(record)
        if name not in attributes:
            record_type = record if isinstance(record, type) else type(record)
            raise ConfigurationError(
                f"{record_type.__name__} has no upload attribute '{name}'",
                attribute_name=name
            )
        return attributes[name]

    # Assignment

    async def assign(self, record: HostRecord, name: str, upload: Optional[RawUpload]) -> Optional[UploadSession]:
        """Assign a raw upload to ``name``: stage, validate and transform it.

        Returns the new session; its state is FAILED when the upload was
        rejected. Assigning ``None`` only drops an unsaved upload.
        """
        attribute = self.get_attribute(record, name)
        await self._release_pending(record, name)
        if upload is None:
            return None

        try:
            session = await self._engine.receive(record, attribute, upload)
        except UnreadableFileError as e:
            record.add_attachment_error(name, e)
            return None

        record.set_pending_upload(name, session)
        record.after_attachment_assigned(name, session)
        await self._prepare(record, name, session)
        return session

    async def assign_temp(self, record: HostRecord, name: str, temp_value: Optional[str]) -> Optional[UploadSession]:
        """Re-attach a previously staged upload from its temp value.

        Blank values are ignored, so a form field left empty does not drop
        an upload assigned in the same request.
        """
        attribute = self.get_attribute(record, name)
        if not temp_value:
            return None

        pending = record.get_pending_upload(name)
        if pending is not None and pending.is_pending and pending.temp_value == temp_value:
            return pending

        await self._release_pending(record, name)
        try:
            session = await self._engine.restore_temp(record, attribute, temp_value)
        except RECOVERABLE_ERRORS as e:
            record.add_attachment_error(name, e)
            return None

        record.set_pending_upload(name, session)
        return session

    async def _prepare(self, record: HostRecord, name: str, session: UploadSession) -> None:
        try:
            if session.state is UploadState.STAGED:
                await self._engine.validate(session)
            if session.state is UploadState.VALIDATED:
                await self._engine.transform(session)
        except RECOVERABLE_ERRORS as e:
            logger.info(f"Upload for {name} rejected: {e.message}")
            record.add_attachment_error(name, e)

    async def _release_pending(self, record: HostRecord, name: str) -> None:
        pending = record.get_pending_upload(name)
        if pending is None:
            return
        if pending.is_pending or pending.state is UploadState.EMPTY:
            await self._engine.abandon(pending)
        record.set_pending_upload(name, None)

    # Record lifecycle

    async def save(self, record: HostRecord) -> Dict[str, AttachmentError]:
        """Commit every pending upload of ``record``.

        Call after the record has its final identity (for the default
        store_dir, after it has an id).

        Returns:
            Errors of attributes whose upload was rejected, by attribute name

        Raises:
            ConfigurationError: a path could not be resolved
            RelocationError: files could not be placed for an attribute
        """
        errors: Dict[str, AttachmentError] = {}
        for name in self.attributes_for(record):
            session = record.get_pending_upload(name)
            if session is None:
                continue

            if session.state is UploadState.FAILED:
                if session.error is not None:
                    errors[name] = session.error
                await self._engine.finalize(session)
                record.set_pending_upload(name, None)
                continue

            if session.is_committed:
                self._engine.check_identity(record, session)
                continue

            if session.state is not UploadState.TRANSFORMED:
                await self._prepare(record, name, session)
                if session.state is UploadState.FAILED:
                    errors[name] = session.error
                    record.set_pending_upload(name, None)
                    continue

            await self._engine.commit(record, session)
            await self._engine.finalize(session)
            record.after_attachment_committed(name, self.files(record, name))

        return errors

    async def destroy(self, record: HostRecord) -> int:
        """Remove every committed file of every upload attribute.

        A record without uploads is a no-op.

        Returns:
            Number of files removed
        """
        removed = 0
        for name, attribute in self.attributes_for(record).items():
            session = record.get_pending_upload(name)
            if session is not None and (session.is_pending or session.state is UploadState.EMPTY):
                await self._engine.abandon(session)
                session = None

            committed_session = session if session is not None and session.is_committed else None
            files = committed_session.committed if committed_session else self._engine.stored_files(record, attribute)
            if files is None:
                continue

            record.before_attachment_destroyed(name, self._uploaded(files))
            removed += await self._engine.remove(record, attribute, files, committed_session)
            record.set_pending_upload(name, None)
        return removed

    async def abandon(self, record: HostRecord, name: Optional[str] = None) -> None:
        """Drop unsaved uploads of one attribute, or of all of them."""
        names = [name] if name is not None else list(self.attributes_for(record))
        for attribute_name in names:
            self.get_attribute(record, attribute_name)
            await self._release_pending(record, attribute_name)

    # Read-back

    def files(self, record: HostRecord, name: str) -> Optional[VersionSet[UploadedFile]]:
        """Files of ``name``: staged while an upload is pending, committed after save.

        Returns None when there is nothing to show.
        """
        attribute = self.get_attribute(record, name)
        session = record.get_pending_upload(name)

        if session is not None and session.state is UploadState.TRANSFORMED:
            return session.staged_versions().map(lambda staged: UploadedFile.from_staged(staged, self._url_prefix))
        if session is not None and session.is_committed:
            return self._uploaded(session.committed)

        stored = self._engine.stored_files(record, attribute)
        return self._uploaded(stored) if stored is not None else None

    def url(self, record: HostRecord, name: str, version: str = ORIGINAL) -> Optional[str]:
        files = self.files(record, name)
        if files is None:
            return None
        if version not in files:
            raise KeyError(f"Upload attribute '{name}' has no version '{version}'")
        return files[version].url

    def temp_value(self, record: HostRecord, name: str) -> Optional[str]:
        self.get_attribute(record, name)
        session = record.get_pending_upload(name)
        return session.temp_value if session is not None else None

    def _uploaded(self, files: VersionSet) -> VersionSet[UploadedFile]:
        return files.map(lambda committed: UploadedFile.from_committed(committed, self._url_prefix))


def create_attachment_manager(
    settings: Optional[AttachmentSettings] = None,
    image_processor: Optional[ImageProcessor] = None,
    use_magic: bool = True
) -> AttachmentManager:
    """Create attachment manager with local storage and Pillow processing."""
    settings = settings or get_settings()
    storage_root = Path(settings.storage_root)
    processor = image_processor or create_pillow_processor(settings.jpeg_quality)
    storage = LocalFileStorage(
        file_permissions=settings.file_permissions,
        directory_permissions=settings.directory_permissions
    )

    engine = CommitEngine(
        path_policy=PathPolicy(storage_root),
        staging=StagingArea(storage_root, storage),
        extractor=create_metadata_extractor(processor, use_magic=use_magic),
        pipeline=create_transform_pipeline(processor, storage),
        storage=storage,
        file_permissions=settings.file_permissions
    )
    return AttachmentManager(engine, url_prefix=settings.url_prefix)
