"""Commit engine.

ONLY the upload state machine - drives an upload session from received
bytes through validation, transforms and relocation into permanent
storage, keeps record metadata in sync and removes superseded files.

Following maximum separation architecture - one file = one purpose.
"""

import asyncio
import logging
import warnings
import weakref
from typing import Any, Dict, Iterable, Optional, Tuple

from ...core.entities import (
    ORIGINAL,
    CommittedFile,
    OldFilesPolicy,
    StagedFile,
    UploadAttribute,
    UploadSession,
    UploadState,
    VersionSet,
    VersionSpec,
)
from ...core.exceptions import (
    AttachmentError,
    AttachmentIdentityWarning,
    RelocationError,
    TransformError,
    UnreadableFileError,
    ValidationError,
)
from ...core.protocols import HostRecord
from ...core.value_objects import FileMetadata, MimeType, RawUpload, RecordIdentity, UploadSessionId
from ...infrastructure.local_filesystem import LocalFileStorage, Move
from ...utils import sanitize_filename, to_snake_case
from ..policies import PathPolicy
from ..validators import UploadValidatorConfig, create_upload_validator
from .metadata_extractor import MetadataExtractor
from .staging_area import StagingArea
from .transform_pipeline import TransformPipeline

logger = logging.getLogger(__name__)

LockKey = Tuple[str, str, str]


def record_identity(record: HostRecord) -> RecordIdentity:
    return RecordIdentity(record.get_record_type(), record.get_record_id())


class CommitEngine:
    """Upload lifecycle orchestration.

    Each step is an async method running its blocking file work in a
    worker thread. Steps must be called in order
    (``receive`` -> ``validate`` -> ``transform`` -> ``commit``); calling
    one out of order raises InvalidStateError.

    Commits for the same (record, attribute) are serialized with a keyed
    lock; the last one to run wins.
    """

    def __init__(
        self,
        path_policy: PathPolicy,
        staging: StagingArea,
        extractor: MetadataExtractor,
        pipeline: TransformPipeline,
        storage: LocalFileStorage,
        file_permissions: Optional[int] = None
    ):
        self._path_policy = path_policy
        self._staging = staging
        self._extractor = extractor
        self._pipeline = pipeline
        self._storage = storage
        self._file_permissions = file_permissions
        # entries vanish once no commit or removal holds the lock
        self._locks: "weakref.WeakValueDictionary[LockKey, asyncio.Lock]" = weakref.WeakValueDictionary()

    @property
    def path_policy(self) -> PathPolicy:
        return self._path_policy

    # EMPTY -> STAGED

    async def receive(self, record: HostRecord, attribute: UploadAttribute, upload: RawUpload) -> UploadSession:
        """Stage the raw bytes of an upload as the session's original.

        Raises:
            UnreadableFileError: if the upload content cannot be read
            ConfigurationError: if tmp_dir cannot be resolved
        """
        tmp_dir = self._path_policy.resolve_tmp_dir(record, attribute)
        session = UploadSession(
            attribute=attribute,
            record_identity=record_identity(record),
            original_filename=sanitize_filename(upload.filename),
            content_type=upload.content_type
        )

        try:
            content = await asyncio.to_thread(upload.read)
        except OSError as e:
            error = UnreadableFileError(f"Cannot read upload {upload.filename}: {e}")
            session.fail(error)
            raise error from e

        try:
            original = await asyncio.to_thread(
                self._staging.stage, content, session.original_filename, session.id, tmp_dir
            )
        except OSError as e:
            await asyncio.to_thread(self._staging.discard_session, tmp_dir, session.id)
            error = UnreadableFileError(f"Cannot stage upload {upload.filename}: {e}")
            session.fail(error)
            raise error from e

        session.mark_staged(original, tmp_dir)
        logger.info(f"Received {session.original_filename} for {session.record_identity}.{attribute.name}")
        return session

    # STAGED -> VALIDATED

    async def validate(self, session: UploadSession) -> UploadSession:
        """Extract the original's metadata and check the attribute policy.

        Raises:
            ValidationError: policy violation; staged files are removed
            UnreadableFileError: the staged file cannot be opened
        """
        session.require(UploadState.STAGED)
        attribute = session.attribute
        original = session.staged[ORIGINAL]

        try:
            metadata = await asyncio.to_thread(self._extractor.extract, original.path, original.original_filename)
            if attribute.fix_file_extensions:
                session.fixed_extension = self._fixed_extension(session.effective_extension, metadata.mime_type)
            validator = create_upload_validator(UploadValidatorConfig.from_attribute(attribute))
            validator.validate(session.original_filename, session.effective_extension, metadata)
        except (ValidationError, UnreadableFileError) as e:
            await self._reject(session, e)
            raise

        session.put_staged(original.with_metadata(metadata))
        session.mark_validated()
        logger.debug(f"Validated {session}")
        return session

    # VALIDATED -> TRANSFORMED

    async def transform(self, session: UploadSession) -> UploadSession:
        """Process the original, derive every declared version and process it.

        Versions run one at a time in declared order. Any failure aborts
        the whole attribute.

        Raises:
            TransformError: a version could not be processed
        """
        session.require(UploadState.VALIDATED)
        attribute = session.attribute

        try:
            original = session.staged[ORIGINAL]
            if attribute.process is not None:
                original = await self._run_version(original, attribute.get_version(ORIGINAL), attribute)
                session.put_staged(original)

            for version in attribute.derived_versions:
                staged = await asyncio.to_thread(self._staging.derive, original, version.name)
                if version.has_processing:
                    staged = await self._run_version(staged, version, attribute)
                session.put_staged(staged)
        except (TransformError, UnreadableFileError) as e:
            await self._reject(session, e)
            raise
        except OSError as e:
            error = TransformError(
                f"Could not stage versions of {session.original_filename}: {e}",
                version_name=ORIGINAL,
                cause=e,
                attribute_name=attribute.name
            )
            await self._reject(session, error)
            raise error from e

        session.mark_transformed()
        logger.info(f"Prepared {len(attribute.version_names)} version(s) for {session}")
        return session

    async def _run_version(self, staged: StagedFile, version: VersionSpec, attribute: UploadAttribute) -> StagedFile:
        processed = await asyncio.to_thread(self._pipeline.run_version, staged, version, attribute)
        if processed.metadata is not None:
            return processed
        metadata = await asyncio.to_thread(self._extractor.extract, processed.path, processed.original_filename)
        return processed.with_metadata(metadata)

    # TRANSFORMED -> COMMITTED

    async def commit(self, record: HostRecord, session: UploadSession) -> VersionSet[CommittedFile]:
        """Relocate every staged version to its final path and sync the record.

        Committing an already committed session returns its files again.
        Superseded files are deleted only after the new ones are in place,
        and never when the new commit reuses their path. They are looked up
        under the store_dir resolved now, so files left in a directory that
        a dynamic store_dir no longer resolves to are not deleted.

        Raises:
            ConfigurationError: store_dir or filename cannot be resolved;
                the session is left untouched
            RelocationError: the files could not be placed; nothing was
                changed on the record and staged files remain
        """
        if session.is_committed:
            logger.debug(f"{session} is already committed")
            return session.committed
        session.require(UploadState.TRANSFORMED)

        attribute = session.attribute
        identity = record_identity(record)

        async with self._lock_for(identity, attribute.name):
            # a concurrent commit of the same session may have finished meanwhile
            if session.is_committed:
                logger.debug(f"{session} was committed while waiting")
                return session.committed
            session.require(UploadState.TRANSFORMED)

            store_dir = self._path_policy.resolve_store_dir(record, attribute)
            filename = self._path_policy.resolve_filename(
                record, attribute, session.original_basename, session.stored_extension
            )
            previous = self.stored_files(record, attribute)

            staged = session.staged_versions()
            entries: Dict[str, CommittedFile] = {}
            moves = []
            for name in staged.names:
                relative_path = self._path_policy.version_path(store_dir, name, filename)
                path = self._path_policy.absolute(relative_path)
                entries[name] = CommittedFile(name, relative_path, path, staged[name].metadata)
                moves.append(Move(name, staged[name].path, path))

            permissions = attribute.permissions if attribute.permissions is not None else self._file_permissions
            try:
                await asyncio.to_thread(self._storage.relocate, moves, permissions)
            except RelocationError as e:
                e.attribute_name = attribute.name
                e.details["attribute"] = attribute.name
                logger.error(f"Commit of {session} failed: {e.message}")
                session.fail(e)
                raise

            committed = VersionSet(entries, staged.names)
            record.write_attachment_value(attribute.name, filename)
            self.sync_metadata(record, attribute, committed.original.metadata)
            session.mark_committed(committed, identity, filename)
            logger.info(f"Committed {session} to {store_dir}")

            if previous is not None and attribute.old_files is OldFilesPolicy.DELETE:
                await self._remove_superseded(previous, committed)

        return committed

    async def _remove_superseded(self, previous: VersionSet[CommittedFile], committed: VersionSet[CommittedFile]) -> None:
        new_paths = {entry.path for entry in committed.values()}
        stale = [entry for entry in previous.values() if entry.path not in new_paths]
        if stale:
            removed = await asyncio.to_thread(self._remove_files, stale)
            logger.info(f"Removed {removed} superseded file(s)")

    # Cleanup

    async def finalize(self, session: UploadSession) -> bool:
        """Remove what is left of the session's staging directory."""
        if session.is_pending:
            session.require(UploadState.COMMITTED, UploadState.FAILED, UploadState.REMOVED)
        if session.tmp_dir is None:
            return False
        return await asyncio.to_thread(self._staging.discard_session, session.tmp_dir, session.id)

    async def abandon(self, session: UploadSession) -> None:
        """Release a session that will never be committed."""
        if session.state is UploadState.FAILED:
            return
        session.require(UploadState.EMPTY, UploadState.STAGED, UploadState.VALIDATED, UploadState.TRANSFORMED)
        if session.tmp_dir is not None:
            await asyncio.to_thread(self._staging.discard_session, session.tmp_dir, session.id)
        session.staged.clear()
        session.fail(reason="abandoned")
        logger.info(f"Abandoned {session}")

    async def remove(
        self,
        record: HostRecord,
        attribute: UploadAttribute,
        files: Optional[VersionSet[CommittedFile]] = None,
        session: Optional[UploadSession] = None
    ) -> int:
        """Delete committed files of ``attribute`` (COMMITTED -> REMOVED).

        ``files`` defaults to the files of ``session`` or, without one, to
        those recorded in the record's stored value. Nothing stored is a
        no-op.
        """
        if files is None and session is not None and session.is_committed:
            files = session.committed
        if files is None:
            files = self.stored_files(record, attribute)
        if files is None:
            return 0

        async with self._lock_for(record_identity(record), attribute.name):
            removed = await asyncio.to_thread(self._remove_files, files.values())
        if session is not None and session.is_committed:
            session.mark_removed()
        logger.info(f"Removed {removed} file(s) of {record_identity(record)}.{attribute.name}")
        return removed

    def _remove_files(self, files: Iterable[CommittedFile]) -> int:
        removed = 0
        root = self._path_policy.storage_root
        for entry in files:
            if self._storage.remove(entry.path):
                removed += 1
            self._storage.prune_empty_dirs(entry.path.parent, root)
        return removed

    # Temp values

    async def restore_temp(self, record: HostRecord, attribute: UploadAttribute, temp_value: str) -> UploadSession:
        """Re-attach a transformed but uncommitted upload from its temp value.

        Raises:
            ValidationError: malformed temp value or expired staged files
        """
        session_id, filename = self._parse_temp_value(attribute, temp_value)
        tmp_dir = self._path_policy.resolve_tmp_dir(record, attribute)

        restored = await asyncio.to_thread(
            self._staging.restore, tmp_dir, session_id, filename, attribute.version_names
        )
        if restored is None:
            raise ValidationError(
                f"Temporary upload {temp_value!r} is no longer available",
                attribute_name=attribute.name,
                filename=filename,
                rule="temp_value"
            )

        session = UploadSession(
            attribute=attribute,
            record_identity=record_identity(record),
            original_filename=filename,
            id=session_id
        )
        session.mark_staged(restored[ORIGINAL], tmp_dir)
        await self.validate(session)

        try:
            for version in attribute.derived_versions:
                staged = restored[version.name]
                metadata = await asyncio.to_thread(self._extractor.extract, staged.path, staged.original_filename)
                session.put_staged(staged.with_metadata(metadata))
        except UnreadableFileError as e:
            await self._reject(session, e)
            raise

        session.mark_transformed()
        logger.info(f"Restored {session} from temp value")
        return session

    def _parse_temp_value(self, attribute: UploadAttribute, temp_value: str) -> Tuple[UploadSessionId, str]:
        def reject(reason: str) -> ValidationError:
            return ValidationError(
                f"Invalid temporary upload value: {reason}",
                attribute_name=attribute.name,
                rule="temp_value",
                details={"temp_value": temp_value}
            )

        if not isinstance(temp_value, str) or "/" not in temp_value:
            raise reject("expected '<session-id>/<filename>'")

        raw_id, filename = temp_value.split("/", 1)
        try:
            session_id = UploadSessionId.from_string(raw_id)
        except ValueError:
            raise reject("unknown session id") from None

        if not filename or sanitize_filename(filename) != filename or filename.startswith("."):
            raise reject("unsafe filename")
        return session_id, filename

    # Record sync

    def stored_files(self, record: HostRecord, attribute: UploadAttribute) -> Optional[VersionSet[CommittedFile]]:
        """Committed files as recorded by the record's stored filename.

        Metadata is not loaded. Returns None when nothing is stored.
        """
        filename = record.read_attachment_value(attribute.name)
        if not filename:
            return None

        store_dir = self._path_policy.resolve_store_dir(record, attribute)
        entries = {}
        for name in attribute.version_names:
            relative_path = self._path_policy.version_path(store_dir, name, filename)
            entries[name] = CommittedFile(name, relative_path, self._path_policy.absolute(relative_path))
        return VersionSet(entries, attribute.version_names)

    def sync_metadata(self, record: HostRecord, attribute: UploadAttribute, metadata: Optional[FileMetadata]) -> None:
        """Write the metadata fields the record declares; others are skipped."""
        declared = set(record.supported_metadata_fields())
        if not declared:
            return

        values: Dict[str, Any] = {
            attribute.mime_type_field: metadata.mime_type.value if metadata else None,
            attribute.filesize_field: metadata.size_bytes if metadata else None,
        }
        if attribute.image:
            values[attribute.width_field] = metadata.width if metadata else None
            values[attribute.height_field] = metadata.height if metadata else None

        exif_fields = {name for name in declared if name.startswith(attribute.exif_field_prefix)}
        for name in exif_fields:
            values[name] = None
        if metadata is not None:
            for tag, value in metadata.exif.items():
                values[f"{attribute.exif_field_prefix}{to_snake_case(tag)}"] = value

        for name, value in values.items():
            if name in declared:
                record.write_metadata_field(name, value)

    def check_identity(self, record: HostRecord, session: UploadSession) -> bool:
        """Warn when the record's identity changed after the session committed.

        Returns:
            True if the identity is unchanged
        """
        if not session.is_committed or session.committed_identity is None:
            return True

        current = record_identity(record)
        if current == session.committed_identity:
            return True

        message = (
            f"{session.attribute.name} was committed for {session.committed_identity} but the record "
            f"is now {current}; files stay under the old path and are not migrated"
        )
        logger.warning(message)
        warnings.warn(message, AttachmentIdentityWarning, stacklevel=3)
        return False

    # Helpers

    def _fixed_extension(self, extension: str, mime_type: MimeType) -> Optional[str]:
        canonical = mime_type.canonical_extension()
        if canonical is None or mime_type.essence == MimeType.default().essence:
            return None
        current = MimeType.from_extension(extension) if extension else None
        if current is not None and current.essence == mime_type.essence:
            return None
        logger.debug(f"Correcting extension .{extension or ''} to .{canonical} for {mime_type.essence}")
        return canonical

    async def _reject(self, session: UploadSession, error: AttachmentError) -> None:
        if session.tmp_dir is not None:
            await asyncio.to_thread(self._staging.discard_session, session.tmp_dir, session.id)
        session.staged.clear()
        session.fail(error)
        logger.info(f"Rejected {session}: {error.message}")

    def _lock_for(self, identity: RecordIdentity, attribute_name: str) -> asyncio.Lock:
        key = (identity.record_type, str(identity.record_id), attribute_name)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock
