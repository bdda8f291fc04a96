"""Staging area.

ONLY temporary storage - materializes received uploads and derived
versions under ``<tmp_dir>/<session_id>/<version><.ext>`` until they are
committed or discarded.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from ...core.entities import ORIGINAL, StagedFile
from ...core.value_objects import RelativePath, UploadSessionId
from ...infrastructure.local_filesystem import LocalFileStorage
from ...utils import sanitize_filename, split_filename

logger = logging.getLogger(__name__)


class StagingArea:
    """Temporary file storage for upload sessions.

    Names are unique by construction (session id + version name), so no
    locking is needed between sessions.
    """

    def __init__(self, storage_root: Path, storage: LocalFileStorage):
        self._storage_root = Path(storage_root)
        self._storage = storage

    def staged_path(
        self,
        tmp_dir: RelativePath,
        session_id: UploadSessionId,
        version: str,
        original_filename: str
    ) -> RelativePath:
        extension = split_filename(original_filename)[1]
        name = f"{version}.{extension}" if extension else version
        return tmp_dir.join(str(session_id), name)

    def session_dir(self, tmp_dir: RelativePath, session_id: UploadSessionId) -> Path:
        return tmp_dir.join(str(session_id)).to_filesystem(self._storage_root)

    def stage(
        self,
        content: bytes,
        original_filename: str,
        session_id: UploadSessionId,
        tmp_dir: RelativePath,
        version: str = ORIGINAL
    ) -> StagedFile:
        """Write received bytes as ``version`` of the session."""
        original_filename = sanitize_filename(original_filename)
        relative_path = self.staged_path(tmp_dir, session_id, version, original_filename)
        path = relative_path.to_filesystem(self._storage_root)

        self._storage.write_atomic(path, content)
        logger.debug(f"Staged {original_filename} as {relative_path} ({len(content)} bytes)")

        return StagedFile(
            path=path,
            relative_path=relative_path,
            version_name=version,
            session_id=session_id,
            original_filename=original_filename
        )

    def derive(self, source: StagedFile, version: str) -> StagedFile:
        """Copy a staged file into a sibling file for another version."""
        tmp_dir = source.relative_path.parent.parent
        relative_path = self.staged_path(tmp_dir, source.session_id, version, source.original_filename)
        path = relative_path.to_filesystem(self._storage_root)

        self._storage.copy(source.path, path)
        logger.debug(f"Derived {version} from {source.relative_path}")

        return StagedFile(
            path=path,
            relative_path=relative_path,
            version_name=version,
            session_id=source.session_id,
            original_filename=source.original_filename,
            metadata=source.metadata
        )

    def discard(self, staged: StagedFile) -> bool:
        """Remove a staged file; a missing file is not an error."""
        return self._storage.remove(staged.path)

    def discard_session(self, tmp_dir: RelativePath, session_id: UploadSessionId) -> bool:
        """Remove the whole session directory with whatever is left in it."""
        removed = self._storage.remove_tree(self.session_dir(tmp_dir, session_id))
        if removed:
            logger.debug(f"Discarded staging directory for session {session_id}")
        return removed

    def restore(
        self,
        tmp_dir: RelativePath,
        session_id: UploadSessionId,
        original_filename: str,
        version_names: Iterable[str]
    ) -> Optional[Dict[str, StagedFile]]:
        """Find the staged files of an earlier session.

        Returns:
            StagedFile per version, or None if any of them is missing
        """
        restored: Dict[str, StagedFile] = {}
        for version in version_names:
            relative_path = self.staged_path(tmp_dir, session_id, version, original_filename)
            path = relative_path.to_filesystem(self._storage_root)
            if not path.is_file():
                logger.debug(f"Staged file {relative_path} is gone")
                return None
            restored[version] = StagedFile(
                path=path,
                relative_path=relative_path,
                version_name=version,
                session_id=session_id,
                original_filename=original_filename
            )
        return restored
