"""Cleanup service.

ONLY cleanup operations - removes staging directories of upload sessions
that were never committed nor abandoned explicitly.

Following maximum separation architecture - one file = one purpose.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Callable, List, Optional, Union

from ...core.value_objects import RelativePath, UploadSessionId
from ...infrastructure.local_filesystem import LocalFileStorage

logger = logging.getLogger(__name__)


@dataclass
class CleanupServiceConfig:
    """Configuration for cleanup service."""

    stale_session_age_hours: float = 24.0


@dataclass
class CleanupResult:
    """What one cleanup run removed."""

    removed_sessions: List[str]
    kept_sessions: int = 0

    @property
    def removed_count(self) -> int:
        return len(self.removed_sessions)


class CleanupService:
    """Staging area maintenance.

    Only directories named like an upload session id are considered; a
    session is stale when nothing below it was modified within the max age.
    """

    def __init__(
        self,
        storage_root: Union[str, Path],
        storage: LocalFileStorage,
        config: Optional[CleanupServiceConfig] = None,
        clock: Callable[[], float] = time.time
    ):
        self._storage_root = Path(storage_root)
        self._storage = storage
        self._config = config or CleanupServiceConfig()
        self._clock = clock

    async def cleanup_stale_sessions(
        self,
        tmp_dir: Union[str, RelativePath] = "tmp",
        max_age: Optional[timedelta] = None
    ) -> CleanupResult:
        """Remove stale session directories below ``tmp_dir``."""
        if max_age is None:
            max_age = timedelta(hours=self._config.stale_session_age_hours)
        root = RelativePath.parse(tmp_dir).to_filesystem(self._storage_root)
        return await asyncio.to_thread(self._sweep, root, max_age)

    def _sweep(self, root: Path, max_age: timedelta) -> CleanupResult:
        result = CleanupResult(removed_sessions=[])
        if not root.is_dir():
            return result

        cutoff = self._clock() - max_age.total_seconds()
        for entry in sorted(root.iterdir()):
            if not entry.is_dir() or not self._is_session_dir(entry):
                continue

            try:
                newest, file_count = self._storage.tree_mtime(entry)
            except FileNotFoundError:
                continue

            if newest >= cutoff:
                result.kept_sessions += 1
                continue

            try:
                self._storage.remove_tree(entry)
            except OSError as e:
                logger.error(f"Could not remove stale session {entry.name}: {e}")
                continue
            result.removed_sessions.append(entry.name)
            logger.debug(f"Removed stale session {entry.name} ({file_count} file(s))")

        if result.removed_sessions:
            logger.info(f"Removed {result.removed_count} stale upload session(s) from {root}")
        return result

    @staticmethod
    def _is_session_dir(path: Path) -> bool:
        try:
            UploadSessionId.from_string(path.name)
        except ValueError:
            return False
        return True


def create_cleanup_service(
    storage_root: Union[str, Path],
    storage: Optional[LocalFileStorage] = None,
    config: Optional[CleanupServiceConfig] = None
) -> CleanupService:
    """Create cleanup service."""
    return CleanupService(storage_root, storage or LocalFileStorage(), config)
