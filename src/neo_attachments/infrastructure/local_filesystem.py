"""Local filesystem storage.

ONLY local disk operations - atomic writes, two-phase relocation of staged
files into permanent storage, removal and empty-directory pruning. All
methods are blocking; services run them in worker threads.

Following maximum separation architecture - one file = one purpose.
"""

import errno
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..core.exceptions import RelocationError

logger = logging.getLogger(__name__)

PARTIAL_PREFIX = ".partial-"
BACKUP_PREFIX = ".backup-"


@dataclass(frozen=True)
class Move:
    """One file to relocate: staged ``source`` to final ``destination``."""

    version_name: str
    source: Path
    destination: Path


@dataclass
class _Placement:
    move: Move
    partial: Optional[Path] = None
    renamed: bool = False
    backup: Optional[Path] = None
    placed: bool = False


@dataclass
class RelocationResult:
    """Outcome of a successful relocation."""

    destinations: List[Path] = field(default_factory=list)
    copied_across_volumes: int = 0


class LocalFileStorage:
    """Blocking file operations below a storage root.

    ``relocate`` moves a group of files all-or-nothing:

    1. each source is renamed (or, across volumes, copied) to a hidden
       partial file next to its destination;
    2. each partial replaces its destination with ``os.replace``; an
       existing destination is hard-linked to a backup first so it can be
       restored.

    A failure in either phase rolls every placement back and leaves the
    sources where they were.
    """

    def __init__(
        self,
        file_permissions: Optional[int] = 0o644,
        directory_permissions: int = 0o755
    ):
        self._file_permissions = file_permissions
        self._directory_permissions = directory_permissions

    # Writes

    def ensure_dir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True, mode=self._directory_permissions)

    def write_atomic(self, path: Path, data: bytes) -> None:
        """Write ``data`` to ``path`` through a sibling temp file and ``os.replace``."""
        self.ensure_dir(path.parent)
        fd, tmp_name = tempfile.mkstemp(prefix=PARTIAL_PREFIX, dir=str(path.parent))
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            self._replace(Path(tmp_name), path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(data)} bytes to {path}")

    def copy(self, source: Path, destination: Path) -> None:
        self.ensure_dir(destination.parent)
        shutil.copy2(source, destination)

    # Relocation

    def relocate(self, moves: Sequence[Move], permissions: Optional[int] = None) -> RelocationResult:
        """Move all ``moves`` into place or none of them.

        Raises:
            RelocationError: on any filesystem failure, after rollback
        """
        mode = permissions if permissions is not None else self._file_permissions
        placements = [_Placement(move) for move in moves]
        result = RelocationResult()

        current: Optional[_Placement] = None
        try:
            for placement in placements:
                current = placement
                self._stage_partial(placement, mode)
                if not placement.renamed:
                    result.copied_across_volumes += 1

            for placement in placements:
                current = placement
                self._place(placement)
        except OSError as e:
            self._rollback(placements)
            failed = current.move if current else None
            raise RelocationError(
                f"Could not relocate {failed.version_name if failed else 'files'}: {e}",
                version_name=failed.version_name if failed else None,
                source=failed.source if failed else None,
                destination=failed.destination if failed else None,
                details={"errno": e.errno} if e.errno else None
            ) from e

        for placement in placements:
            if placement.backup is not None:
                placement.backup.unlink(missing_ok=True)
            if not placement.renamed:
                placement.move.source.unlink(missing_ok=True)
            result.destinations.append(placement.move.destination)

        logger.debug(f"Relocated {len(placements)} file(s)")
        return result

    def _stage_partial(self, placement: _Placement, mode: Optional[int]) -> None:
        move = placement.move
        self.ensure_dir(move.destination.parent)
        partial = move.destination.with_name(f"{PARTIAL_PREFIX}{move.destination.name}")

        try:
            self._rename(move.source, partial)
            placement.renamed = True
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            logger.debug(f"{move.source} is on another volume, copying")
            shutil.copy2(move.source, partial)
        placement.partial = partial

        if mode is not None:
            os.chmod(partial, mode)

    def _place(self, placement: _Placement) -> None:
        destination = placement.move.destination
        if destination.exists():
            backup = destination.with_name(f"{BACKUP_PREFIX}{destination.name}")
            backup.unlink(missing_ok=True)
            try:
                os.link(destination, backup)
            except OSError:
                shutil.copy2(destination, backup)
            placement.backup = backup

        self._replace(placement.partial, destination)
        placement.placed = True
        placement.partial = None

    def _rollback(self, placements: Sequence[_Placement]) -> None:
        for placement in reversed(placements):
            move = placement.move
            try:
                if placement.placed:
                    if placement.renamed:
                        self._replace(move.destination, move.source)
                    else:
                        move.destination.unlink(missing_ok=True)
                    if placement.backup is not None:
                        self._replace(placement.backup, move.destination)
                        placement.backup = None
                elif placement.partial is not None:
                    if placement.renamed:
                        self._replace(placement.partial, move.source)
                    else:
                        placement.partial.unlink(missing_ok=True)
                if placement.backup is not None:
                    placement.backup.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Rollback of {move.version_name} ({move.destination}) failed: {e}")
        logger.warning(f"Rolled back relocation of {len(placements)} file(s)")

    # Low-level hooks

    def _rename(self, source: Path, destination: Path) -> None:
        os.rename(source, destination)

    def _replace(self, source: Path, destination: Path) -> None:
        os.replace(source, destination)

    # Removal

    def remove(self, path: Path) -> bool:
        """Delete a file; returns False when it did not exist."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Removed {path}")
        return True

    def remove_tree(self, path: Path) -> bool:
        if not path.exists():
            return False
        shutil.rmtree(path)
        logger.debug(f"Removed directory {path}")
        return True

    def prune_empty_dirs(self, start: Path, stop_at: Path) -> List[Path]:
        """Remove ``start`` and its parents while empty, never ``stop_at`` or above."""
        removed: List[Path] = []
        stop_at = stop_at.resolve()
        current = start.resolve()
        while current != stop_at and stop_at in current.parents:
            try:
                current.rmdir()
            except OSError:
                break
            removed.append(current)
            current = current.parent
        return removed

    def tree_mtime(self, path: Path) -> Tuple[float, int]:
        """Newest modification time below ``path`` and the number of files seen."""
        newest = path.stat().st_mtime
        count = 0
        for child in path.rglob("*"):
            try:
                newest = max(newest, child.stat().st_mtime)
            except FileNotFoundError:
                continue
            if child.is_file():
                count += 1
        return newest, count
