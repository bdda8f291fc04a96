"""Upload session entity.

ONLY upload session - the state machine tying one assignment of a raw
upload to a record instance and attribute, from staging until the files
are committed, rejected or removed.

Following maximum separation architecture - one file = one purpose.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from ..exceptions import AttachmentError, InvalidStateError
from ..value_objects import RecordIdentity, RelativePath, UploadSessionId
from ...utils import split_filename
from .committed_file import CommittedFile
from .staged_file import StagedFile
from .upload_attribute import ORIGINAL, UploadAttribute
from .version_set import VersionSet


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UploadState(Enum):
    """Upload session lifecycle states."""
    EMPTY = "empty"
    STAGED = "staged"
    VALIDATED = "validated"
    TRANSFORMED = "transformed"
    COMMITTED = "committed"
    FAILED = "failed"
    REMOVED = "removed"


_TRANSITIONS = {
    UploadState.EMPTY: {UploadState.STAGED, UploadState.FAILED},
    UploadState.STAGED: {UploadState.VALIDATED, UploadState.FAILED},
    UploadState.VALIDATED: {UploadState.TRANSFORMED, UploadState.FAILED},
    UploadState.TRANSFORMED: {UploadState.COMMITTED, UploadState.FAILED},
    UploadState.COMMITTED: {UploadState.REMOVED},
    UploadState.FAILED: set(),
    UploadState.REMOVED: set(),
}

PENDING_STATES = frozenset({UploadState.STAGED, UploadState.VALIDATED, UploadState.TRANSFORMED})


@dataclass
class UploadSession:
    """Upload session entity.

    Tracks staged files per version, the committed version set once the
    commit succeeded, and the failure that ended the session otherwise.
    Transitions follow
    EMPTY -> STAGED -> VALIDATED -> TRANSFORMED -> COMMITTED -> REMOVED,
    with FAILED reachable from every state before COMMITTED.
    """

    attribute: UploadAttribute
    record_identity: RecordIdentity
    original_filename: str
    id: UploadSessionId = field(default_factory=UploadSessionId.generate)
    content_type: Optional[str] = None
    fixed_extension: Optional[str] = None

    state: UploadState = UploadState.EMPTY
    tmp_dir: Optional[RelativePath] = None
    staged: Dict[str, StagedFile] = field(default_factory=dict)

    committed: Optional[VersionSet[CommittedFile]] = None
    committed_identity: Optional[RecordIdentity] = None
    stored_filename: Optional[str] = None

    error: Optional[AttachmentError] = None
    failure_reason: Optional[str] = None

    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self):
        """Validate entity state after initialization."""
        if not self.original_filename.strip():
            raise ValueError("Original filename cannot be empty")

    # State handling

    def _transition(self, target: UploadState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateError(
                f"Cannot move upload session {self.id} from {self.state.value} to {target.value}",
                current_state=self.state.value,
                requested_state=target.value
            )
        self.state = target
        self.updated_at = _utc_now()

    def require(self, *states: UploadState) -> None:
        """Raise InvalidStateError unless the session is in one of ``states``."""
        if self.state not in states:
            expected = ", ".join(state.value for state in states)
            raise InvalidStateError(
                f"Upload session {self.id} is {self.state.value}, expected {expected}",
                current_state=self.state.value
            )

    def mark_staged(self, original: StagedFile, tmp_dir: RelativePath) -> None:
        if original.version_name != ORIGINAL:
            raise ValueError(f"Session must be staged with the '{ORIGINAL}' version")
        self._transition(UploadState.STAGED)
        self.tmp_dir = tmp_dir
        self.staged[ORIGINAL] = original

    def mark_validated(self) -> None:
        self._transition(UploadState.VALIDATED)

    def mark_transformed(self) -> None:
        missing = [name for name in self.attribute.version_names if name not in self.staged]
        if missing:
            raise InvalidStateError(
                f"Cannot finish transforms for session {self.id}: missing versions {missing}",
                current_state=self.state.value,
                requested_state=UploadState.TRANSFORMED.value
            )
        self._transition(UploadState.TRANSFORMED)

    def mark_committed(
        self,
        committed: VersionSet[CommittedFile],
        identity: RecordIdentity,
        stored_filename: str
    ) -> None:
        self._transition(UploadState.COMMITTED)
        self.committed = committed
        self.committed_identity = identity
        self.stored_filename = stored_filename
        self.staged.clear()

    def fail(self, error: Optional[AttachmentError] = None, reason: Optional[str] = None) -> None:
        """Move to FAILED; staged file handles are kept so callers can discard them."""
        self._transition(UploadState.FAILED)
        self.error = error
        self.failure_reason = reason or (error.message if error else None)

    def mark_removed(self) -> None:
        self._transition(UploadState.REMOVED)

    # Views

    def put_staged(self, staged: StagedFile) -> None:
        """Add or replace the staged file for one version."""
        if staged.session_id != self.id:
            raise ValueError(f"Staged file belongs to session {staged.session_id}, not {self.id}")
        self.staged[staged.version_name] = staged
        self.updated_at = _utc_now()

    @property
    def original_basename(self) -> str:
        return split_filename(self.original_filename)[0]

    @property
    def effective_extension(self) -> str:
        """Normalized extension used for validation and filename resolvers.

        The corrected one when extension fixing replaced it, else the
        original filename's.
        """
        if self.fixed_extension is not None:
            return self.fixed_extension
        return split_filename(self.original_filename)[1]

    @property
    def stored_extension(self) -> str:
        """Extension for the default stored filename, keeping the original's case."""
        if self.fixed_extension is not None:
            return self.fixed_extension
        return os.path.splitext(self.original_filename)[1].lstrip(".")

    @property
    def is_pending(self) -> bool:
        """Staged but neither committed nor failed."""
        return self.state in PENDING_STATES

    @property
    def is_committed(self) -> bool:
        return self.state is UploadState.COMMITTED

    def staged_versions(self) -> VersionSet[StagedFile]:
        """All staged versions; only complete once transforms ran."""
        return VersionSet(self.staged, self.attribute.version_names)

    @property
    def temp_value(self) -> Optional[str]:
        """Token that lets a later request re-attach this staged upload.

        Only available while the upload is fully transformed and not yet
        committed.
        """
        if self.state is not UploadState.TRANSFORMED:
            return None
        return f"{self.id}/{self.original_filename}"

    def get_summary(self) -> Dict[str, Optional[str]]:
        return {
            "session_id": str(self.id),
            "attribute": self.attribute.name,
            "record": str(self.record_identity),
            "filename": self.original_filename,
            "state": self.state.value,
            "stored_filename": self.stored_filename,
            "failure_reason": self.failure_reason,
            "created_at": self.created_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"UploadSession(id='{self.id}', attribute='{self.attribute.name}', "
            f"filename='{self.original_filename}', state='{self.state.value}')"
        )
