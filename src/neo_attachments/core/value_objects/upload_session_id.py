"""Upload session identifier value object.

ONLY upload session identifier - the unique id that names a session's
staging directory and its temp value.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class UploadSessionId:
    """Upload session identifier value object.

    Immutable and hashable; its string form is used as a directory name
    under the staging area, so only canonical UUID strings are accepted
    when parsing values that come back from clients.
    """

    value: UUID

    def __post_init__(self):
        """Validate upload session ID format."""
        if not isinstance(self.value, UUID):
            raise ValueError(f"UploadSessionId must be a UUID, got {type(self.value).__name__}")

    @classmethod
    def generate(cls) -> 'UploadSessionId':
        """Generate a new random upload session ID."""
        return cls(uuid4())

    @classmethod
    def from_string(cls, value: str) -> 'UploadSessionId':
        """Create UploadSessionId from its canonical string representation."""
        try:
            uuid_value = UUID(value)
        except (ValueError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid upload session ID format: {value}") from e

        if str(uuid_value) != value:
            raise ValueError(f"Upload session ID is not in canonical form: {value}")
        return cls(uuid_value)

    def __str__(self) -> str:
        """String representation for logging and directory names."""
        return str(self.value)

    def __repr__(self) -> str:
        return f"UploadSessionId('{self.value}')"
