"""Record identity value object."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class RecordIdentity:
    """Snapshot of a host record's (type, id) pair.

    Taken at commit time so that later id changes can be detected.
    """

    record_type: str
    record_id: Optional[Any]

    @property
    def is_persisted(self) -> bool:
        return self.record_id is not None and str(self.record_id) != ""

    def __str__(self) -> str:
        return f"{self.record_type}#{self.record_id}"
