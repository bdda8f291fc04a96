"""Record mixin.

ONLY the host record capabilities for plain Python classes - identity,
stored attachment values, pending uploads, metadata fields and the error
sink, backed by instance attributes.

Following maximum separation architecture - one file = one purpose.
"""

from typing import TYPE_CHECKING, AbstractSet, Any, ClassVar, Dict, FrozenSet, List, Optional

if TYPE_CHECKING:
    from ..core.entities import UploadSession, VersionSet
    from ..core.exceptions import AttachmentError


class AttachmentRecordMixin:
    """Implements the HostRecord protocol on top of instance attributes.

    The committed filename of upload attribute ``picture`` is stored in
    ``self.picture``; metadata fields listed in
    ``attachment_metadata_fields`` are plain attributes too. The record id
    is read from ``id_attribute`` (``"id"`` by default).

    Override the ``after_*`` / ``before_*`` hooks to react to the upload
    lifecycle.
    """

    attachment_metadata_fields: ClassVar[FrozenSet[str]] = frozenset()
    id_attribute: ClassVar[str] = "id"

    def get_record_id(self) -> Optional[Any]:
        return getattr(self, self.id_attribute, None)

    def get_record_type(self) -> str:
        return type(self).__name__

    def supported_metadata_fields(self) -> AbstractSet[str]:
        return self.attachment_metadata_fields

    def write_metadata_field(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def read_attachment_value(self, attribute: str) -> Optional[str]:
        return getattr(self, attribute, None)

    def write_attachment_value(self, attribute: str, value: Optional[str]) -> None:
        setattr(self, attribute, value)

    # Pending uploads

    @property
    def pending_uploads(self) -> Dict[str, "UploadSession"]:
        return self.__dict__.setdefault("_pending_uploads", {})

    def get_pending_upload(self, attribute: str) -> Optional["UploadSession"]:
        return self.pending_uploads.get(attribute)

    def set_pending_upload(self, attribute: str, session: Optional["UploadSession"]) -> None:
        if session is None:
            self.pending_uploads.pop(attribute, None)
        else:
            self.pending_uploads[attribute] = session

    # Errors

    @property
    def attachment_errors(self) -> Dict[str, List["AttachmentError"]]:
        return self.__dict__.setdefault("_attachment_errors", {})

    def add_attachment_error(self, attribute: str, error: "AttachmentError") -> None:
        self.attachment_errors.setdefault(attribute, []).append(error)

    def clear_attachment_errors(self) -> None:
        self.attachment_errors.clear()

    @property
    def has_attachment_errors(self) -> bool:
        return any(self.attachment_errors.values())

    # Lifecycle hooks

    def after_attachment_assigned(self, attribute: str, session: "UploadSession") -> None:
        pass

    def after_attachment_committed(self, attribute: str, files: "VersionSet") -> None:
        pass

    def before_attachment_destroyed(self, attribute: str, files: "VersionSet") -> None:
        pass
