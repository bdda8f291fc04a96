"""Host record protocol.

ONLY the host record contract - the explicit capability interface a record
type implements so the upload lifecycle can read its identity, store the
committed filename, keep a pending upload in memory and populate the
optional metadata fields it declares.

Following maximum separation architecture - one file = one purpose.
"""

from typing import TYPE_CHECKING, AbstractSet, Any, Optional
from typing_extensions import Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..entities.upload_session import UploadSession
    from ..entities.version_set import VersionSet
    from ..exceptions import AttachmentError


@runtime_checkable
class HostRecord(Protocol):
    """Capabilities required from a record that owns upload attributes.

    Metadata fields follow the naming scheme ``<attr>_mime_type``,
    ``<attr>_filesize``, ``<attr>_width``, ``<attr>_height`` and
    ``<attr>_exif_<field>``. A record opts into them by listing them in
    ``supported_metadata_fields``; the engine only ever writes fields that
    appear there.
    """

    def get_record_id(self) -> Optional[Any]:
        """Stable identity used for default storage paths."""
        ...

    def get_record_type(self) -> str:
        """Type name used for default storage paths."""
        ...

    def supported_metadata_fields(self) -> AbstractSet[str]:
        """Names of the optional metadata fields this record stores."""
        ...

    def write_metadata_field(self, name: str, value: Any) -> None:
        ...

    def read_attachment_value(self, attribute: str) -> Optional[str]:
        """Committed filename stored for ``attribute``, if any."""
        ...

    def write_attachment_value(self, attribute: str, value: Optional[str]) -> None:
        ...

    def get_pending_upload(self, attribute: str) -> Optional["UploadSession"]:
        ...

    def set_pending_upload(self, attribute: str, session: Optional["UploadSession"]) -> None:
        ...

    def add_attachment_error(self, attribute: str, error: "AttachmentError") -> None:
        """Record-level error sink for rejected uploads."""
        ...

    def after_attachment_assigned(self, attribute: str, session: "UploadSession") -> None:
        """Hook: a raw upload was staged, validation has not run yet."""
        ...

    def after_attachment_committed(self, attribute: str, files: "VersionSet") -> None:
        """Hook: new versions are durably stored and metadata is synced."""
        ...

    def before_attachment_destroyed(self, attribute: str, files: "VersionSet") -> None:
        """Hook: committed files are about to be removed with the record."""
        ...
