"""Host integrations."""

from .record_mixin import AttachmentRecordMixin

__all__ = ["AttachmentRecordMixin"]
