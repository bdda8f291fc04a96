"""Attachment entities.

Upload attribute declarations, staged and committed files, version sets,
consumer-facing uploaded files and the upload session state machine.
"""

from .upload_attribute import ORIGINAL, OldFilesPolicy, UploadAttribute, VersionSpec
from .staged_file import StagedFile
from .committed_file import CommittedFile
from .version_set import VersionSet
from .uploaded_file import UploadedFile, build_url
from .upload_session import PENDING_STATES, UploadSession, UploadState

__all__ = [
    "ORIGINAL",
    "OldFilesPolicy",
    "UploadAttribute",
    "VersionSpec",
    "StagedFile",
    "CommittedFile",
    "VersionSet",
    "UploadedFile",
    "build_url",
    "PENDING_STATES",
    "UploadSession",
    "UploadState",
]
