"""Attachment services.

The upload lifecycle building blocks (staging, metadata extraction,
transforms, commit) and the AttachmentManager facade that runs them from
the host record's lifecycle.
"""

from .staging_area import StagingArea
from .metadata_extractor import HAS_MAGIC, MetadataExtractor, create_metadata_extractor
from .transform_pipeline import TransformPipeline, chain_transforms, create_transform_pipeline
from .commit_engine import CommitEngine, record_identity
from .cleanup_service import CleanupResult, CleanupService, CleanupServiceConfig, create_cleanup_service
from .attachment_manager import AttachmentManager, create_attachment_manager

__all__ = [
    "StagingArea",
    "HAS_MAGIC",
    "MetadataExtractor",
    "create_metadata_extractor",
    "TransformPipeline",
    "chain_transforms",
    "create_transform_pipeline",
    "CommitEngine",
    "record_identity",
    "CleanupResult",
    "CleanupService",
    "CleanupServiceConfig",
    "create_cleanup_service",
    "AttachmentManager",
    "create_attachment_manager",
]
