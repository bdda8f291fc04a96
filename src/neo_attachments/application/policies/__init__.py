"""Attachment policies."""

from .path_policy import PathPolicy, default_store_dir

__all__ = [
    "PathPolicy",
    "default_store_dir",
]
