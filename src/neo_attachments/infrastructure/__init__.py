"""Infrastructure adapters: local disk storage and the Pillow image processor."""

from .local_filesystem import LocalFileStorage, Move, RelocationResult
from .pillow_processor import PillowImageProcessor, create_pillow_processor

__all__ = [
    "LocalFileStorage",
    "Move",
    "RelocationResult",
    "PillowImageProcessor",
    "create_pillow_processor",
]
