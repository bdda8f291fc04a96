"""Relative path value object.

ONLY relative storage paths - represents a validated path below a storage
root with security checks and platform-correct joining.

Following maximum separation architecture - one file = one purpose.
"""

import os
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath
from typing import Tuple, Union


@dataclass(frozen=True)
class RelativePath:
    """Relative path value object.

    Stores a path as a tuple of components so that it can be rendered for
    the local filesystem (``pathlib`` joins) or for URLs (POSIX form)
    without hand-built separators.

    Security features:
    - Prevents path traversal (``..`` components)
    - Rejects absolute paths and drive letters
    - Validates component length and control characters
    """

    parts: Tuple[str, ...]

    MAX_COMPONENT_LENGTH = 255
    MAX_PATH_LENGTH = 4096

    def __post_init__(self):
        """Validate path components."""
        if not isinstance(self.parts, tuple):
            raise ValueError(f"RelativePath parts must be a tuple, got {type(self.parts).__name__}")

        if not self.parts:
            raise ValueError("Relative path cannot be empty")

        for component in self.parts:
            self._validate_component(component)

        if len(self.as_posix()) > self.MAX_PATH_LENGTH:
            raise ValueError(f"Path too long: {len(self.as_posix())} > {self.MAX_PATH_LENGTH}")

    def _validate_component(self, component: str) -> None:
        if not isinstance(component, str) or not component:
            raise ValueError("Path components must be non-empty strings")

        if component in {".", ".."}:
            raise ValueError("Path traversal not allowed: contains '..' component")

        if "/" in component or "\\" in component:
            raise ValueError(f"Path component contains a separator: '{component}'")

        if len(component) > self.MAX_COMPONENT_LENGTH:
            raise ValueError(
                f"Path component too long: '{component}' ({len(component)} > {self.MAX_COMPONENT_LENGTH})"
            )

        for char in component:
            if ord(char) < 32:
                raise ValueError(f"Path contains control character: {repr(char)}")

    @classmethod
    def parse(cls, value: Union[str, PurePath, "RelativePath"]) -> "RelativePath":
        """Build a RelativePath from a string or path object.

        Both ``/`` and the host separator are accepted; redundant separators
        and ``.`` components are dropped.
        """
        if isinstance(value, RelativePath):
            return value

        if isinstance(value, PurePath):
            if value.is_absolute() or value.anchor:
                raise ValueError(f"Absolute paths not allowed: {value}")
            raw_parts = value.parts
        elif isinstance(value, str):
            text = value.strip()
            if not text:
                raise ValueError("Relative path cannot be empty")
            if text.startswith(("/", "\\")) or os.path.isabs(text) or (len(text) > 1 and text[1] == ":"):
                raise ValueError(f"Absolute paths not allowed: {value}")
            raw_parts = text.replace("\\", "/").split("/")
        else:
            raise ValueError(f"Cannot build a relative path from {type(value).__name__}")

        parts = tuple(part for part in raw_parts if part and part != ".")
        return cls(parts)

    @classmethod
    def from_components(cls, *components: Union[str, "RelativePath"]) -> "RelativePath":
        """Join components (each possibly multi-segment) into one path."""
        parts: Tuple[str, ...] = ()
        for component in components:
            parts += cls.parse(component if isinstance(component, RelativePath) else str(component)).parts
        return cls(parts)

    def join(self, *components: Union[str, "RelativePath"]) -> "RelativePath":
        """Join this path with additional components."""
        return RelativePath.from_components(self, *components)

    @property
    def name(self) -> str:
        """Last component of the path."""
        return self.parts[-1]

    @property
    def parent(self) -> "RelativePath":
        """Directory containing this path; raises for single-component paths."""
        if len(self.parts) == 1:
            raise ValueError(f"'{self}' has no parent inside the storage root")
        return RelativePath(self.parts[:-1])

    def to_filesystem(self, root: Union[str, Path]) -> Path:
        """Resolve against a storage root using the host's path semantics."""
        return Path(root).joinpath(*self.parts)

    def as_posix(self) -> str:
        """POSIX rendering, used for URLs and stored values."""
        return str(PurePosixPath(*self.parts))

    def __str__(self) -> str:
        return self.as_posix()

    def __repr__(self) -> str:
        return f"RelativePath('{self.as_posix()}')"
