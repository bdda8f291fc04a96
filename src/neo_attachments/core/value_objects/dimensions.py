"""Image dimension value objects.

ONLY target geometry - parses ``"WIDTHxHEIGHT"`` declarations and carries
the resize mode (scale-to-fit or crop-to-exact) for a version.

Following maximum separation architecture - one file = one purpose.
"""

import re
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

_GEOMETRY = re.compile(r'^\s*(\d+)\s*[xX]\s*(\d+)\s*$')

MAX_DIMENSION = 10000


@dataclass(frozen=True)
class Dimensions:
    """Pixel dimensions (width x height)."""

    width: int
    height: int

    def __post_init__(self):
        for label, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Dimension {label} must be an integer, got {type(value).__name__}")
            if value <= 0:
                raise ValueError(f"Dimension {label} must be positive: {value}")
            if value > MAX_DIMENSION:
                raise ValueError(f"Dimension {label} exceeds maximum ({MAX_DIMENSION}): {value}")

    @classmethod
    def parse(cls, value: Union[str, Sequence[int], "Dimensions"]) -> "Dimensions":
        """Accept ``"100x100"``, ``(100, 100)`` or an existing Dimensions."""
        if isinstance(value, Dimensions):
            return value

        if isinstance(value, str):
            match = _GEOMETRY.match(value)
            if not match:
                raise ValueError(f"Invalid geometry {value!r}, expected 'WIDTHxHEIGHT'")
            return cls(int(match.group(1)), int(match.group(2)))

        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(value[0], value[1])

        raise ValueError(f"Cannot build dimensions from {value!r}")

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def fits_within(self, other: "Dimensions") -> bool:
        """True when both sides are less than or equal to ``other``."""
        return self.width <= other.width and self.height <= other.height

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class ResizeSpec:
    """Built-in resize for one version: target box plus crop flag."""

    dimensions: Dimensions
    crop: bool = False

    def __str__(self) -> str:
        mode = "crop" if self.crop else "fit"
        return f"{self.dimensions} ({mode})"
