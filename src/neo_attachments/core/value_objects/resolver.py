"""Resolver value objects.

ONLY value resolution - a declaration option such as ``store_dir`` or
``filename`` is either a fixed value or a callback evaluated against the
record. Both variants answer the same ``resolve(*args)`` call so callers
never inspect which one they hold.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Static(Generic[T]):
    """A resolver that always yields the same value."""

    value: T

    def resolve(self, *args: Any) -> T:
        """Return the fixed value; arguments are ignored."""
        return self.value

    def __repr__(self) -> str:
        return f"Static({self.value!r})"


@dataclass(frozen=True)
class Dynamic(Generic[T]):
    """A resolver backed by a caller-supplied function."""

    fn: Callable[..., T]

    def __post_init__(self):
        if not callable(self.fn):
            raise ValueError(f"Dynamic resolver requires a callable, got {type(self.fn).__name__}")

    def resolve(self, *args: Any) -> T:
        """Invoke the resolver function with the given arguments."""
        return self.fn(*args)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", repr(self.fn))
        return f"Dynamic({name})"


Resolver = Union[Static[T], Dynamic[T]]


def as_resolver(value: Union[T, Callable[..., T], "Static[T]", "Dynamic[T]"]) -> Resolver:
    """Wrap a declaration option into a resolver.

    Resolvers pass through unchanged, callables become ``Dynamic`` and any
    other value becomes ``Static``. This is the only place the variant is
    chosen; everything downstream calls ``resolve``.
    """
    if isinstance(value, (Static, Dynamic)):
        return value
    if callable(value):
        return Dynamic(value)
    return Static(value)
