"""Version set entity.

ONLY version sets - the named variants of one logical upload, keyed by
version name in declaration order.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Callable, Dict, Generic, Iterator, Mapping, Sequence, Tuple, TypeVar

from .upload_attribute import ORIGINAL

T = TypeVar("T")
U = TypeVar("U")


class VersionSet(Mapping[str, T], Generic[T]):
    """Mapping of version name to file handle.

    Invariant: exactly one entry per declared version name, ``original``
    included. Entries are StagedFile before commit, CommittedFile after,
    and UploadedFile when handed to consumers.
    """

    def __init__(self, entries: Mapping[str, T], version_names: Sequence[str]):
        names = tuple(version_names)
        if ORIGINAL not in names:
            raise ValueError(f"Version set must contain '{ORIGINAL}'")
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate version names: {names}")

        missing = [name for name in names if name not in entries]
        extra = [name for name in entries if name not in names]
        if missing or extra:
            raise ValueError(
                f"Version set does not match declaration (missing={missing}, unexpected={extra})"
            )

        self._names: Tuple[str, ...] = names
        self._entries: Dict[str, T] = {name: entries[name] for name in names}

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def original(self) -> T:
        return self._entries[ORIGINAL]

    def map(self, fn: Callable[[T], U]) -> "VersionSet[U]":
        """Apply ``fn`` to every entry, keeping names and order."""
        return VersionSet({name: fn(entry) for name, entry in self._entries.items()}, self._names)

    def __getitem__(self, name: str) -> T:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"VersionSet({dict(self._entries)!r})"
