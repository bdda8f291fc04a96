"""Upload attribute entity.

ONLY attribute configuration - the immutable declaration binding one
(record type, field name) pair to its storage, naming, version and
validation policy. Shared read-only by every instance of the record type.

Following maximum separation architecture - one file = one purpose.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from ..exceptions import ConfigurationError
from ..protocols.image_processor import TransformFn
from ..value_objects import FileSize, ResizeSpec, Resolver, Static

ORIGINAL = "original"

_ATTRIBUTE_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_VERSION_NAME = re.compile(r'^[A-Za-z0-9_-]+$')


class OldFilesPolicy(Enum):
    """What happens to superseded files after a new commit."""
    DELETE = "delete"  # remove superseded versions once the new ones are durable
    KEEP = "keep"      # leave superseded versions on disk


@dataclass(frozen=True)
class VersionSpec:
    """One named variant of an upload.

    ``resize`` is the built-in resize (image attributes only) and runs
    before ``transform``, the user callback.
    """

    name: str
    resize: Optional[ResizeSpec] = None
    transform: Optional[TransformFn] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not _VERSION_NAME.match(self.name):
            raise ConfigurationError(
                f"Invalid version name {self.name!r}: use letters, digits, '_' or '-'",
                option="versions"
            )

    @property
    def has_processing(self) -> bool:
        return self.resize is not None or self.transform is not None


@dataclass(frozen=True)
class UploadAttribute:
    """Upload attribute configuration.

    Built by ``upload_column`` / ``image_column``; see those helpers for the
    accepted shorthand. ``store_dir`` of ``None`` means the default layout
    ``<record-type>/<attribute>/<record-id>``; ``filename`` of ``None``
    keeps the original filename.
    """

    name: str
    store_dir: Optional[Resolver] = None
    tmp_dir: Resolver = field(default_factory=lambda: Static("tmp"))
    filename: Optional[Resolver] = None
    versions: Tuple[VersionSpec, ...] = ()
    image: bool = False
    process: Optional[TransformFn] = None
    allowed_extensions: Optional[FrozenSet[str]] = None
    allowed_mime_types: Optional[FrozenSet[str]] = None
    min_size: Optional[FileSize] = None
    max_size: Optional[FileSize] = None
    fix_file_extensions: bool = False
    old_files: OldFilesPolicy = OldFilesPolicy.DELETE
    permissions: Optional[int] = None

    def __post_init__(self):
        """Validate the declaration; every failure is a ConfigurationError."""
        if not isinstance(self.name, str) or not _ATTRIBUTE_NAME.match(self.name):
            raise ConfigurationError(f"Invalid attribute name: {self.name!r}", option="name")

        seen = set()
        for version in self.versions:
            if version.name == ORIGINAL:
                raise ConfigurationError(
                    f"'{ORIGINAL}' is reserved and cannot be declared as a version",
                    attribute_name=self.name,
                    option="versions"
                )
            if version.name in seen:
                raise ConfigurationError(
                    f"Duplicate version name: {version.name}",
                    attribute_name=self.name,
                    option="versions"
                )
            seen.add(version.name)

            if version.resize is not None and not self.image:
                raise ConfigurationError(
                    f"Version '{version.name}' declares target dimensions but "
                    f"'{self.name}' is not an image attribute",
                    attribute_name=self.name,
                    option="versions"
                )

        if self.min_size and self.max_size and self.min_size.value > self.max_size.value:
            raise ConfigurationError(
                f"min_size ({self.min_size}) is larger than max_size ({self.max_size})",
                attribute_name=self.name,
                option="max_size"
            )

        if self.permissions is not None and not 0 <= self.permissions <= 0o777:
            raise ConfigurationError(
                f"Invalid file permissions: {oct(self.permissions)}",
                attribute_name=self.name,
                option="permissions"
            )

    @property
    def version_names(self) -> Tuple[str, ...]:
        """All version names in processing order, ``original`` first."""
        return (ORIGINAL,) + tuple(version.name for version in self.versions)

    @property
    def derived_versions(self) -> Tuple[VersionSpec, ...]:
        return self.versions

    def get_version(self, name: str) -> VersionSpec:
        """VersionSpec for ``name``; the original's transform is ``process``."""
        if name == ORIGINAL:
            return VersionSpec(ORIGINAL, transform=self.process)
        for version in self.versions:
            if version.name == name:
                return version
        raise KeyError(f"Attribute '{self.name}' has no version '{name}'")

    # Metadata field names written to the host record

    @property
    def mime_type_field(self) -> str:
        return f"{self.name}_mime_type"

    @property
    def filesize_field(self) -> str:
        return f"{self.name}_filesize"

    @property
    def width_field(self) -> str:
        return f"{self.name}_width"

    @property
    def height_field(self) -> str:
        return f"{self.name}_height"

    @property
    def exif_field_prefix(self) -> str:
        return f"{self.name}_exif_"

    def __repr__(self) -> str:
        kind = "image_column" if self.image else "upload_column"
        return f"<{kind} '{self.name}' versions={list(self.version_names)}>"
