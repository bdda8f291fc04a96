"""Declaration helpers.

``upload_column`` and ``image_column`` turn the shorthand options used in
record declarations into validated, immutable UploadAttribute objects.

Example:
    picture = image_column(
        "picture",
        versions={"thumb": "100x100", "large": "200x300"},
        max_size="2 MB",
    )
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union

from .core.entities import OldFilesPolicy, UploadAttribute, VersionSpec
from .core.exceptions import ConfigurationError
from .core.value_objects import Dimensions, FileSize, ResizeSpec, as_resolver
from .utils import normalize_extension

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})

VersionsOption = Union[None, Iterable[Union[str, VersionSpec]], Mapping[str, Any]]


def _parse_geometry(name: str, attribute_name: str, value: Any) -> Dimensions:
    try:
        return Dimensions.parse(value)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid geometry for version '{name}': {e}",
            attribute_name=attribute_name,
            option="versions"
        ) from e


def _parse_version(name: str, value: Any, crop: bool, attribute_name: str) -> VersionSpec:
    if isinstance(value, VersionSpec):
        if value.name != name:
            raise ConfigurationError(
                f"Version declared as '{name}' is named '{value.name}'",
                attribute_name=attribute_name,
                option="versions"
            )
        return value

    if value is None:
        return VersionSpec(name)

    if callable(value):
        return VersionSpec(name, transform=value)

    if isinstance(value, Mapping):
        unknown = set(value) - {"size", "crop", "transform"}
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) for version '{name}': {', '.join(sorted(unknown))}",
                attribute_name=attribute_name,
                option="versions"
            )
        resize = None
        if value.get("size") is not None:
            dimensions = _parse_geometry(name, attribute_name, value["size"])
            resize = ResizeSpec(dimensions, crop=bool(value.get("crop", crop)))
        return VersionSpec(name, resize=resize, transform=value.get("transform"))

    return VersionSpec(name, resize=ResizeSpec(_parse_geometry(name, attribute_name, value), crop=crop))


def parse_versions(versions: VersionsOption, crop: bool = False, attribute_name: Optional[str] = None) -> Tuple[VersionSpec, ...]:
    """Normalize the ``versions`` option.

    Accepts a list of names (or VersionSpec objects), or a mapping of
    name to geometry (``"100x100"``, ``(100, 100)``, Dimensions), a
    transform callable, an options dict (``size``, ``crop``, ``transform``)
    or None.
    """
    if versions is None:
        return ()

    if isinstance(versions, Mapping):
        return tuple(_parse_version(str(name), value, crop, attribute_name) for name, value in versions.items())

    if isinstance(versions, (str, bytes)):
        raise ConfigurationError(
            "versions must be a list or a mapping, not a string",
            attribute_name=attribute_name,
            option="versions"
        )

    specs = []
    for entry in versions:
        if isinstance(entry, VersionSpec):
            specs.append(entry)
        elif isinstance(entry, str):
            specs.append(VersionSpec(entry))
        else:
            raise ConfigurationError(
                f"Invalid version entry: {entry!r}",
                attribute_name=attribute_name,
                option="versions"
            )
    return tuple(specs)


def _parse_size(value: Any, option: str, attribute_name: str) -> Optional[FileSize]:
    if value is None:
        return None
    try:
        return FileSize.coerce(value)
    except ValueError as e:
        raise ConfigurationError(str(e), attribute_name=attribute_name, option=option) from e


def _parse_old_files(value: Union[str, OldFilesPolicy], attribute_name: str) -> OldFilesPolicy:
    if isinstance(value, OldFilesPolicy):
        return value
    try:
        return OldFilesPolicy(str(value).lower())
    except ValueError:
        allowed = ", ".join(policy.value for policy in OldFilesPolicy)
        raise ConfigurationError(
            f"Unknown old_files policy {value!r}; use one of: {allowed}",
            attribute_name=attribute_name,
            option="old_files"
        ) from None


def upload_column(
    name: str,
    *,
    store_dir: Any = None,
    tmp_dir: Any = "tmp",
    filename: Any = None,
    versions: VersionsOption = None,
    crop: bool = False,
    extensions: Optional[Iterable[str]] = None,
    mime_types: Optional[Iterable[str]] = None,
    min_size: Union[None, int, str, FileSize] = None,
    max_size: Union[None, int, str, FileSize] = None,
    process: Optional[Callable] = None,
    fix_file_extensions: bool = False,
    old_files: Union[str, OldFilesPolicy] = OldFilesPolicy.DELETE,
    permissions: Optional[int] = None,
    image: bool = False
) -> UploadAttribute:
    """Declare an upload attribute.

    Args:
        name: Attribute (field) name on the record
        store_dir: Path or ``fn(record, attribute_name)``; defaults to
            ``<record-type>/<attribute>/<record-id>``
        tmp_dir: Path or ``fn(record, attribute_name)`` for staging
        filename: Name or ``fn(record, basename, extension)``; defaults to
            the original filename
        versions: Derived versions, see ``parse_versions``
        crop: Crop versions to their exact geometry instead of fitting
        extensions: Allowed extensions (case-insensitive, dot optional)
        mime_types: Allowed mime types; ``image/*`` style wildcards work
        min_size: Minimum size in bytes or human-readable (``"10 KB"``)
        max_size: Maximum size in bytes or human-readable (``"2 MB"``)
        process: Transform applied to the original
        fix_file_extensions: Replace the extension with the one matching
            the detected content type
        old_files: ``"delete"`` or ``"keep"`` superseded files
        permissions: Mode for committed files, overriding the settings
        image: Treat the upload as an image (dimensions, resizing)

    Raises:
        ConfigurationError: for any invalid option
    """
    if not isinstance(name, str) or not name:
        raise ConfigurationError(f"Invalid attribute name: {name!r}", option="name")

    allowed_extensions = None
    if extensions is not None:
        allowed_extensions = frozenset(normalize_extension(ext) for ext in extensions)

    allowed_mime_types = None
    if mime_types is not None:
        allowed_mime_types = frozenset(mime.strip().lower() for mime in mime_types)

    return UploadAttribute(
        name=name,
        store_dir=as_resolver(store_dir) if store_dir is not None else None,
        tmp_dir=as_resolver(tmp_dir),
        filename=as_resolver(filename) if filename is not None else None,
        versions=parse_versions(versions, crop=crop, attribute_name=name),
        image=image,
        process=process,
        allowed_extensions=allowed_extensions,
        allowed_mime_types=allowed_mime_types,
        min_size=_parse_size(min_size, "min_size", name),
        max_size=_parse_size(max_size, "max_size", name),
        fix_file_extensions=fix_file_extensions,
        old_files=_parse_old_files(old_files, name),
        permissions=permissions
    )


def image_column(name: str, *, extensions: Optional[Iterable[str]] = IMAGE_EXTENSIONS, **options: Any) -> UploadAttribute:
    """Declare an image upload attribute.

    Same options as ``upload_column``; extensions default to common web
    image formats and versions may declare target geometry.
    """
    return upload_column(name, extensions=extensions, image=True, **options)
