"""Path policy.

ONLY path resolution - computes the storage directory, staging directory
and stored filename for an upload from the record, the attribute
declaration and the original file name. Pure: no filesystem access.

Following maximum separation architecture - one file = one purpose.
"""

from pathlib import Path, PurePath
from typing import Any, Union

from ...core.entities import ORIGINAL, UploadAttribute
from ...core.exceptions import ConfigurationError
from ...core.protocols import HostRecord
from ...core.value_objects import RelativePath
from ...utils import FORBIDDEN_FILENAME_CHARS, normalize_extension, normalize_record_type, sanitize_filename


def default_store_dir(record: HostRecord, attribute_name: str) -> RelativePath:
    """``<normalized-record-type>/<attribute>/<record-id>``.

    Raises:
        ConfigurationError: if the record has no id yet
    """
    record_id = record.get_record_id()
    if record_id is None or str(record_id) == "":
        raise ConfigurationError(
            "Default store_dir needs a record id; save the record first or declare store_dir",
            attribute_name=attribute_name,
            option="store_dir"
        )

    try:
        return RelativePath((normalize_record_type(record.get_record_type()), attribute_name, str(record_id)))
    except ValueError as e:
        raise ConfigurationError(
            f"Cannot build default store_dir: {e}",
            attribute_name=attribute_name,
            option="store_dir"
        ) from e


class PathPolicy:
    """Storage path and filename resolution.

    Directories are returned relative to ``storage_root``; ``absolute``
    renders them for the local filesystem with ``pathlib`` joins.
    """

    def __init__(self, storage_root: Union[str, Path]):
        self._storage_root = Path(storage_root)

    @property
    def storage_root(self) -> Path:
        return self._storage_root

    def resolve_store_dir(self, record: HostRecord, attribute: UploadAttribute) -> RelativePath:
        if attribute.store_dir is None:
            return default_store_dir(record, attribute.name)
        value = self._evaluate(attribute, "store_dir", attribute.store_dir, record, attribute.name)
        return self._to_relative(attribute, "store_dir", value)

    def resolve_tmp_dir(self, record: HostRecord, attribute: UploadAttribute) -> RelativePath:
        value = self._evaluate(attribute, "tmp_dir", attribute.tmp_dir, record, attribute.name)
        return self._to_relative(attribute, "tmp_dir", value)

    def resolve_filename(
        self,
        record: HostRecord,
        attribute: UploadAttribute,
        original_basename: str,
        extension: str
    ) -> str:
        """Stored filename shared by every version of the upload.

        Without a ``filename`` option the original name is kept as given,
        extension case included, reduced to a single safe path component.
        A ``filename`` resolver receives the normalized extension.
        """
        if attribute.filename is None:
            suffix = extension.strip().lstrip(".")
            name = f"{original_basename}.{suffix}" if suffix else original_basename
            return sanitize_filename(name)

        extension = normalize_extension(extension)

        value = self._evaluate(attribute, "filename", attribute.filename, record, original_basename, extension)
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(
                f"filename resolver returned an empty value: {value!r}",
                attribute_name=attribute.name,
                option="filename"
            )

        name = value.strip()
        if name in {".", ".."} or any(ch in FORBIDDEN_FILENAME_CHARS or ord(ch) < 32 for ch in name):
            raise ConfigurationError(
                f"filename resolver returned an invalid filename: {value!r}",
                attribute_name=attribute.name,
                option="filename"
            )
        return name

    def version_path(self, store_dir: RelativePath, version_name: str, filename: str) -> RelativePath:
        """``original`` at ``<store_dir>/<filename>``, others one level down."""
        if version_name == ORIGINAL:
            return store_dir.join(filename)
        return store_dir.join(version_name, filename)

    def absolute(self, relative_path: RelativePath) -> Path:
        return relative_path.to_filesystem(self._storage_root)

    def _evaluate(self, attribute: UploadAttribute, option: str, resolver: Any, *args: Any) -> Any:
        try:
            return resolver.resolve(*args)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"{option} resolver for '{attribute.name}' failed: {e}",
                attribute_name=attribute.name,
                option=option,
                details={"cause": f"{type(e).__name__}: {e}"}
            ) from e

    def _to_relative(self, attribute: UploadAttribute, option: str, value: Any) -> RelativePath:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(
                f"{option} for '{attribute.name}' resolved to an empty path",
                attribute_name=attribute.name,
                option=option
            )
        if not isinstance(value, (str, PurePath, RelativePath)):
            raise ConfigurationError(
                f"{option} for '{attribute.name}' must be a path, got {type(value).__name__}",
                attribute_name=attribute.name,
                option=option
            )

        try:
            return RelativePath.parse(value)
        except ValueError as e:
            raise ConfigurationError(
                f"{option} for '{attribute.name}' is not a usable relative path: {e}",
                attribute_name=attribute.name,
                option=option,
                details={"value": str(value)}
            ) from e
