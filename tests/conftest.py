"""Pytest configuration and fixtures for neo-attachments tests."""

import io
from typing import Optional

import pytest
from PIL import Image

from neo_attachments import (
    AttachmentRecordMixin,
    AttachmentSettings,
    LocalFileStorage,
    PillowImageProcessor,
    create_attachment_manager,
    image_column,
    upload_column,
)
from neo_attachments.application import (
    CommitEngine,
    MetadataExtractor,
    PathPolicy,
    StagingArea,
    TransformPipeline,
)


PICTURE_FIELDS = frozenset({
    "picture_mime_type",
    "picture_filesize",
    "picture_width",
    "picture_height",
    "picture_exif_make",
})


class User(AttachmentRecordMixin):
    """Minimal host record used across the tests."""

    attachment_metadata_fields = PICTURE_FIELDS

    def __init__(self, id=None, name="alice"):
        self.id = id
        self.name = name
        self.picture = None
        self.document = None
        self.picture_mime_type = None
        self.picture_filesize = None
        self.picture_width = None
        self.picture_height = None
        self.picture_exif_make = None


def make_image_bytes(
    size=(400, 300),
    image_format: str = "JPEG",
    color=(200, 30, 30),
    mode: str = "RGB",
    exif_make: Optional[str] = None
) -> bytes:
    """Encode a solid-color image."""
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    save_kwargs = {"format": image_format}
    if exif_make and image_format == "JPEG":
        exif = Image.Exif()
        exif[0x010F] = exif_make  # Make
        save_kwargs["exif"] = exif.tobytes()
    image.save(buffer, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def storage_root(tmp_path):
    """Storage root inside the test's temporary directory."""
    root = tmp_path / "public"
    root.mkdir()
    return root


@pytest.fixture
def settings(storage_root):
    """Settings pointing at the temporary storage root."""
    return AttachmentSettings(storage_root=storage_root, url_prefix="/files", jpeg_quality=90)


@pytest.fixture
def jpeg_bytes():
    """A 400x300 JPEG."""
    return make_image_bytes()


@pytest.fixture
def png_bytes():
    """A 64x48 PNG with transparency."""
    return make_image_bytes(size=(64, 48), image_format="PNG", mode="RGBA", color=(0, 0, 255, 128))


@pytest.fixture
def image_factory():
    """Build image bytes with custom size, format or EXIF."""
    return make_image_bytes


@pytest.fixture
def processor():
    """Pillow image processor."""
    return PillowImageProcessor(jpeg_quality=90)


@pytest.fixture
def file_storage():
    """Local file storage with default permissions."""
    return LocalFileStorage(file_permissions=0o644, directory_permissions=0o755)


@pytest.fixture
def engine(storage_root, processor, file_storage):
    """Commit engine wired to the temporary storage root, without libmagic."""
    return CommitEngine(
        path_policy=PathPolicy(storage_root),
        staging=StagingArea(storage_root, file_storage),
        extractor=MetadataExtractor(processor, use_magic=False),
        pipeline=TransformPipeline(processor, file_storage),
        storage=file_storage,
        file_permissions=0o644
    )


@pytest.fixture
def picture_attribute():
    """Image attribute with a fitted thumb and large version."""
    return image_column("picture", versions={"thumb": "100x100", "large": "200x300"})


@pytest.fixture
def document_attribute():
    """Plain upload attribute restricted to PDF and text files."""
    return upload_column("document", extensions=["pdf", "txt"], max_size="1 KB")


@pytest.fixture
def manager(settings, picture_attribute, document_attribute):
    """Attachment manager with User's attributes registered."""
    attachment_manager = create_attachment_manager(settings, use_magic=False)
    attachment_manager.register(User, picture_attribute, document_attribute)
    return attachment_manager


@pytest.fixture
def user():
    """A persisted user."""
    return User(id=42)


@pytest.fixture
def record_class():
    """The User record class."""
    return User
