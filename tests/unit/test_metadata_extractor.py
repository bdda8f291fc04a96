"""Tests for the metadata extractor."""

from unittest.mock import MagicMock

import pytest

from neo_attachments import ImageInfo, UnreadableFileError
from neo_attachments.application import MetadataExtractor
from neo_attachments.application.services import metadata_extractor as extractor_module


class TestMetadataExtractor:
    """Test cases for MetadataExtractor."""

    def test_jpeg_metadata(self, tmp_path, processor, jpeg_bytes):
        """Test mime type, size and dimensions of a JPEG."""
        path = tmp_path / "photo.jpg"
        path.write_bytes(jpeg_bytes)

        metadata = MetadataExtractor(processor, use_magic=False).extract(path)

        assert metadata.mime_type.value == "image/jpeg"
        assert metadata.size_bytes == len(jpeg_bytes)
        assert (metadata.width, metadata.height) == (400, 300)

    def test_content_wins_over_extension(self, tmp_path, processor, png_bytes):
        """Test that the decoded format beats a misleading extension."""
        path = tmp_path / "really-a-png.jpg"
        path.write_bytes(png_bytes)

        metadata = MetadataExtractor(processor, use_magic=False).extract(path)
        assert metadata.mime_type.value == "image/png"
        assert metadata.exif == {}

    def test_exif_for_jpeg(self, tmp_path, processor, image_factory):
        """Test that EXIF fields are read from JPEGs."""
        path = tmp_path / "camera.jpg"
        path.write_bytes(image_factory(exif_make="Acme"))

        metadata = MetadataExtractor(processor, use_magic=False).extract(path)
        assert metadata.exif.get("Make") == "Acme"

    def test_non_image_uses_extension(self, tmp_path, processor):
        """Test the extension fallback without dimensions."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        metadata = MetadataExtractor(processor, use_magic=False).extract(path)
        assert metadata.mime_type.value == "text/plain"
        assert metadata.width is None and metadata.height is None
        assert metadata.size_bytes == 5

    def test_filename_hint(self, tmp_path, processor):
        """Test that an explicit filename drives the extension fallback."""
        path = tmp_path / "original"
        path.write_bytes(b"%PDF-1.4 fake")

        metadata = MetadataExtractor(processor, use_magic=False).extract(path, "report.pdf")
        assert metadata.mime_type.value == "application/pdf"

    def test_unknown_type(self, tmp_path):
        """Test the generic fallback without processor."""
        path = tmp_path / "blob"
        path.write_bytes(b"\x00\x01")

        metadata = MetadataExtractor(None, use_magic=False).extract(path)
        assert metadata.mime_type.value == "application/octet-stream"

    def test_unreadable_file(self, tmp_path, processor):
        """Test that a missing file is an UnreadableFileError."""
        with pytest.raises(UnreadableFileError) as exc_info:
            MetadataExtractor(processor, use_magic=False).extract(tmp_path / "missing.jpg")
        assert exc_info.value.error_code == "ATTACHMENT_UNREADABLE_FILE"

    def test_exif_skipped_without_support(self, tmp_path, jpeg_bytes):
        """Test that processors without EXIF support yield no EXIF fields."""
        path = tmp_path / "photo.jpg"
        path.write_bytes(jpeg_bytes)
        fake = MagicMock()
        fake.supports_exif = False
        fake.inspect.return_value = ImageInfo(10, 20, "JPEG", "image/jpeg", {"Make": "Acme"})

        metadata = MetadataExtractor(fake, use_magic=False).extract(path)
        assert metadata.exif == {}
        assert (metadata.width, metadata.height) == (10, 20)

    def test_magic_result_used(self, tmp_path, processor, mocker):
        """Test that content sniffing takes precedence when available."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"{}")
        fake_magic = mocker.MagicMock()
        fake_magic.from_buffer.return_value = "application/json"
        mocker.patch.object(extractor_module, "magic", fake_magic, create=True)
        mocker.patch.object(extractor_module, "HAS_MAGIC", True)

        metadata = MetadataExtractor(processor).extract(path)
        assert metadata.mime_type.value == "application/json"

    def test_inconclusive_magic_ignored(self, tmp_path, processor, mocker):
        """Test that octet-stream from libmagic falls through to the extension."""
        path = tmp_path / "notes.txt"
        path.write_bytes(b"\x00\x00")
        fake_magic = mocker.MagicMock()
        fake_magic.from_buffer.return_value = "application/octet-stream"
        mocker.patch.object(extractor_module, "magic", fake_magic, create=True)
        mocker.patch.object(extractor_module, "HAS_MAGIC", True)

        metadata = MetadataExtractor(processor).extract(path)
        assert metadata.mime_type.value == "text/plain"
