"""Tests for the exception hierarchy."""

from neo_attachments import (
    AttachmentError,
    ConfigurationError,
    FileSizeOutOfRange,
    InvalidFileType,
    RelocationError,
    TransformError,
    ValidationError,
    create_error_response,
)


class TestAttachmentErrors:
    """Test cases for structured attachment errors."""

    def test_hierarchy(self):
        """Test that every error derives from AttachmentError."""
        assert issubclass(InvalidFileType, ValidationError)
        assert issubclass(FileSizeOutOfRange, ValidationError)
        for error_class in (ValidationError, ConfigurationError, TransformError, RelocationError):
            assert issubclass(error_class, AttachmentError)

    def test_details_are_enriched(self):
        """Test that constructor arguments end up in details."""
        error = FileSizeOutOfRange(
            "File is too large",
            attribute_name="document",
            filename="big.pdf",
            size_bytes=2048,
            max_bytes=1024
        )

        assert error.error_code == "FILE_SIZE_OUT_OF_RANGE"
        assert error.rule == "size"
        assert error.details["size_bytes"] == 2048
        assert error.details["max_bytes"] == 1024
        assert "min_bytes" not in error.details

    def test_transform_error_cause(self):
        """Test that the cause is summarized in details."""
        error = TransformError("Processing failed", version_name="thumb", cause=OSError("truncated"))

        assert error.details["version"] == "thumb"
        assert error.details["cause"] == "OSError: truncated"

    def test_error_response(self):
        """Test the structured response rendering."""
        error = InvalidFileType("Not allowed", attribute_name="picture", extension="exe", allowed_types={"jpg"})

        response = create_error_response(error)

        assert response == {
            "error": {
                "code": "INVALID_FILE_TYPE",
                "message": "Not allowed",
                "details": error.details,
                "type": "InvalidFileType",
            }
        }
        assert response["error"]["details"]["allowed_types"] == ["jpg"]
