"""Integration tests for the attachment manager facade."""

import io

import pytest
from PIL import Image

from neo_attachments import (
    AttachmentIdentityWarning,
    ConfigurationError,
    InvalidFileType,
    RawUpload,
    UploadState,
    create_attachment_manager,
    upload_column,
)

pytestmark = pytest.mark.integration


class TestAssignAndSave:
    """Test the record lifecycle from assignment to save."""

    @pytest.mark.asyncio
    async def test_picture_with_versions(self, manager, user, jpeg_bytes, storage_root):
        """Test an image upload with two fitted versions."""
        session = await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg", "image/jpeg"))
        assert session.state is UploadState.TRANSFORMED

        errors = await manager.save(user)

        assert errors == {}
        files = manager.files(user, "picture")
        with Image.open(files["thumb"].path) as thumb:
            assert thumb.width <= 100 and thumb.height <= 100
        with Image.open(files["large"].path) as large:
            assert large.width <= 200 and large.height <= 300

        original = files["original"]
        assert user.picture == "me.jpg"
        assert user.picture_mime_type == "image/jpeg"
        assert user.picture_filesize == original.path.stat().st_size
        assert (user.picture_width, user.picture_height) == (400, 300)
        assert original.size == user.picture_filesize
        assert original.width == 400

        assert manager.url(user, "picture") == "/files/user/picture/42/me.jpg"
        assert manager.url(user, "picture", "thumb") == "/files/user/picture/42/thumb/me.jpg"
        assert str(files["large"]) == "/files/user/picture/42/large/me.jpg"
        assert not list((storage_root / "tmp").iterdir())

    @pytest.mark.asyncio
    async def test_pending_files_are_staged(self, manager, user, jpeg_bytes):
        """Test read-back before save points at the staging area."""
        session = await manager.assign(user, "picture", RawUpload(io.BytesIO(jpeg_bytes), "me.jpg"))

        files = manager.files(user, "picture")
        assert files["thumb"].committed is False
        assert manager.url(user, "picture", "thumb") == f"/files/tmp/{session.id}/thumb.jpg"
        assert manager.temp_value(user, "picture") == f"{session.id}/me.jpg"

    @pytest.mark.asyncio
    async def test_rejected_upload_does_not_affect_sibling(self, manager, user, jpeg_bytes):
        """Test that a validation error is reported per attribute."""
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        document = await manager.assign(user, "document", RawUpload(b"MZ", "virus.exe"))

        assert document.state is UploadState.FAILED
        assert user.has_attachment_errors
        assert isinstance(user.attachment_errors["document"][0], InvalidFileType)

        errors = await manager.save(user)

        assert list(errors) == ["document"]
        assert errors["document"].rule == "extension"
        assert user.document is None
        assert user.picture == "me.jpg"
        assert user.get_pending_upload("document") is None

    @pytest.mark.asyncio
    async def test_save_twice(self, manager, user, jpeg_bytes):
        """Test that saving again without new uploads changes nothing."""
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        await manager.save(user)
        assert await manager.save(user) == {}
        assert user.picture == "me.jpg"

    @pytest.mark.asyncio
    async def test_reassign_replaces_pending(self, manager, user, jpeg_bytes):
        """Test that a second assignment discards the first staged upload."""
        first = await manager.assign(user, "picture", RawUpload(jpeg_bytes, "a.jpg"))
        staging_dir = first.staged["original"].path.parent
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "b.jpg"))

        assert first.state is UploadState.FAILED
        assert not staging_dir.exists()

        await manager.save(user)
        assert user.picture == "b.jpg"

    @pytest.mark.asyncio
    async def test_assign_none_drops_pending(self, manager, user, jpeg_bytes):
        """Test that assigning None only drops the unsaved upload."""
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        assert await manager.assign(user, "picture", None) is None

        assert manager.files(user, "picture") is None
        assert await manager.save(user) == {}
        assert user.picture is None

    @pytest.mark.asyncio
    async def test_save_before_id(self, manager, record_class, jpeg_bytes):
        """Test that saving a record without id fails and can be retried."""
        record = record_class(id=None)
        await manager.assign(record, "picture", RawUpload(jpeg_bytes, "me.jpg"))

        with pytest.raises(ConfigurationError):
            await manager.save(record)

        record.id = 5
        assert await manager.save(record) == {}
        assert manager.url(record, "picture") == "/files/user/picture/5/me.jpg"

    @pytest.mark.asyncio
    async def test_identity_change_after_save(self, manager, user, jpeg_bytes):
        """Test the warning when the id changes after commit."""
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        await manager.save(user)

        user.id = 99
        with pytest.warns(AttachmentIdentityWarning):
            await manager.save(user)


class TestTempValues:
    """Test redisplay of uploads across requests."""

    @pytest.mark.asyncio
    async def test_assign_temp(self, manager, record_class, jpeg_bytes, storage_root):
        """Test that a temp value re-attaches a staged upload on another instance."""
        first_request = record_class(id=42)
        await manager.assign(first_request, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        temp_value = manager.temp_value(first_request, "picture")

        second_request = record_class(id=42)
        session = await manager.assign_temp(second_request, "picture", temp_value)

        assert session.state is UploadState.TRANSFORMED
        assert await manager.save(second_request) == {}
        assert (storage_root / "user" / "picture" / "42" / "thumb" / "me.jpg").is_file()

    @pytest.mark.asyncio
    async def test_blank_temp_value_ignored(self, manager, user, jpeg_bytes):
        """Test that an empty temp value keeps a fresh assignment."""
        session = await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))

        assert await manager.assign_temp(user, "picture", "") is None
        assert await manager.assign_temp(user, "picture", session.temp_value) is session
        assert user.get_pending_upload("picture") is session

    @pytest.mark.asyncio
    async def test_expired_temp_value(self, manager, user):
        """Test that an unknown temp value is reported, not raised."""
        result = await manager.assign_temp(user, "picture", "6f1c1a52-7d39-4a4c-9b1e-3c0f1f9a2b10/me.jpg")

        assert result is None
        assert user.attachment_errors["picture"][0].rule == "temp_value"


class TestDestroyAndAbandon:
    """Test file removal with the record."""

    @pytest.mark.asyncio
    async def test_destroy(self, manager, user, jpeg_bytes, storage_root):
        """Test that destroying the record removes every version."""
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        await manager.save(user)

        assert await manager.destroy(user) == 3
        assert not (storage_root / "user").exists()

    @pytest.mark.asyncio
    async def test_destroy_loaded_record(self, manager, record_class, jpeg_bytes):
        """Test destroy on a record loaded with only its stored filename."""
        saved = record_class(id=42)
        await manager.assign(saved, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        await manager.save(saved)

        loaded = record_class(id=42)
        loaded.picture = "me.jpg"
        assert await manager.destroy(loaded) == 3

    @pytest.mark.asyncio
    async def test_destroy_without_uploads(self, manager, user):
        """Test that a record without uploads is a no-op."""
        assert await manager.destroy(user) == 0

    @pytest.mark.asyncio
    async def test_abandon(self, manager, user, jpeg_bytes, storage_root):
        """Test that abandoning drops staged files and the pending upload."""
        session = await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))

        await manager.abandon(user)

        assert session.failure_reason == "abandoned"
        assert user.get_pending_upload("picture") is None
        assert not list((storage_root / "tmp").iterdir())


class TestDeclarationAndHooks:
    """Test attribute registration and record hooks."""

    def test_duplicate_registration(self, manager, record_class):
        """Test that an attribute cannot be declared twice."""
        with pytest.raises(ConfigurationError):
            manager.register(record_class, upload_column("picture"))

    def test_unknown_attribute(self, manager, user):
        """Test that unknown attributes are configuration errors."""
        with pytest.raises(ConfigurationError):
            manager.files(user, "avatar")

    @pytest.mark.asyncio
    async def test_unknown_version(self, manager, user, jpeg_bytes):
        """Test that asking for an undeclared version is a KeyError."""
        await manager.assign(user, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        with pytest.raises(KeyError):
            manager.url(user, "picture", "huge")

    def test_declare_decorator(self, settings, record_class):
        """Test the decorator form and inheritance of declarations."""
        manager = create_attachment_manager(settings, use_magic=False)

        @manager.declare(upload_column("resume", extensions=["pdf"]))
        class Applicant(record_class):
            pass

        class Intern(Applicant):
            pass

        assert list(manager.attributes_for(Intern)) == ["resume"]
        assert manager.attributes_for(record_class) == {}

    @pytest.mark.asyncio
    async def test_hooks(self, manager, record_class, jpeg_bytes):
        """Test the assigned, committed and destroyed hooks."""
        events = []

        class TrackedUser(record_class):
            def after_attachment_assigned(self, attribute, session):
                events.append(("assigned", attribute, session.state))

            def after_attachment_committed(self, attribute, files):
                events.append(("committed", attribute, files.names))

            def before_attachment_destroyed(self, attribute, files):
                events.append(("destroyed", attribute, files.original.exists()))

        record = TrackedUser(id=1)
        await manager.assign(record, "picture", RawUpload(jpeg_bytes, "me.jpg"))
        await manager.save(record)
        await manager.destroy(record)

        assert events == [
            ("assigned", "picture", UploadState.STAGED),
            ("committed", "picture", ("original", "thumb", "large")),
            ("destroyed", "picture", True),
        ]
