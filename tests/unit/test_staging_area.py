"""Tests for the staging area."""

import pytest

from neo_attachments.application import StagingArea
from neo_attachments.core.value_objects import RelativePath, UploadSessionId


@pytest.fixture
def staging(storage_root, file_storage):
    return StagingArea(storage_root, file_storage)


@pytest.fixture
def tmp_dir():
    return RelativePath.parse("tmp")


class TestStagingArea:
    """Test cases for StagingArea."""

    def test_stage_keeps_extension(self, staging, tmp_dir, storage_root):
        """Test staging to '<tmp>/<session>/<version><ext>'."""
        session_id = UploadSessionId.generate()
        staged = staging.stage(b"data", "Report.PDF", session_id, tmp_dir)

        assert staged.relative_path.as_posix() == f"tmp/{session_id}/original.pdf"
        assert staged.path == storage_root / "tmp" / str(session_id) / "original.pdf"
        assert staged.read_bytes() == b"data"
        assert staged.version_name == "original"
        assert staged.original_filename == "Report.PDF"

    def test_stage_without_extension(self, staging, tmp_dir):
        """Test staging a file without extension."""
        staged = staging.stage(b"x", "README", UploadSessionId.generate(), tmp_dir)
        assert staged.path.name == "original"

    def test_stage_sanitizes_client_filename(self, staging, tmp_dir):
        """Test that directory parts of the client filename are dropped."""
        staged = staging.stage(b"x", "..\\..\\evil.txt", UploadSessionId.generate(), tmp_dir)
        assert staged.original_filename == "evil.txt"

    def test_derive_copies_sibling(self, staging, tmp_dir):
        """Test deriving a version from the staged original."""
        original = staging.stage(b"pixels", "me.jpg", UploadSessionId.generate(), tmp_dir)
        thumb = staging.derive(original, "thumb")

        assert thumb.path.parent == original.path.parent
        assert thumb.path.name == "thumb.jpg"
        assert thumb.read_bytes() == b"pixels"
        assert thumb.session_id == original.session_id

    def test_discard_is_idempotent(self, staging, tmp_dir):
        """Test that discarding twice is fine."""
        staged = staging.stage(b"x", "a.txt", UploadSessionId.generate(), tmp_dir)
        assert staging.discard(staged) is True
        assert staging.discard(staged) is False
        assert not staged.exists()

    def test_discard_session(self, staging, tmp_dir):
        """Test removing the whole session directory."""
        session_id = UploadSessionId.generate()
        original = staging.stage(b"x", "a.txt", session_id, tmp_dir)
        staging.derive(original, "copy")

        assert staging.discard_session(tmp_dir, session_id) is True
        assert not staging.session_dir(tmp_dir, session_id).exists()
        assert staging.discard_session(tmp_dir, session_id) is False

    def test_restore(self, staging, tmp_dir):
        """Test finding the files of an earlier session."""
        session_id = UploadSessionId.generate()
        original = staging.stage(b"x", "a.jpg", session_id, tmp_dir)
        staging.derive(original, "thumb")

        restored = staging.restore(tmp_dir, session_id, "a.jpg", ["original", "thumb"])
        assert set(restored) == {"original", "thumb"}
        assert restored["thumb"].path.name == "thumb.jpg"

    def test_restore_missing_version(self, staging, tmp_dir):
        """Test that a missing version means nothing can be restored."""
        session_id = UploadSessionId.generate()
        staging.stage(b"x", "a.jpg", session_id, tmp_dir)
        assert staging.restore(tmp_dir, session_id, "a.jpg", ["original", "thumb"]) is None
