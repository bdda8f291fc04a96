"""Tests for the upload session state machine and version sets."""

from pathlib import Path

import pytest

from neo_attachments import (
    InvalidStateError,
    ValidationError,
    VersionSet,
    image_column,
)
from neo_attachments.core.entities import CommittedFile, StagedFile, UploadSession, UploadState
from neo_attachments.core.value_objects import RecordIdentity, RelativePath


@pytest.fixture
def attribute():
    return image_column("picture", versions={"thumb": "10x10"})


@pytest.fixture
def session(attribute):
    return UploadSession(
        attribute=attribute,
        record_identity=RecordIdentity("User", 1),
        original_filename="me.jpg"
    )


def staged_for(session, version):
    relative_path = RelativePath.parse(f"tmp/{session.id}/{version}.jpg")
    return StagedFile(
        path=Path("/nonexistent") / relative_path.as_posix(),
        relative_path=relative_path,
        version_name=version,
        session_id=session.id,
        original_filename=session.original_filename
    )


def committed_set(session):
    entries = {
        name: CommittedFile(name, RelativePath.parse(f"user/{name}/me.jpg"), Path(f"/srv/{name}/me.jpg"))
        for name in session.attribute.version_names
    }
    return VersionSet(entries, session.attribute.version_names)


class TestUploadSession:
    """Test cases for UploadSession transitions."""

    def test_starts_empty(self, session):
        """Test the initial state."""
        assert session.state is UploadState.EMPTY
        assert not session.is_pending
        assert session.temp_value is None

    def test_happy_path(self, session):
        """Test EMPTY -> STAGED -> VALIDATED -> TRANSFORMED -> COMMITTED -> REMOVED."""
        session.mark_staged(staged_for(session, "original"), RelativePath.parse("tmp"))
        assert session.state is UploadState.STAGED and session.is_pending

        session.mark_validated()
        session.put_staged(staged_for(session, "thumb"))
        session.mark_transformed()
        assert session.temp_value == f"{session.id}/me.jpg"
        assert session.staged_versions().names == ("original", "thumb")

        session.mark_committed(committed_set(session), RecordIdentity("User", 1), "me.jpg")
        assert session.is_committed
        assert session.staged == {}
        assert session.temp_value is None

        session.mark_removed()
        assert session.state is UploadState.REMOVED

    def test_out_of_order_transition(self, session):
        """Test that skipping a state raises InvalidStateError."""
        with pytest.raises(InvalidStateError) as exc_info:
            session.mark_validated()
        assert exc_info.value.current_state == "empty"
        assert exc_info.value.requested_state == "validated"

    def test_transformed_requires_every_version(self, session):
        """Test that a missing derived version blocks the transition."""
        session.mark_staged(staged_for(session, "original"), RelativePath.parse("tmp"))
        session.mark_validated()
        with pytest.raises(InvalidStateError):
            session.mark_transformed()

    def test_fail_from_pending(self, session):
        """Test failing a staged session keeps the error."""
        session.mark_staged(staged_for(session, "original"), RelativePath.parse("tmp"))
        error = ValidationError("too big", attribute_name="picture")
        session.fail(error)

        assert session.state is UploadState.FAILED
        assert session.error is error
        assert session.failure_reason == "too big"

    def test_failed_is_terminal(self, session):
        """Test that nothing leaves FAILED."""
        session.fail(reason="abandoned")
        with pytest.raises(InvalidStateError):
            session.mark_staged(staged_for(session, "original"), RelativePath.parse("tmp"))

    def test_committed_cannot_fail(self, session):
        """Test that a committed session cannot go to FAILED."""
        session.mark_staged(staged_for(session, "original"), RelativePath.parse("tmp"))
        session.mark_validated()
        session.put_staged(staged_for(session, "thumb"))
        session.mark_transformed()
        session.mark_committed(committed_set(session), RecordIdentity("User", 1), "me.jpg")
        with pytest.raises(InvalidStateError):
            session.fail(reason="late")

    def test_staged_file_from_other_session(self, session, attribute):
        """Test that staged files must belong to the session."""
        other = UploadSession(attribute=attribute, record_identity=RecordIdentity("User", 1), original_filename="x.jpg")
        with pytest.raises(ValueError):
            session.put_staged(staged_for(other, "thumb"))

    def test_effective_extension(self, session):
        """Test the extension override used by extension fixing."""
        assert session.effective_extension == "jpg"
        session.fixed_extension = "png"
        assert session.effective_extension == "png"
        assert session.original_basename == "me"

    def test_stored_extension_keeps_case(self, attribute):
        """Test that the stored extension keeps the uploaded case unless fixed."""
        session = UploadSession(attribute=attribute, record_identity=RecordIdentity("User", 1), original_filename="Me.JPG")
        assert session.effective_extension == "jpg"
        assert session.stored_extension == "JPG"
        session.fixed_extension = "png"
        assert session.stored_extension == "png"
        assert UploadSession(
            attribute=attribute, record_identity=RecordIdentity("User", 1), original_filename="README"
        ).stored_extension == ""

    def test_summary(self, session):
        """Test the log-friendly summary."""
        summary = session.get_summary()
        assert summary["state"] == "empty"
        assert summary["attribute"] == "picture"


class TestVersionSet:
    """Test cases for VersionSet."""

    def test_requires_original(self):
        """Test that 'original' must be declared."""
        with pytest.raises(ValueError):
            VersionSet({"thumb": 1}, ["thumb"])

    def test_requires_exact_entries(self):
        """Test that entries must match the declared names."""
        with pytest.raises(ValueError):
            VersionSet({"original": 1}, ["original", "thumb"])
        with pytest.raises(ValueError):
            VersionSet({"original": 1, "extra": 2}, ["original"])

    def test_mapping_behaviour(self):
        """Test ordered iteration, lookup and map."""
        versions = VersionSet({"thumb": 2, "original": 1}, ["original", "thumb"])

        assert list(versions) == ["original", "thumb"]
        assert versions.original == 1
        assert versions["thumb"] == 2
        assert len(versions) == 2
        assert dict(versions.map(lambda value: value * 10)) == {"original": 10, "thumb": 20}
