"""Tests for the metadata mirror."""

from unittest.mock import AsyncMock

import pytest

from civic_ledger.core.mirror import MetadataMirror
from civic_ledger.models.snapshot import StatusSnapshot
from civic_ledger.utils.errors import MirrorError


def _snapshot() -> StatusSnapshot:
    return StatusSnapshot(issue_id=1, status="Resolved", updated_by="0xabc")


class TestPublish:
    """Test best-effort snapshot publishing."""

    async def test_publish_returns_cid(self, store) -> None:
        """Test a successful upload."""
        outcome = await MetadataMirror(store).publish(_snapshot(), name="issue-1-status")
        assert outcome.cid == "QmCid0"
        assert store.documents[0][1] == "issue-1-status"

    async def test_publish_never_raises(self, store) -> None:
        """Test failures become warnings."""
        store.fail = True
        outcome = await MetadataMirror(store).publish(_snapshot())
        assert outcome.cid is None
        assert "Metadata upload failed" in outcome.warning

    async def test_unexpected_errors_are_isolated(self) -> None:
        """Test non-mirror exceptions from a store are also contained."""
        store = AsyncMock()
        store.upload_json.side_effect = RuntimeError("connection reset")
        outcome = await MetadataMirror(store).publish(_snapshot())
        assert "connection reset" in outcome.warning

    async def test_each_publish_is_a_new_document(self, store) -> None:
        """Test snapshots are appended, never replaced."""
        mirror = MetadataMirror(store)
        first = await mirror.publish(_snapshot())
        second = await mirror.publish(_snapshot())
        assert first.cid != second.cid
        assert len(store.documents) == 2

    async def test_pin_raises(self, store) -> None:
        """Test the strict variant propagates failures."""
        store.fail = True
        with pytest.raises(MirrorError):
            await MetadataMirror(store).pin(_snapshot())


class TestBackgroundMode:
    """Test backgrounded uploads."""

    async def test_publish_returns_pending_then_drains(self, store) -> None:
        """Test uploads are scheduled and collected by drain."""
        mirror = MetadataMirror(store, background=True)
        outcome = await mirror.publish(_snapshot())
        assert outcome.pending

        results = await mirror.drain()

        assert [r.cid for r in results] == ["QmCid0"]
        assert mirror.pending == 0

    async def test_background_failure_is_logged_not_raised(self, store) -> None:
        """Test failed background uploads surface only through drain."""
        store.fail = True
        mirror = MetadataMirror(store, background=True)
        await mirror.publish(_snapshot())
        results = await mirror.drain()
        assert results[0].warning is not None

    async def test_drain_with_nothing_pending(self, store) -> None:
        """Test drain is a no-op when idle."""
        assert await MetadataMirror(store, background=True).drain() == []


class TestUploadIssue:
    """Test the pre-report upload."""

    async def test_uploads_photo_then_metadata(self, store) -> None:
        """Test the metadata references the photo CID."""
        upload = await MetadataMirror(store).upload_issue(
            "pothole.jpg", b"jpeg", "image/jpeg", "Elm St", "Pothole", "0xabc"
        )
        assert upload.image_hash == "QmCid0"
        assert upload.metadata_hash == "QmCid1"
        document, name = store.documents[0]
        assert document["imageHash"] == "QmCid0"
        assert name == "issue-QmCid0"

    async def test_failure_raises(self, store) -> None:
        """Test the pre-report upload is not best-effort."""
        store.fail = True
        with pytest.raises(MirrorError):
            await MetadataMirror(store).upload_issue(
                "pothole.jpg", b"jpeg", "image/jpeg", "Elm St", "Pothole", "0xabc"
            )
