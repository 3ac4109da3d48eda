"""Metadata Mirror: pins issue photos and post-action snapshots.

Snapshot uploads are best-effort. They run only after the chain action
they describe has been mined, and a failure is returned as a warning
instead of being raised. The photo and metadata upload that precedes a
report is the exception: the report cannot proceed without its hashes.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ..models.snapshot import IssueMetadata, IssueUpload, MirrorOutcome, Snapshot
from ..utils.logging import LogEventNames

if TYPE_CHECKING:
    from ..interfaces.mirror import MetadataStore

log = structlog.get_logger()


class MetadataMirror:
    """Writes documents to a MetadataStore on behalf of issue actions.

    With ``background`` set, ``publish`` schedules the upload as a task and
    returns immediately; ``drain`` waits for all scheduled uploads.
    """

    def __init__(self, store: MetadataStore, background: bool = False) -> None:
        self._store = store
        self._background = background
        self._tasks: set[asyncio.Task[MirrorOutcome]] = set()

    @property
    def pending(self) -> int:
        """Return the number of scheduled uploads not yet finished."""
        return len(self._tasks)

    async def upload_issue(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        location: str,
        description: str,
        reporter: str,
    ) -> IssueUpload:
        """Pin an issue photo and its metadata document.

        Returns:
            The photo and metadata CIDs.

        Raises:
            MirrorError: If either upload fails.
        """
        image_hash = await self._store.upload_file(filename, content, content_type)

        metadata = IssueMetadata(
            location=location,
            description=description,
            reporter=reporter,
            image_hash=image_hash,
        )
        metadata_hash = await self._store.upload_json(metadata.to_document(), name=f"issue-{image_hash}")

        return IssueUpload(image_hash=image_hash, metadata_hash=metadata_hash)

    async def pin(self, snapshot: Snapshot, name: str | None = None) -> str:
        """Pin a snapshot and return its CID.

        Raises:
            MirrorError: If the upload fails.
        """
        return await self._store.upload_json(snapshot.to_document(), name=name)

    async def _upload(self, snapshot: Snapshot, name: str | None) -> MirrorOutcome:
        try:
            cid = await self.pin(snapshot, name)
        except Exception as e:
            log.warning(
                LogEventNames.MIRROR_FAILED,
                snapshot=type(snapshot).__name__,
                error=str(e),
            )
            return MirrorOutcome(warning=f"Metadata upload failed: {e}")
        return MirrorOutcome(cid=cid)

    async def publish(self, snapshot: Snapshot, name: str | None = None) -> MirrorOutcome:
        """Pin a snapshot without ever raising.

        Returns:
            The CID on success, a warning on failure, or a pending marker
            when running in background mode.
        """
        if not self._background:
            return await self._upload(snapshot, name)

        task = asyncio.create_task(self._upload(snapshot, name), name=f"mirror_{name or 'snapshot'}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return MirrorOutcome(pending=True)

    async def drain(self) -> list[MirrorOutcome]:
        """Wait for all background uploads and return their outcomes."""
        if not self._tasks:
            return []
        return list(await asyncio.gather(*self._tasks))

    def gateway_url(self, cid: str) -> str:
        return self._store.gateway_url(cid)
