"""Metadata documents pinned to content-addressed storage.

Each model serializes with camelCase keys so that documents written here
match those written by the browser client.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(UTC)


class Snapshot(BaseModel):
    """Base class for pinned JSON documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-ready document with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class IssueMetadata(Snapshot):
    """Metadata pinned alongside an issue photo at report time."""

    location: str
    description: str
    reporter: str
    image_hash: str
    timestamp: datetime = Field(default_factory=_now)


class StatusSnapshot(Snapshot):
    """A status change made by an admin."""

    issue_id: int
    image_hash: str | None = None
    status: str
    updated_by: str
    updated_at: datetime = Field(default_factory=_now)
    type: Literal["status_update"] = "status_update"


class FundingSnapshot(Snapshot):
    """A fund or withdraw action with the authoritative totals after it."""

    issue_id: int
    action: Literal["fund", "withdraw"]
    amount: int
    user_address: str
    total_funding: int | None = None
    funds_used: int | None = None
    available: int | None = None
    timestamp: datetime = Field(default_factory=_now)
    type: Literal["funding_update"] = "funding_update"


class ConfirmationSnapshot(Snapshot):
    """A community confirmation of a resolved issue."""

    issue_id: int
    image_hash: str | None = None
    confirmed_by: str
    confirmation_count: int
    confirmed_at: datetime = Field(default_factory=_now)
    type: Literal["confirmation"] = "confirmation"


@dataclass(frozen=True)
class IssueUpload:
    """Content hashes produced by uploading a new issue."""

    image_hash: str
    metadata_hash: str


@dataclass(frozen=True)
class MirrorOutcome:
    """Result of a best-effort snapshot upload.

    Exactly one of ``cid`` and ``warning`` is set, unless the upload was
    scheduled in the background, in which case both are None and
    ``pending`` is True.
    """

    cid: str | None = None
    warning: str | None = None
    pending: bool = False

    @property
    def ok(self) -> bool:
        return self.cid is not None
