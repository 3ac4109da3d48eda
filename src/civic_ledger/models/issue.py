"""Data models for civic issues, funding and transactions."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from .status import IssueStatus

log = structlog.get_logger()


@dataclass(frozen=True)
class IssueFunding:
    """Funding ledger totals for one issue."""

    total: int = 0
    used: int = 0

    def __post_init__(self) -> None:
        if self.total < 0 or self.used < 0:
            raise ValueError("Funding amounts cannot be negative")
        if self.used > self.total:
            raise ValueError(f"Funds used ({self.used}) exceed total funding ({self.total})")

    @property
    def available(self) -> int:
        """Return funds that can still be withdrawn."""
        return self.total - self.used

    @classmethod
    def from_contract(cls, total: int, used: int, available: int) -> IssueFunding:
        """Build funding from a ``getIssueFunding`` tuple.

        ``available`` is always derived locally; a disagreeing contract value
        is logged and ignored.
        """
        funding = cls(total=int(total), used=int(used))
        if int(available) != funding.available:
            log.warning(
                "funding_available_mismatch",
                total=funding.total,
                used=funding.used,
                reported_available=int(available),
            )
        return funding


@dataclass(frozen=True)
class RawIssue:
    """An issue exactly as ``getIssue`` returns it."""

    id: int
    reporter: str
    location: str
    description: str
    image_hash: str
    status: int
    timestamp: int


@dataclass(frozen=True)
class Issue:
    """A reported civic problem, normalized for display."""

    id: int
    reporter: str
    location: str
    description: str
    image_hash: str
    status: IssueStatus
    timestamp: int
    funding: IssueFunding = field(default_factory=IssueFunding)

    @property
    def total_funding(self) -> int:
        return self.funding.total

    @property
    def funds_used(self) -> int:
        return self.funding.used

    @property
    def available_funds(self) -> int:
        return self.funding.available

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "reporter": self.reporter,
            "location": self.location,
            "description": self.description,
            "imageHash": self.image_hash,
            "status": self.status.display,
            "timestamp": self.timestamp,
            "totalFunding": self.total_funding,
            "fundsUsed": self.funds_used,
            "availableFunds": self.available_funds,
        }


@dataclass(frozen=True)
class PendingFunding:
    """Optimistic funding projection shown while a transaction is in flight.

    It is never merged into the confirmed model; ``reconcile`` discards it in
    favour of the authoritative re-read.
    """

    confirmed: IssueFunding
    delta_total: int = 0
    delta_used: int = 0

    @property
    def projected(self) -> IssueFunding:
        return IssueFunding(
            total=self.confirmed.total + self.delta_total,
            used=self.confirmed.used + self.delta_used,
        )

    @classmethod
    def for_fund(cls, confirmed: IssueFunding, amount: int) -> PendingFunding:
        return cls(confirmed=confirmed, delta_total=amount)

    @classmethod
    def for_withdraw(cls, confirmed: IssueFunding, amount: int) -> PendingFunding:
        return cls(confirmed=confirmed, delta_used=amount)

    def reconcile(self, authoritative: IssueFunding) -> IssueFunding:
        """Replace the projection with the value read back from the contract."""
        if authoritative != self.projected:
            log.info(
                "pending_funding_diverged",
                projected_total=self.projected.total,
                projected_used=self.projected.used,
                total=authoritative.total,
                used=authoritative.used,
            )
        return authoritative


@dataclass(frozen=True)
class TxReceipt:
    """A mined transaction."""

    tx_hash: str
    block_number: int
    issue_id: int | None = None  # Only set for reports with a decoded event


@dataclass(frozen=True)
class ConfirmationState:
    """Confirmation data for one issue as seen by one address."""

    count: int
    has_confirmed: bool
