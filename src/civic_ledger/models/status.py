"""Issue lifecycle status and its ordinal/display codec."""

from __future__ import annotations

from enum import IntEnum

import structlog

from ..utils.errors import UnknownStatusError

log = structlog.get_logger()


class IssueStatus(IntEnum):
    """Lifecycle stage of an issue.

    The integer value is the contract's wire representation and must never
    be renumbered. ``display`` is the human-facing name.
    """

    REPORTED = 0
    UNDER_REVIEW = 1
    IN_PROGRESS = 2
    RESOLVED = 3
    REJECTED = 4
    CONFIRMED = 5

    @property
    def display(self) -> str:
        """Return the display name shown to users."""
        return _DISPLAY_NAMES[self]

    @property
    def is_terminal(self) -> bool:
        """Return True for absorbing states (Rejected, Confirmed)."""
        return self in TERMINAL_STATUSES

    @classmethod
    def from_ordinal(cls, ordinal: int) -> IssueStatus:
        """Strictly decode a contract ordinal.

        Raises:
            UnknownStatusError: If the ordinal is not in 0-5.
        """
        try:
            return cls(ordinal)
        except ValueError as e:
            raise UnknownStatusError(f"Unknown status ordinal: {ordinal}") from e

    @classmethod
    def from_display(cls, name: str) -> IssueStatus:
        """Strictly decode a display name such as ``"Under Review"``.

        Raises:
            UnknownStatusError: If the name is not a known display name.
        """
        status = _BY_DISPLAY.get(name)
        if status is None:
            raise UnknownStatusError(f"Unknown status name: {name!r}")
        return status

    def __str__(self) -> str:
        return self.display


_DISPLAY_NAMES: dict[IssueStatus, str] = {
    IssueStatus.REPORTED: "Reported",
    IssueStatus.UNDER_REVIEW: "Under Review",
    IssueStatus.IN_PROGRESS: "In Progress",
    IssueStatus.RESOLVED: "Resolved",
    IssueStatus.REJECTED: "Rejected",
    IssueStatus.CONFIRMED: "Confirmed",
}

_BY_DISPLAY: dict[str, IssueStatus] = {name: status for status, name in _DISPLAY_NAMES.items()}

TERMINAL_STATUSES = frozenset({IssueStatus.REJECTED, IssueStatus.CONFIRMED})


def to_display(ordinal: int, strict: bool = False) -> IssueStatus:
    """Map a contract ordinal to a status.

    Unknown ordinals fall back to ``REPORTED`` unless ``strict`` is set.

    Args:
        ordinal: Status integer read from the contract.
        strict: Raise instead of falling back.

    Returns:
        The matching status.

    Raises:
        UnknownStatusError: If ``strict`` and the ordinal is out of range.
    """
    try:
        return IssueStatus.from_ordinal(ordinal)
    except UnknownStatusError:
        if strict:
            raise
        log.warning("unknown_status_ordinal", ordinal=ordinal, fallback="Reported")
        return IssueStatus.REPORTED


def to_ordinal(status: IssueStatus) -> int:
    """Map a status to the integer the contract expects."""
    return int(status)
