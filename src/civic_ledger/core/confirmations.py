"""Community confirmation tracking for resolved issues.

Confirmation is advisory: reaching the quorum marks an issue as verified
for display and fires an optional callback, but never changes its status.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from ..models.status import IssueStatus
from ..utils.errors import AlreadyConfirmedError

log = structlog.get_logger()

DEFAULT_QUORUM = 3


class ConfirmationTracker:
    """Counts distinct confirmations of one issue.

    Example:
        tracker = ConfirmationTracker(issue_id=7, on_verified=notify)
        tracker.load(count=2)
        tracker.record("0xabc...")  # count reaches 3, notify(7) is called
    """

    def __init__(
        self,
        issue_id: int,
        quorum: int = DEFAULT_QUORUM,
        on_verified: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            issue_id: Issue being tracked.
            quorum: Confirmations needed for the issue to count as verified.
            on_verified: Called with the issue id when the quorum is reached.
        """
        if quorum < 1:
            raise ValueError("Quorum must be at least 1")
        self.issue_id = issue_id
        self.quorum = quorum
        self._on_verified = on_verified
        self._count = 0
        self._confirmers: set[str] = set()
        self._fired = False

    @property
    def count(self) -> int:
        return self._count

    @property
    def verified(self) -> bool:
        """Return True once the quorum has been reached."""
        return self._count >= self.quorum

    def load(self, count: int, confirmed_by: Iterable[str] = ()) -> None:
        """Seed the tracker from values read off the contract.

        An issue that is already at quorum when loaded never fires the
        callback.
        """
        self._count = count
        self._confirmers = {a.lower() for a in confirmed_by}
        self._fired = self.verified

    def has_confirmed(self, address: str) -> bool:
        return address.lower() in self._confirmers

    def can_confirm(
        self,
        status: IssueStatus,
        address: str | None,
        is_admin: bool,
        already_confirmed: bool = False,
    ) -> bool:
        """Return True if the confirm control should be offered to ``address``."""
        if status != IssueStatus.RESOLVED or not address or is_admin:
            return False
        return not (already_confirmed or self.has_confirmed(address))

    def record(self, address: str) -> bool:
        """Count a mined confirmation from ``address``.

        Returns:
            True if this confirmation reached the quorum.

        Raises:
            AlreadyConfirmedError: If ``address`` was already counted.
        """
        if self.has_confirmed(address):
            raise AlreadyConfirmedError("You have already confirmed this issue")

        self._confirmers.add(address.lower())
        self._count += 1

        if not self.verified or self._fired:
            return False

        self._fired = True
        log.info("issue_verified", issue_id=self.issue_id, confirmations=self._count)
        if self._on_verified is not None:
            self._on_verified(self.issue_id)
        return True
