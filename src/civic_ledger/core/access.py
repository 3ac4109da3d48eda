"""Admin allow-list gate.

This is a presentation gate only: it hides admin actions from other
addresses and stops them locally. The contract enforces authorization
independently.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from ..models.status import IssueStatus
from ..utils.errors import NotAuthorizedError, WalletNotConnectedError
from ..utils.logging import LogEventNames

log = structlog.get_logger()


class AdminRegistry:
    """Case-insensitive admin address allow-list."""

    def __init__(self, addresses: Iterable[str]) -> None:
        self._addresses = frozenset(a.lower() for a in addresses)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.lower() in self._addresses

    def is_admin(self, address: str | None) -> bool:
        """Return True if ``address`` is on the allow-list."""
        return address is not None and address in self

    def require_admin(self, address: str | None, action: str) -> str:
        """Return ``address`` if it may perform an admin action.

        Raises:
            WalletNotConnectedError: If no address is given.
            NotAuthorizedError: If the address is not an admin.
        """
        if not address:
            raise WalletNotConnectedError("Please connect your wallet")
        if not self.is_admin(address):
            log.warning(LogEventNames.ACTION_BLOCKED, action=action, reason="not_admin")
            raise NotAuthorizedError(f"Only admins can {action}")
        return address

    def can_change_status(self, address: str | None, status: IssueStatus) -> bool:
        """Return True if the change-status control should be offered."""
        return self.is_admin(address) and status != IssueStatus.CONFIRMED
