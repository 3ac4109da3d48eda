"""Issue Reader: enumerates contract issues into normalized records.

Issues are read by sequential id from 1 to the contract's issue count.
Count and base-record failures abort the listing; funding failures only
degrade the affected record.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING

import structlog

from ..models.issue import ConfirmationState, Issue, IssueFunding, RawIssue
from ..models.status import to_display
from ..utils.errors import ChainCallError
from ..utils.logging import LogEventNames

if TYPE_CHECKING:
    from ..interfaces.contract import ContractGateway

log = structlog.get_logger()


class IssueReader:
    """Read-side projection of contract state.

    Example:
        reader = IssueReader(gateway)
        issues = await reader.list_all_issues(include_funding=True)
    """

    def __init__(self, gateway: ContractGateway, strict_status: bool = False) -> None:
        """Initialize the reader.

        Args:
            gateway: Contract gateway to read from.
            strict_status: Raise on unknown status ordinals instead of
                falling back to Reported.
        """
        self._gateway = gateway
        self._strict_status = strict_status

    def _normalize(self, raw: RawIssue, funding: IssueFunding | None = None) -> Issue:
        return Issue(
            id=raw.id,
            reporter=raw.reporter,
            location=raw.location,
            description=raw.description,
            image_hash=raw.image_hash,
            status=to_display(raw.status, strict=self._strict_status),
            timestamp=raw.timestamp,
            funding=funding or IssueFunding(),
        )

    async def issue_count(self) -> int:
        return await self._gateway.issue_count()

    async def get_issue(self, issue_id: int, include_funding: bool = False) -> Issue:
        """Read one issue, optionally with its authoritative funding."""
        issue = self._normalize(await self._gateway.get_issue(issue_id))
        if include_funding:
            issue = replace(issue, funding=await self.get_funding(issue_id))
        return issue

    async def get_funding(self, issue_id: int) -> IssueFunding:
        """Read authoritative funding totals for one issue."""
        total, used, available = await self._gateway.get_issue_funding(issue_id)
        return IssueFunding.from_contract(total, used, available)

    async def get_user_funding(self, issue_id: int, address: str) -> int:
        """Read how much ``address`` has contributed to an issue."""
        return await self._gateway.get_user_funding(issue_id, address)

    async def load_confirmations(self, issue_id: int, address: str | None = None) -> ConfirmationState:
        """Read the confirmation count and whether ``address`` has confirmed."""
        count = await self._gateway.get_confirmation_count(issue_id)
        has_confirmed = False
        if address:
            has_confirmed = await self._gateway.has_user_confirmed(issue_id, address)
        return ConfirmationState(count=count, has_confirmed=has_confirmed)

    async def _with_funding(self, issue: Issue) -> Issue:
        try:
            funding = await self.get_funding(issue.id)
        except (ChainCallError, ValueError) as e:
            log.warning(LogEventNames.FUNDING_FETCH_FAILED, issue_id=issue.id, error=str(e))
            return issue
        return replace(issue, funding=funding)

    async def list_all_issues(self, include_funding: bool = False) -> list[Issue]:
        """Read every issue in id order.

        Args:
            include_funding: Join each record with its funding totals. A
                failed funding read leaves that record's funding at zero.

        Returns:
            Issues with ids 1..count, in order.

        Raises:
            ContractNotDeployedError: If the network has no contract code.
            ChainCallError: If the count or any base record cannot be read.
        """
        count = await self._gateway.issue_count()
        if count <= 0:
            log.info(LogEventNames.ISSUES_LISTED, count=0)
            return []

        issues = [
            self._normalize(await self._gateway.get_issue(issue_id))
            for issue_id in range(1, count + 1)
        ]

        if include_funding:
            # gather preserves argument order
            issues = list(await asyncio.gather(*(self._with_funding(i) for i in issues)))

        log.info(LogEventNames.ISSUES_LISTED, count=len(issues), with_funding=include_funding)
        return issues
