"""Issue Actions: validated, mirrored state changes against the contract.

Every action follows the same pipeline:
1. Local preconditions (connection, admin gate, amounts, fields) are
   checked before any network call.
2. One contract transaction is sent and awaited until mined.
3. Funding actions re-read authoritative totals from the contract.
4. A snapshot of the change is published to the metadata mirror.

Steps 1-2 raise on failure. Steps 3-4 happen after the chain action has
succeeded, so their failures are returned as warnings on the result.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from ..models.issue import Issue, IssueFunding, PendingFunding, TxReceipt
from ..models.snapshot import (
    ConfirmationSnapshot,
    FundingSnapshot,
    IssueUpload,
    MirrorOutcome,
    StatusSnapshot,
)
from ..models.status import IssueStatus, to_ordinal
from ..utils.errors import (
    ActionValidationError,
    AlreadyConfirmedError,
    ChainCallError,
    InsufficientFundsError,
    NotAuthorizedError,
    WalletNotConnectedError,
)
from ..utils.logging import LogEventNames
from .confirmations import DEFAULT_QUORUM, ConfirmationTracker

if TYPE_CHECKING:
    from ..interfaces.contract import ContractGateway
    from .access import AdminRegistry
    from .mirror import MetadataMirror
    from .reader import IssueReader

log = structlog.get_logger()

# Statuses in which an issue no longer accepts funding
_UNFUNDABLE = frozenset({IssueStatus.REJECTED, IssueStatus.CONFIRMED})


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a mined action.

    Attributes:
        receipt: The mined transaction.
        mirror: Outcome of the metadata snapshot upload.
        funding: Authoritative funding after a fund or withdraw, if re-read.
        pending: Optimistic funding shown while the transaction was in flight.
        upload: Photo and metadata hashes for a report.
        verified: True if this confirmation reached the quorum.
        warnings: Non-fatal problems that occurred after the chain action.
    """

    receipt: TxReceipt
    mirror: MirrorOutcome = field(default_factory=MirrorOutcome)
    funding: IssueFunding | None = None
    pending: PendingFunding | None = None
    upload: IssueUpload | None = None
    verified: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def metadata_cid(self) -> str | None:
        return self.mirror.cid

    @property
    def all_warnings(self) -> list[str]:
        """Return post-action warnings including the mirror warning."""
        warnings = list(self.warnings)
        if self.mirror.warning:
            warnings.append(self.mirror.warning)
        return warnings


def _require_positive_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ActionValidationError("Please enter a valid amount")
    return amount


class IssueActions:
    """Orchestrates the state-changing operations on issues.

    Example:
        actions = IssueActions(gateway, reader, mirror, admins)
        result = await actions.fund(issue, 100)
        for warning in result.all_warnings:
            print(warning)
    """

    def __init__(
        self,
        gateway: ContractGateway,
        reader: IssueReader,
        mirror: MetadataMirror,
        admins: AdminRegistry,
        quorum: int = DEFAULT_QUORUM,
        on_verified: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize the actions.

        Args:
            gateway: Contract gateway bound to the signing account.
            reader: Reader used for authoritative re-reads.
            mirror: Mirror for post-action snapshots.
            admins: Admin allow-list.
            quorum: Confirmations needed for an issue to count as verified.
            on_verified: Called with the issue id when an issue reaches the
                quorum through a confirmation sent from this client.
        """
        self._gateway = gateway
        self._reader = reader
        self._mirror = mirror
        self._admins = admins
        self._quorum = quorum
        self._on_verified = on_verified
        self._trackers: dict[int, ConfirmationTracker] = {}

    @property
    def account(self) -> str | None:
        return self._gateway.account

    @property
    def is_admin(self) -> bool:
        return self._admins.is_admin(self.account)

    def _require_account(self) -> str:
        account = self.account
        if not account:
            raise WalletNotConnectedError("Please connect your wallet")
        return account

    # -------------------------------------------------------------------------
    # Offer rules
    # -------------------------------------------------------------------------

    def can_fund(self, issue: Issue) -> bool:
        """Return True if the fund control should be offered."""
        return bool(self.account) and not self.is_admin and issue.status not in _UNFUNDABLE

    def can_withdraw(self, issue: Issue) -> bool:
        return self.is_admin and issue.available_funds > 0

    def can_change_status(self, issue: Issue) -> bool:
        return self._admins.can_change_status(self.account, issue.status)

    def can_confirm(self, issue: Issue, already_confirmed: bool = False) -> bool:
        """Return True if the confirm control should be offered."""
        return self.tracker(issue.id).can_confirm(
            issue.status, self.account, self.is_admin, already_confirmed
        )

    def tracker(self, issue_id: int) -> ConfirmationTracker:
        """Return the confirmation tracker for an issue, creating it if needed."""
        tracker = self._trackers.get(issue_id)
        if tracker is None:
            tracker = ConfirmationTracker(issue_id, self._quorum, self._on_verified)
            self._trackers[issue_id] = tracker
        return tracker

    async def load_confirmations(self, issue_id: int) -> ConfirmationTracker:
        """Seed the issue's tracker from the contract."""
        account = self.account
        state = await self._reader.load_confirmations(issue_id, account)
        tracker = self.tracker(issue_id)
        tracker.load(state.count, [account] if account and state.has_confirmed else [])
        return tracker

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def report_issue(
        self,
        location: str,
        description: str,
        image: bytes | None,
        filename: str = "issue.jpg",
        content_type: str = "image/jpeg",
    ) -> ActionResult:
        """Upload the photo and metadata, then report the issue on-chain.

        Raises:
            ActionValidationError: If location, description or image is empty.
            WalletNotConnectedError: If no signing account is available.
            MirrorError: If the photo or metadata upload fails.
            ChainCallError: If the transaction fails or is rejected.
        """
        location = (location or "").strip()
        description = (description or "").strip()
        if not location or not description or not image:
            raise ActionValidationError("Please fill in all fields and upload an image")
        reporter = self._require_account()

        upload = await self._mirror.upload_issue(
            filename, image, content_type, location, description, reporter
        )
        receipt = await self._gateway.report_issue(location, description, upload.image_hash)

        log.info(
            LogEventNames.ISSUE_REPORTED,
            issue_id=receipt.issue_id,
            tx_hash=receipt.tx_hash,
            image_hash=upload.image_hash,
        )
        return ActionResult(
            receipt=receipt,
            mirror=MirrorOutcome(cid=upload.metadata_hash),
            upload=upload,
        )

    async def update_status(self, issue: Issue, new_status: IssueStatus) -> ActionResult:
        """Move an issue to ``new_status`` as an admin.

        Source-to-target legality is left to the contract; only the admin
        gate and the confirmed-issue guard are applied here.

        Raises:
            NotAuthorizedError: If the account is not an admin.
            ActionValidationError: If the issue is already confirmed.
        """
        account = self._admins.require_admin(self.account, "update issue status")
        if issue.status == IssueStatus.CONFIRMED:
            log.warning(LogEventNames.ACTION_BLOCKED, issue_id=issue.id, reason="confirmed")
            raise ActionValidationError("Confirmed issues cannot change status")

        receipt = await self._gateway.update_issue_status(issue.id, to_ordinal(new_status))
        log.info(
            LogEventNames.STATUS_UPDATED,
            issue_id=issue.id,
            status=new_status.display,
            tx_hash=receipt.tx_hash,
        )

        outcome = await self._mirror.publish(
            StatusSnapshot(
                issue_id=issue.id,
                image_hash=issue.image_hash,
                status=new_status.display,
                updated_by=account,
            ),
            name=f"issue-{issue.id}-status",
        )
        return ActionResult(receipt=receipt, mirror=outcome)

    async def confirm_issue(self, issue: Issue) -> ActionResult:
        """Confirm a resolved issue from a non-admin account.

        Raises:
            WalletNotConnectedError: If no signing account is available.
            NotAuthorizedError: If the account is an admin.
            ActionValidationError: If the issue is not resolved.
            AlreadyConfirmedError: If the account already confirmed.
        """
        account = self._require_account()
        if self.is_admin:
            raise NotAuthorizedError("Admins cannot confirm issues")
        if issue.status != IssueStatus.RESOLVED:
            raise ActionValidationError("Only resolved issues can be confirmed")

        tracker = await self.load_confirmations(issue.id)
        if tracker.has_confirmed(account):
            raise AlreadyConfirmedError("You have already confirmed this issue")

        receipt = await self._gateway.confirm_issue(issue.id)
        verified = tracker.record(account)
        log.info(
            LogEventNames.ISSUE_CONFIRMED,
            issue_id=issue.id,
            confirmations=tracker.count,
            verified=tracker.verified,
        )

        outcome = await self._mirror.publish(
            ConfirmationSnapshot(
                issue_id=issue.id,
                image_hash=issue.image_hash,
                confirmed_by=account,
                confirmation_count=tracker.count,
            ),
            name=f"issue-{issue.id}-confirmation",
        )
        return ActionResult(receipt=receipt, mirror=outcome, verified=verified)

    async def fund(self, issue: Issue, amount: int) -> ActionResult:
        """Contribute ``amount`` tokens to an issue.

        Raises:
            WalletNotConnectedError: If no signing account is available.
            ActionValidationError: If ``amount`` is not a positive integer.
        """
        account = self._require_account()
        _require_positive_amount(amount)

        pending = PendingFunding.for_fund(issue.funding, amount)
        receipt = await self._gateway.fund_issue(issue.id, amount)
        log.info(LogEventNames.ISSUE_FUNDED, issue_id=issue.id, amount=amount, tx_hash=receipt.tx_hash)

        return await self._after_funding(issue, "fund", amount, account, receipt, pending)

    async def withdraw(self, issue: Issue, amount: int) -> ActionResult:
        """Withdraw ``amount`` tokens from an issue as an admin.

        The available-funds check uses ``issue.funding``, the last fetched
        snapshot. The contract remains the final arbiter.

        Raises:
            NotAuthorizedError: If the account is not an admin.
            ActionValidationError: If ``amount`` is not a positive integer.
            InsufficientFundsError: If ``amount`` exceeds the known available funds.
        """
        account = self._admins.require_admin(self.account, "withdraw funds")
        _require_positive_amount(amount)
        if amount > issue.funding.available:
            log.warning(
                LogEventNames.ACTION_BLOCKED,
                issue_id=issue.id,
                reason="insufficient_funds",
                amount=amount,
                available=issue.funding.available,
            )
            raise InsufficientFundsError(amount, issue.funding.available)

        pending = PendingFunding.for_withdraw(issue.funding, amount)
        receipt = await self._gateway.withdraw_funds(issue.id, amount)
        log.info(LogEventNames.FUNDS_WITHDRAWN, issue_id=issue.id, amount=amount, tx_hash=receipt.tx_hash)

        return await self._after_funding(issue, "withdraw", amount, account, receipt, pending)

    async def _after_funding(
        self,
        issue: Issue,
        action: str,
        amount: int,
        account: str,
        receipt: TxReceipt,
        pending: PendingFunding,
    ) -> ActionResult:
        warnings: list[str] = []
        funding: IssueFunding | None = None
        try:
            funding = pending.reconcile(await self._reader.get_funding(issue.id))
        except (ChainCallError, ValueError) as e:
            log.warning(LogEventNames.FUNDING_FETCH_FAILED, issue_id=issue.id, error=str(e))
            warnings.append(f"Could not refresh funding totals: {e}")

        outcome = await self._mirror.publish(
            FundingSnapshot(
                issue_id=issue.id,
                action=action,
                amount=amount,
                user_address=account,
                total_funding=funding.total if funding else None,
                funds_used=funding.used if funding else None,
                available=funding.available if funding else None,
            ),
            name=f"issue-{issue.id}-{action}",
        )
        return ActionResult(
            receipt=receipt,
            mirror=outcome,
            funding=funding,
            pending=pending,
            warnings=tuple(warnings),
        )
