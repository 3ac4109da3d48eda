"""Abstract interface for the civic issues contract."""

from typing import Protocol

from ..models.issue import RawIssue, TxReceipt


class ContractGateway(Protocol):
    """Call surface of the deployed civic issues contract.

    The contract is the only source of truth for issue state, confirmation
    counting and fund accounting. Implementations bind one contract on one
    network and, optionally, one signing account.

    Every mutating method returns only after the transaction is mined.
    """

    @property
    def account(self) -> str | None:
        """Return the signing account address, or None if read-only."""
        ...

    async def issue_count(self) -> int:
        """
        Read the number of issues ever reported.

        Returns:
            Highest issue id assigned so far (ids run 1..count)

        Raises:
            ContractNotDeployedError: If no contract code exists at the address
            ChainCallError: If the RPC call fails
        """
        ...

    async def get_issue(self, issue_id: int) -> RawIssue:
        """
        Read one issue record.

        Args:
            issue_id: Issue id (1-based)

        Returns:
            The raw record, with the status as the contract ordinal

        Raises:
            ChainCallError: If the RPC call fails or the id is unknown
        """
        ...

    async def report_issue(self, location: str, description: str, image_hash: str) -> TxReceipt:
        """
        Submit a new issue.

        Args:
            location: Free-text location
            description: Free-text description
            image_hash: CID of the uploaded photo

        Returns:
            Receipt carrying the new issue id when the event was decoded

        Raises:
            WalletNotConnectedError: If no signing account is configured
            TransactionRejectedError: If the user declined to sign
            ChainCallError: If the transaction fails or reverts
        """
        ...

    async def update_issue_status(self, issue_id: int, status: int) -> TxReceipt:
        """
        Move an issue to a new lifecycle status.

        Args:
            issue_id: Issue id
            status: Target status ordinal

        Returns:
            Receipt of the mined transaction
        """
        ...

    async def confirm_issue(self, issue_id: int) -> TxReceipt:
        """Record the signing account's confirmation of a resolved issue."""
        ...

    async def get_confirmation_count(self, issue_id: int) -> int:
        """Read how many distinct addresses confirmed the issue."""
        ...

    async def has_user_confirmed(self, issue_id: int, address: str) -> bool:
        """Check whether ``address`` already confirmed the issue."""
        ...

    async def fund_issue(self, issue_id: int, amount: int) -> TxReceipt:
        """Contribute ``amount`` tokens to the issue."""
        ...

    async def withdraw_funds(self, issue_id: int, amount: int) -> TxReceipt:
        """Withdraw ``amount`` tokens from the issue's available funds."""
        ...

    async def get_issue_funding(self, issue_id: int) -> tuple[int, int, int]:
        """
        Read funding totals.

        Returns:
            ``(total, used, available)`` as reported by the contract
        """
        ...

    async def get_user_funding(self, issue_id: int, address: str) -> int:
        """Read the total ``address`` has contributed to the issue."""
        ...
