"""web3.py adapter for the civic issues contract.

This module implements the ContractGateway protocol against a JSON-RPC
endpoint using ``AsyncWeb3``.

Signing:
- With ``private_key`` configured, transactions are built, signed locally
  and sent raw.
- With only ``sender_address`` configured, ``eth_sendTransaction`` is used
  and the node (or wallet bridge) signs.
- With neither, the gateway is read-only and mutating calls raise
  WalletNotConnectedError.

Every call boundary logs and re-raises as a domain error; nothing is retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from cachetools import TTLCache
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.logs import DISCARD

from ...models.issue import RawIssue, TxReceipt
from ...utils.errors import (
    ChainCallError,
    ContractNotDeployedError,
    TransactionRejectedError,
    WalletNotConnectedError,
    is_user_rejection,
)
from ...utils.logging import LogEventNames
from .abi import CIVIC_ISSUES_ABI

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

    from ...config.schema import NetworkConfig

log = structlog.get_logger()


class Web3ContractGateway:
    """ContractGateway backed by web3.py.

    Example:
        network = NetworkConfig(name="Sepolia", rpc_url="https://...", contract_address="0x...")
        gateway = Web3ContractGateway(network, chain_id=11155111, private_key=key)

        count = await gateway.issue_count()
        receipt = await gateway.fund_issue(1, 50)
    """

    def __init__(
        self,
        network: NetworkConfig,
        chain_id: int,
        private_key: str | None = None,
        sender_address: str | None = None,
        code_cache_ttl: int = 300,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            network: Network and contract address to bind.
            chain_id: Chain id of the network, used when signing.
            private_key: Key for local signing.
            sender_address: Node-managed account used when no key is given.
            code_cache_ttl: Seconds to trust a successful contract code check.
            w3: Preconstructed client. If None, one is built from ``network.rpc_url``.
        """
        self._network = network
        self._chain_id = chain_id
        self._w3 = w3 or AsyncWeb3(AsyncHTTPProvider(network.rpc_url))
        self._address = AsyncWeb3.to_checksum_address(network.contract_address)
        self._contract = self._w3.eth.contract(address=self._address, abi=CIVIC_ISSUES_ABI)

        self._signer: LocalAccount | None = Account.from_key(private_key) if private_key else None
        if self._signer is not None:
            self._account: str | None = self._signer.address
        elif sender_address:
            self._account = AsyncWeb3.to_checksum_address(sender_address)
        else:
            self._account = None

        # Only positive code checks are cached
        self._code_cache: TTLCache[str, bool] = TTLCache(maxsize=16, ttl=code_cache_ttl)

    @property
    def account(self) -> str | None:
        """Return the signing account address, or None if read-only."""
        return self._account

    @property
    def contract_address(self) -> str:
        """Return the checksummed contract address."""
        return self._address

    async def ensure_deployed(self) -> None:
        """Verify that contract code exists at the configured address.

        Raises:
            ContractNotDeployedError: If the address is the zero placeholder
                or holds no code.
            ChainCallError: If the code lookup itself fails.
        """
        if not self._network.is_deployed:
            log.error(LogEventNames.CONTRACT_NOT_DEPLOYED, chain_id=self._chain_id)
            raise ContractNotDeployedError("Contract not deployed on this network")

        if self._code_cache.get(self._address):
            return

        try:
            code = await self._w3.eth.get_code(self._address)
        except Exception as e:
            log.error(LogEventNames.CHAIN_CALL_FAILED, function="getCode", error=str(e))
            raise ChainCallError(f"getCode failed: {e}") from e

        if not code:
            log.error(
                LogEventNames.CONTRACT_NOT_DEPLOYED,
                address=self._address,
                chain_id=self._chain_id,
            )
            raise ContractNotDeployedError(
                f"No contract found at address {self._address} on chain {self._chain_id}. "
                "Please verify the contract is deployed and the address is correct."
            )

        self._code_cache[self._address] = True

    async def _call(self, function: str, *args: Any) -> Any:
        """Run a read-only contract function."""
        try:
            return await getattr(self._contract.functions, function)(*args).call()
        except Exception as e:
            log.error(LogEventNames.CHAIN_CALL_FAILED, function=function, error=str(e))
            raise ChainCallError(f"{function} failed: {e}") from e

    async def _transact(self, function: str, *args: Any) -> dict[str, Any]:
        """Send a state-changing transaction and wait until it is mined.

        Returns:
            The raw transaction receipt.
        """
        if self._account is None:
            raise WalletNotConnectedError("Please connect your wallet")
        if not self._network.is_deployed:
            raise ContractNotDeployedError("Contract not deployed on this network")

        fn = getattr(self._contract.functions, function)(*args)
        try:
            if self._signer is not None:
                nonce = await self._w3.eth.get_transaction_count(self._account)
                tx = await fn.build_transaction(
                    {"from": self._account, "nonce": nonce, "chainId": self._chain_id}
                )
                signed = self._signer.sign_transaction(tx)
                tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = await fn.transact({"from": self._account})

            receipt = dict(await self._w3.eth.wait_for_transaction_receipt(tx_hash))
        except Exception as e:
            if is_user_rejection(e):
                log.info(LogEventNames.TRANSACTION_REJECTED, function=function)
                raise TransactionRejectedError("Transaction rejected by user") from e
            log.error(LogEventNames.CHAIN_CALL_FAILED, function=function, error=str(e))
            raise ChainCallError(f"{function} failed: {e}") from e

        if receipt.get("status") != 1:
            log.error(
                LogEventNames.CHAIN_CALL_FAILED,
                function=function,
                tx_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
                error="reverted",
            )
            raise ChainCallError(f"{function} transaction reverted")

        return receipt

    def _to_receipt(self, receipt: dict[str, Any], issue_id: int | None = None) -> TxReceipt:
        return TxReceipt(
            tx_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            issue_id=issue_id,
        )

    async def issue_count(self) -> int:
        """Read the issue count after verifying the contract is deployed."""
        await self.ensure_deployed()
        count = int(await self._call("issueCount"))
        log.debug(LogEventNames.ISSUE_COUNT_READ, count=count, address=self._address)
        return count

    async def get_issue(self, issue_id: int) -> RawIssue:
        """Read one issue record."""
        row = await self._call("getIssue", issue_id)
        return RawIssue(
            id=int(row[0]),
            reporter=str(row[1]),
            location=str(row[2]),
            description=str(row[3]),
            image_hash=str(row[4]),
            status=int(row[5]),
            timestamp=int(row[6]),
        )

    async def report_issue(self, location: str, description: str, image_hash: str) -> TxReceipt:
        """Submit a new issue and decode its id from the IssueReported event."""
        receipt = await self._transact("reportIssue", location, description, image_hash)

        issue_id: int | None = None
        try:
            events = self._contract.events.IssueReported().process_receipt(
                receipt, errors=DISCARD
            )
        except Exception as e:
            # The issue exists on-chain either way; only the id is unknown
            log.warning("issue_reported_event_decode_failed", error=str(e))
            events = ()
        if events:
            issue_id = int(events[0]["args"]["issueId"])

        return self._to_receipt(receipt, issue_id=issue_id)

    async def update_issue_status(self, issue_id: int, status: int) -> TxReceipt:
        """Move an issue to a new lifecycle status."""
        return self._to_receipt(await self._transact("updateIssueStatus", issue_id, status))

    async def confirm_issue(self, issue_id: int) -> TxReceipt:
        """Confirm a resolved issue as the signing account."""
        return self._to_receipt(await self._transact("confirmIssue", issue_id))

    async def get_confirmation_count(self, issue_id: int) -> int:
        """Read the confirmation count."""
        return int(await self._call("getConfirmationCount", issue_id))

    async def has_user_confirmed(self, issue_id: int, address: str) -> bool:
        """Check whether ``address`` already confirmed the issue."""
        return bool(
            await self._call(
                "hasUserConfirmed", issue_id, AsyncWeb3.to_checksum_address(address)
            )
        )

    async def fund_issue(self, issue_id: int, amount: int) -> TxReceipt:
        """Contribute tokens to an issue."""
        return self._to_receipt(await self._transact("fundIssue", issue_id, amount))

    async def withdraw_funds(self, issue_id: int, amount: int) -> TxReceipt:
        """Withdraw available tokens from an issue."""
        return self._to_receipt(await self._transact("withdrawFunds", issue_id, amount))

    async def get_issue_funding(self, issue_id: int) -> tuple[int, int, int]:
        """Read ``(total, used, available)`` for an issue."""
        total, used, available = await self._call("getIssueFunding", issue_id)
        return int(total), int(used), int(available)

    async def get_user_funding(self, issue_id: int, address: str) -> int:
        """Read one address's contribution to an issue."""
        return int(
            await self._call("getUserFunding", issue_id, AsyncWeb3.to_checksum_address(address))
        )
