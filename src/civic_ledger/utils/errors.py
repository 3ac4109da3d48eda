"""Exception hierarchy and retry helpers.

This module provides:
- Custom exceptions for configuration, chain, mirror and validation errors
- User-rejection detection for wallet signing failures
- A retry decorator for idempotent gateway reads

Chain calls and mirror writes are never retried; only reads of already
pinned documents use ``api_retry``.
"""

from __future__ import annotations

import httpx
import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()


# =============================================================================
# Custom Exceptions
# =============================================================================


class CivicLedgerError(Exception):
    """Base exception for all civic ledger errors."""


class ConfigurationError(CivicLedgerError):
    """The selected network or contract binding is unusable."""


class UnsupportedNetworkError(ConfigurationError):
    """No network is configured for the requested chain id.

    Attributes:
        chain_id: The chain id that was requested.
    """

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chain ID: {chain_id}")
        self.chain_id = chain_id


class ContractNotDeployedError(ConfigurationError):
    """The configured address holds no contract code on the selected network."""


class ChainCallError(CivicLedgerError):
    """An RPC call or transaction against the contract failed."""


class TransactionRejectedError(ChainCallError):
    """The wallet owner declined to sign the transaction."""


class MirrorError(CivicLedgerError):
    """Uploading to or reading from content-addressed storage failed."""


class ActionValidationError(CivicLedgerError):
    """A local precondition of an action was not met."""


class InsufficientFundsError(ActionValidationError):
    """Withdrawal exceeds the last known available funds.

    Attributes:
        requested: Amount the caller asked to withdraw.
        available: Available funds in the last fetched snapshot.
    """

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient funds available: requested {requested}, available {available}"
        )
        self.requested = requested
        self.available = available


class NotAuthorizedError(CivicLedgerError):
    """The acting address is not on the admin allow-list."""


class WalletNotConnectedError(CivicLedgerError):
    """No wallet account is available to sign transactions."""


class AlreadyConfirmedError(ActionValidationError):
    """The address has already confirmed this issue."""


class UnknownStatusError(CivicLedgerError, ValueError):
    """A status ordinal or display name is outside the known set."""


# =============================================================================
# User rejection
# =============================================================================

# Substrings wallets and signing middleware use when the user declines
REJECTION_MARKERS = (
    "user rejected",
    "user denied",
    "rejected by user",
    "action_rejected",
)


def is_user_rejection(error: BaseException) -> bool:
    """Check whether a failure means the user declined to sign.

    Args:
        error: Exception raised by the signing or sending step.

    Returns:
        True if the message carries a rejection marker.
    """
    if isinstance(error, TransactionRejectedError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in REJECTION_MARKERS)


# =============================================================================
# Retry Decorator
# =============================================================================


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        log.warning(
            "retrying_operation",
            attempt=retry_state.attempt_number,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
        )


# Default retry decorator for idempotent HTTP reads
api_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=30),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    before_sleep=_log_retry,
    reraise=True,
)
