"""Utility functions and helpers.

This module provides various utilities for Civic Ledger:
- errors: Exception hierarchy, user-rejection detection, retry decorator
- security: Secret redaction, address validation
- logging: Structured logging with secret sanitization
- formatting: Display helpers for addresses, hashes and timestamps
- health: Health check utilities
"""

from civic_ledger.utils.errors import (
    CivicLedgerError,
    MirrorError,
    TransactionRejectedError,
    is_user_rejection,
)
from civic_ledger.utils.formatting import format_address, format_ipfs_hash, format_timestamp
from civic_ledger.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    configure_logging,
)
from civic_ledger.utils.security import RedactionError, SecretRedactor, SecurityError

__all__ = [
    # Errors
    "CivicLedgerError",
    "MirrorError",
    "TransactionRejectedError",
    "is_user_rejection",
    # Formatting
    "format_address",
    "format_ipfs_hash",
    "format_timestamp",
    # Logging
    "LogFormat",
    "LogLevel",
    "bind_context",
    "configure_logging",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
]
