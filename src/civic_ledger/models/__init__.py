"""Data models and transfer objects."""

from .issue import (
    ConfirmationState,
    Issue,
    IssueFunding,
    PendingFunding,
    RawIssue,
    TxReceipt,
)
from .snapshot import (
    ConfirmationSnapshot,
    FundingSnapshot,
    IssueMetadata,
    IssueUpload,
    MirrorOutcome,
    Snapshot,
    StatusSnapshot,
)
from .status import TERMINAL_STATUSES, IssueStatus, to_display, to_ordinal

__all__ = [
    # Status models
    "IssueStatus",
    "TERMINAL_STATUSES",
    "to_display",
    "to_ordinal",
    # Issue models
    "RawIssue",
    "Issue",
    "IssueFunding",
    "PendingFunding",
    "TxReceipt",
    "ConfirmationState",
    # Snapshot models
    "Snapshot",
    "IssueMetadata",
    "StatusSnapshot",
    "FundingSnapshot",
    "ConfirmationSnapshot",
    "IssueUpload",
    "MirrorOutcome",
]
