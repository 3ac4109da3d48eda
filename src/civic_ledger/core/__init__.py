"""Core business logic components.

This module exports the main business logic classes:
- LedgerClient: Wires reader, actions and mirror for one network
- IssueReader: Enumerates contract issues into normalized records
- IssueActions: Validated, mirrored state changes
- MetadataMirror: Best-effort snapshot publishing
- ConfirmationTracker: Community confirmation quorum tracking
"""

from civic_ledger.core.access import AdminRegistry
from civic_ledger.core.actions import ActionResult, IssueActions
from civic_ledger.core.chain import create_gateway, resolve_network
from civic_ledger.core.client import LedgerClient, create_client, create_store
from civic_ledger.core.confirmations import ConfirmationTracker
from civic_ledger.core.dashboard import (
    Dashboard,
    DashboardStats,
    build_dashboard,
    filter_issues,
    summarize,
)
from civic_ledger.core.mirror import MetadataMirror
from civic_ledger.core.reader import IssueReader

__all__ = [
    "ActionResult",
    "AdminRegistry",
    "ConfirmationTracker",
    "Dashboard",
    "DashboardStats",
    "IssueActions",
    "IssueReader",
    "LedgerClient",
    "MetadataMirror",
    "build_dashboard",
    "create_client",
    "create_gateway",
    "create_store",
    "filter_issues",
    "resolve_network",
    "summarize",
]
