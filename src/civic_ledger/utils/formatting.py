"""Display helpers for the human-readable issue listing."""

from __future__ import annotations

from datetime import UTC, datetime


def format_address(address: str) -> str:
    """Shorten an address to ``0x1234...abcd``."""
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def format_ipfs_hash(cid: str) -> str:
    """Shorten a CID to its first eight and last four characters."""
    if not cid:
        return ""
    return f"{cid[:8]}...{cid[-4:]}"


def format_timestamp(timestamp: int) -> str:
    """Render a unix timestamp as e.g. ``Jan 05, 2025, 09:30 AM UTC``."""
    moment = datetime.fromtimestamp(int(timestamp), tz=UTC)
    return moment.strftime("%b %d, %Y, %I:%M %p UTC")
