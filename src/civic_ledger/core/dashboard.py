"""Dashboard Projection: filtering and aggregate counts over issues."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..models.issue import Issue
from ..models.status import IssueStatus

NO_MATCHES_MESSAGE = "No issues found matching your criteria"
NO_ISSUES_MESSAGE = "No issues have been reported yet"


def filter_issues(
    issues: Sequence[Issue],
    search: str = "",
    status: IssueStatus | None = None,
) -> list[Issue]:
    """Filter issues by a search term and an optional status.

    The search term matches case-insensitively as a substring of the
    location or description.
    """
    term = search.strip().lower()
    return [
        issue
        for issue in issues
        if (not term or term in issue.location.lower() or term in issue.description.lower())
        and (status is None or issue.status == status)
    ]


@dataclass(frozen=True)
class DashboardStats:
    """Aggregate counts over a set of issues."""

    total: int
    by_status: dict[IssueStatus, int]
    total_funding: int
    available_funds: int

    def count(self, status: IssueStatus) -> int:
        return self.by_status.get(status, 0)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "byStatus": {s.display: self.count(s) for s in IssueStatus},
            "totalFunding": self.total_funding,
            "availableFunds": self.available_funds,
        }


def summarize(issues: Sequence[Issue]) -> DashboardStats:
    """Count issues per status and sum their funding."""
    by_status = dict.fromkeys(IssueStatus, 0)
    for issue in issues:
        by_status[issue.status] += 1
    return DashboardStats(
        total=len(issues),
        by_status=by_status,
        total_funding=sum(i.total_funding for i in issues),
        available_funds=sum(i.available_funds for i in issues),
    )


@dataclass(frozen=True)
class Dashboard:
    """Filtered issues plus stats over the full set."""

    issues: list[Issue]
    stats: DashboardStats
    empty_message: str | None

    def to_dict(self) -> dict[str, object]:
        return {
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats.to_dict(),
            "emptyMessage": self.empty_message,
        }


def build_dashboard(
    issues: Sequence[Issue],
    search: str = "",
    status: IssueStatus | None = None,
) -> Dashboard:
    """Build the dashboard view.

    Stats always cover every issue; only the listed issues are filtered.
    """
    filtered = filter_issues(issues, search, status)
    empty_message = None
    if not filtered:
        filtering = bool(search.strip()) or status is not None
        empty_message = NO_MATCHES_MESSAGE if filtering else NO_ISSUES_MESSAGE
    return Dashboard(issues=filtered, stats=summarize(issues), empty_message=empty_message)
