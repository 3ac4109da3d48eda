"""Tests for the dashboard projection."""

import pytest

from civic_ledger.core.dashboard import (
    NO_ISSUES_MESSAGE,
    NO_MATCHES_MESSAGE,
    build_dashboard,
    filter_issues,
    summarize,
)
from civic_ledger.models.issue import Issue, IssueFunding
from civic_ledger.models.status import IssueStatus


def _issue(issue_id: int, location: str, description: str, status: IssueStatus, total: int = 0) -> Issue:
    return Issue(
        id=issue_id,
        reporter="0x1111111111111111111111111111111111111111",
        location=location,
        description=description,
        image_hash=f"QmImage{issue_id}",
        status=status,
        timestamp=1_700_000_000,
        funding=IssueFunding(total=total),
    )


@pytest.fixture
def issues() -> list[Issue]:
    return [
        _issue(1, "Main Street", "Large pothole", IssueStatus.REPORTED, total=10),
        _issue(2, "Oak Avenue", "Streetlight out", IssueStatus.UNDER_REVIEW),
        _issue(3, "Park Road", "Overflowing bins near main gate", IssueStatus.IN_PROGRESS, total=5),
        _issue(4, "Harbor Way", "Graffiti", IssueStatus.RESOLVED),
        _issue(5, "Elm Street", "Broken bench", IssueStatus.CONFIRMED),
    ]


class TestFilterIssues:
    """Test search and status filtering."""

    def test_search_is_case_insensitive_substring(self, issues) -> None:
        """Test search matches location or description."""
        assert [i.id for i in filter_issues(issues, "MAIN")] == [1, 3]

    def test_empty_search_returns_all(self, issues) -> None:
        """Test no filter keeps every issue."""
        assert len(filter_issues(issues)) == 5

    def test_status_filter(self, issues) -> None:
        """Test exact status filtering."""
        assert [i.id for i in filter_issues(issues, status=IssueStatus.RESOLVED)] == [4]

    def test_combined_filters(self, issues) -> None:
        """Test search and status together."""
        assert filter_issues(issues, "street", IssueStatus.REPORTED)[0].id == 1


class TestSummarize:
    """Test aggregate counts."""

    def test_counts(self, issues) -> None:
        """Test totals and per-status counts."""
        stats = summarize(issues)
        assert stats.total == 5
        assert stats.count(IssueStatus.UNDER_REVIEW) == 1
        assert stats.count(IssueStatus.IN_PROGRESS) == 1
        assert stats.count(IssueStatus.RESOLVED) == 1
        assert stats.count(IssueStatus.CONFIRMED) == 1
        assert stats.count(IssueStatus.REJECTED) == 0
        assert stats.total_funding == 15

    def test_to_dict_uses_display_names(self, issues) -> None:
        """Test the serialized stats."""
        data = summarize(issues).to_dict()
        assert data["byStatus"]["Under Review"] == 1
        assert data["total"] == 5


class TestBuildDashboard:
    """Test the composed dashboard view."""

    def test_stats_cover_all_issues(self, issues) -> None:
        """Test stats ignore the filter."""
        dashboard = build_dashboard(issues, search="graffiti")
        assert len(dashboard.issues) == 1
        assert dashboard.stats.total == 5
        assert dashboard.empty_message is None

    def test_no_matches_message(self, issues) -> None:
        """Test the message when a filter matches nothing."""
        assert build_dashboard(issues, search="volcano").empty_message == NO_MATCHES_MESSAGE

    def test_no_issues_message(self) -> None:
        """Test the message when nothing was reported."""
        dashboard = build_dashboard([])
        assert dashboard.empty_message == NO_ISSUES_MESSAGE
        assert dashboard.to_dict()["issues"] == []
