"""Tests for the issue status codec."""

import pytest

from civic_ledger.models.status import IssueStatus, to_display, to_ordinal
from civic_ledger.utils.errors import UnknownStatusError


class TestStatusCodec:
    """Test ordinal/display mapping."""

    @pytest.mark.parametrize("ordinal", range(6))
    def test_round_trip(self, ordinal: int) -> None:
        """Test that every known ordinal survives a round trip."""
        assert to_ordinal(to_display(ordinal)) == ordinal

    @pytest.mark.parametrize("ordinal", [-1, 6, 7, 255, 10**6])
    def test_unknown_ordinal_defaults_to_reported(self, ordinal: int) -> None:
        """Test the lenient direction falls back to Reported without raising."""
        assert to_display(ordinal) == IssueStatus.REPORTED

    def test_strict_unknown_ordinal_raises(self) -> None:
        """Test strict decoding rejects unknown ordinals."""
        with pytest.raises(UnknownStatusError, match="Unknown status ordinal: 9"):
            to_display(9, strict=True)

    def test_strict_known_ordinal(self) -> None:
        """Test strict decoding accepts known ordinals."""
        assert to_display(3, strict=True) == IssueStatus.RESOLVED

    def test_display_names(self) -> None:
        """Test the human-facing names."""
        assert [s.display for s in IssueStatus] == [
            "Reported",
            "Under Review",
            "In Progress",
            "Resolved",
            "Rejected",
            "Confirmed",
        ]

    def test_str_is_display_name(self) -> None:
        """Test str() renders the display name."""
        assert str(IssueStatus.UNDER_REVIEW) == "Under Review"

    def test_from_display(self) -> None:
        """Test decoding display names."""
        assert IssueStatus.from_display("In Progress") == IssueStatus.IN_PROGRESS

    def test_from_display_unknown_raises(self) -> None:
        """Test unknown display names are rejected rather than defaulted."""
        with pytest.raises(UnknownStatusError):
            IssueStatus.from_display("Closed")

    def test_unknown_status_error_is_value_error(self) -> None:
        """Test callers catching ValueError still see codec errors."""
        with pytest.raises(ValueError):
            IssueStatus.from_ordinal(42)

    def test_terminal_statuses(self) -> None:
        """Test only Rejected and Confirmed are terminal."""
        assert {s for s in IssueStatus if s.is_terminal} == {
            IssueStatus.REJECTED,
            IssueStatus.CONFIRMED,
        }
