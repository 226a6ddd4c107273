"""Unit tests for roster parsing."""
import pytest

from processor.models import Guest
from processor.roster_parser import parse_roster


class TestParseRoster:
    """Test cases for parse_roster."""

    def test_basic_roster_with_cancellation(self):
        roster = parse_roster("2x Jane Doe\n1x Bob Smith (CANCELLED)\n")

        assert roster.total == 3
        assert roster.active == 2
        assert roster.guests == [
            Guest(count=2, name="Jane Doe", is_cancelled=False),
            Guest(count=1, name="Bob Smith", is_cancelled=True),
        ]

    @pytest.mark.parametrize("description", [None, "", "\n\n"])
    def test_empty_description(self, description):
        roster = parse_roster(description)

        assert roster.guests == []
        assert roster.total == 0
        assert roster.active == 0

    def test_skips_separators_and_unprefixed_lines(self):
        description = (
            "=== Morning Group ===\n"
            "Notes: bring water\n"
            "x2 Wrong Prefix\n"
            "3xNo Space\n"
            "  4x Alice Jones  \n"
        )

        roster = parse_roster(description)

        assert [g.name for g in roster.guests] == ["Alice Jones"]
        assert roster.total == 4

    def test_strips_contact_suffix(self):
        roster = parse_roster("2x Carla Diaz (555-0101)")

        assert roster.guests[0].name == "Carla Diaz"

    def test_cancelled_anywhere_case_insensitive(self):
        roster = parse_roster(
            "3x cancelled Dana White\n2x Eve Black - Cancelled (555-0199)"
        )

        assert all(g.is_cancelled for g in roster.guests)
        assert roster.guests[0].name == "Dana White"
        assert roster.guests[1].name == "Eve Black -"
        assert roster.total == 5
        assert roster.active == 0

    def test_skips_lines_without_name(self):
        roster = parse_roster("2x CANCELLED\n1x (555-0000)\n1x Fay")

        assert [g.name for g in roster.guests] == ["Fay"]
        assert roster.total == 1

    def test_duplicate_names_are_kept(self):
        roster = parse_roster("1x Sam Lee\n2x Sam Lee")

        assert len(roster.guests) == 2
        assert roster.total == 3

    def test_splits_only_on_newline(self):
        roster = parse_roster("2x Jane\x0cDoe\n1x Ann Lee")

        assert [g.name for g in roster.guests] == ["Jane\x0cDoe", "Ann Lee"]
        assert roster.total == 3

    def test_windows_line_endings(self):
        roster = parse_roster("1x Gina\r\n2x Hal\r\n")

        assert [g.name for g in roster.guests] == ["Gina", "Hal"]

    def test_totals_invariant(self):
        roster = parse_roster(
            "5x Group A\n2x Group B CANCELLED\n1x Group C\n7x Group D (CANCELLED)"
        )

        assert roster.total == sum(g.count for g in roster.guests)
        assert roster.active == sum(
            g.count for g in roster.guests if not g.is_cancelled
        )
        assert roster.active <= roster.total
        assert (roster.total, roster.active) == (15, 6)
