"""Unit tests for capacity and status extraction."""
from datetime import datetime, timedelta, timezone

import pytest

from processor.extractors import event_status, extract_capacity
from processor.models import EventStatus

START = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)
END = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


class TestExtractCapacity:
    """Test cases for extract_capacity."""

    def test_capacity_found(self):
        assert extract_capacity("Hike & Fly 5 of 10") == (5, 10)

    def test_first_match_wins(self):
        assert extract_capacity("Zipline 3 of 8 (was 2 of 8)") == (3, 8)

    def test_overbooked_values_are_kept(self):
        assert extract_capacity("SkyNet 12 of 10") == (12, 10)

    @pytest.mark.parametrize("title", ["Sunset Yoga", "", "five of ten", None])
    def test_no_capacity(self, title):
        assert extract_capacity(title) == (None, None)


class TestEventStatus:
    """Test cases for event_status boundaries."""

    def test_upcoming(self):
        assert event_status(START - ONE_MS, START, END) == EventStatus.UPCOMING

    def test_start_is_in_progress(self):
        assert event_status(START, START, END) == EventStatus.IN_PROGRESS

    def test_middle_is_in_progress(self):
        now = START + timedelta(hours=1)
        assert event_status(now, START, END) == EventStatus.IN_PROGRESS

    def test_end_is_in_progress(self):
        assert event_status(END, START, END) == EventStatus.IN_PROGRESS

    def test_completed(self):
        assert event_status(END + ONE_MS, START, END) == EventStatus.COMPLETED

    def test_status_values(self):
        assert [s.value for s in EventStatus] == [
            'Upcoming', 'In Progress', 'Completed'
        ]
