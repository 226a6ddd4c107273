"""Capacity and lifecycle status extraction."""
import re
from datetime import datetime
from typing import Optional, Tuple

from processor.models import EventStatus

CAPACITY_GROUPS_PATTERN = re.compile(r'(\d+)\s+of\s+(\d+)')


def extract_capacity(title: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Extract occupancy from an "N of M" fragment in the title.

    Current occupancy is not checked against the maximum; overbooking is
    reported downstream.

    Args:
        title: Entry title

    Returns:
        Tuple of (current_capacity, max_capacity), both None without a match
    """
    match = CAPACITY_GROUPS_PATTERN.search(title or '')
    if not match:
        return None, None
    return int(match.group(1)), int(match.group(2))


def event_status(now: datetime, start: datetime, end: datetime) -> EventStatus:
    """
    Derive lifecycle status; both boundaries count as in progress.

    Args:
        now: Reference instant
        start: Activity start
        end: Activity end

    Returns:
        EventStatus
    """
    if now < start:
        return EventStatus.UPCOMING
    if start <= now <= end:
        return EventStatus.IN_PROGRESS
    return EventStatus.COMPLETED
