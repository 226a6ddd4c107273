"""Day bucketing, filtering and statistics over normalized records."""
import logging
from datetime import date, timedelta, tzinfo
from typing import Any, Dict, Iterable, List, Optional

from processor.models import (
    DayBucket,
    DayStats,
    EventStatus,
    FilterState,
    NormalizedRecord,
)

logger = logging.getLogger(__name__)

ALL = 'all'
ALL_TYPES = 'All Types'
ALL_STATUSES = 'All Statuses'
AVAILABLE_STATUSES = [
    ALL_STATUSES,
    EventStatus.COMPLETED.value,
    EventStatus.IN_PROGRESS.value,
    EventStatus.UPCOMING.value,
]
DEFAULT_WINDOW_DAYS = 3


def day_window(
    start_date: Optional[date],
    end_date: Optional[date],
    today: date,
    default_days: int = DEFAULT_WINDOW_DAYS
) -> List[date]:
    """
    Expand a date range into consecutive calendar days.

    Args:
        start_date: First day, or None for the default window
        end_date: Last day (inclusive), or None for the default window
        today: First day of the default window
        default_days: Length of the default window

    Returns:
        List of dates
    """
    if start_date is None or end_date is None:
        start_date = today
        end_date = today + timedelta(days=max(default_days, 1) - 1)
    elif end_date < start_date:
        start_date, end_date = end_date, start_date

    span = (end_date - start_date).days
    return [start_date + timedelta(days=offset) for offset in range(span + 1)]


def bucket_by_day(
    records: Iterable[NormalizedRecord],
    reference_dates: List[date],
    tz: Optional[tzinfo] = None
) -> List[DayBucket]:
    """
    Group records by the local calendar day of their start.

    Records outside ``reference_dates`` or without a start are dropped.

    Args:
        records: Normalized records
        reference_dates: Days to build buckets for, in output order
        tz: Timezone defining the local day (system local if None)

    Returns:
        One DayBucket per reference date
    """
    buckets = [DayBucket(day=day) for day in reference_dates]
    by_day = {bucket.day: bucket for bucket in buckets}

    dropped = 0
    for record in records:
        if record.start_time is None:
            dropped += 1
            continue
        bucket = by_day.get(record.start_time.astimezone(tz).date())
        if bucket is None:
            dropped += 1
            continue
        bucket.records.append(record)

    if dropped:
        logger.debug(f"Dropped {dropped} records outside the day window")
    return buckets


def available_filter_values(records: Iterable[NormalizedRecord]) -> List[str]:
    """
    Collect the activity types present, with "All Types" first.

    Args:
        records: Normalized records

    Returns:
        Sentinel followed by distinct display names in alphabetical order
    """
    names = {
        record.display_name for record in records
        if record.display_name and record.display_name != ALL_TYPES
    }
    return [ALL_TYPES] + sorted(names, key=lambda name: (name.casefold(), name))


def normalize_filter_value(value: Optional[str]) -> str:
    """Map empty values and the "All ..." sentinels to 'all'."""
    if not value or value in (ALL, ALL_TYPES, ALL_STATUSES):
        return ALL
    return value


def filter_records(
    records: Iterable[NormalizedRecord],
    filter_state: FilterState
) -> List[NormalizedRecord]:
    """
    Keep records matching both the type and the status filter.

    Args:
        records: Normalized records
        filter_state: Active filters

    Returns:
        Matching records in input order
    """
    type_filter = normalize_filter_value(filter_state.type_filter)
    status_filter = normalize_filter_value(filter_state.status_filter)

    matched = []
    for record in records:
        if type_filter != ALL and record.display_name != type_filter:
            continue
        if status_filter != ALL and (
            record.status is None or record.status.value != status_filter
        ):
            continue
        matched.append(record)
    return matched


def compute_stats(records: Iterable[NormalizedRecord]) -> DayStats:
    """
    Fold records into DayStats.

    Cancellations and capacity issues count records, not guests.

    Args:
        records: Normalized records, usually one filtered day

    Returns:
        DayStats
    """
    stats = DayStats()
    for record in records:
        roster = record.roster
        stats.total_guests += roster.total
        if record.status == EventStatus.IN_PROGRESS:
            stats.active_now += roster.active
        if roster.has_cancellations:
            stats.cancellations += 1
            stats.cancelled_records.append(record)
        if record.is_overbooked:
            stats.capacity_issues += 1
            stats.overbooked_records.append(record)
    return stats


class Dashboard:
    """Filter session over the day buckets of the latest record batch."""

    def __init__(self, tz: Optional[tzinfo] = None):
        """
        Initialize an empty dashboard.

        Args:
            tz: Timezone defining the local calendar day
        """
        self.tz = tz
        self.filters = FilterState()
        self.available_types: List[str] = [ALL_TYPES]
        self.buckets: List[DayBucket] = []
        self.filtered: List[List[NormalizedRecord]] = []
        self.stats: List[DayStats] = []

    def refresh(
        self,
        records: List[NormalizedRecord],
        reference_dates: List[date]
    ) -> None:
        """
        Rebuild buckets, filter values, filtered views and statistics.

        Args:
            records: Fresh batch of normalized records
            reference_dates: Days in view
        """
        self.buckets = bucket_by_day(records, reference_dates, self.tz)
        self._update_available_types()
        self._apply_filters()

    def set_filter(self, dimension: str, value: Optional[str]) -> None:
        """
        Change one filter dimension and recompute the views.

        Args:
            dimension: 'type' or 'status'
            value: New value; "All Types"/"All Statuses" mean 'all'

        Raises:
            ValueError: If dimension is unknown
        """
        normalized = normalize_filter_value(value)
        if dimension == 'type':
            self.filters.type_filter = normalized
        elif dimension == 'status':
            self.filters.status_filter = normalized
        else:
            raise ValueError(f"Unknown filter dimension: {dimension}")
        self._apply_filters()

    def _update_available_types(self) -> None:
        in_view = [r for bucket in self.buckets for r in bucket.records]
        self.available_types = available_filter_values(in_view)

        selected = self.filters.type_filter
        if selected != ALL and selected not in self.available_types:
            logger.info(
                f"Type filter '{selected}' no longer available, resetting"
            )
            self.filters.type_filter = ALL

    def _apply_filters(self) -> None:
        self.filtered = [
            filter_records(bucket.records, self.filters)
            for bucket in self.buckets
        ]
        self.stats = [compute_stats(records) for records in self.filtered]

    def summary(self) -> Dict[str, Any]:
        """
        JSON-safe view of the current state.

        Returns:
            Dictionary with filters, available values and per-day data
        """
        return {
            'filters': {
                'type': self.filters.type_filter,
                'status': self.filters.status_filter
            },
            'availableTypes': list(self.available_types),
            'availableStatuses': list(AVAILABLE_STATUSES),
            'days': [
                {
                    'date': bucket.day.isoformat(),
                    'totalRecords': len(bucket.records),
                    'records': [r.to_dict() for r in records],
                    'stats': stats.to_dict()
                }
                for bucket, records, stats in zip(
                    self.buckets, self.filtered, self.stats
                )
            ]
        }
