"""Data models for activity processing."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class EventStatus(str, Enum):
    """Lifecycle status of an activity relative to a point in time."""
    UPCOMING = 'Upcoming'
    IN_PROGRESS = 'In Progress'
    COMPLETED = 'Completed'


@dataclass(frozen=True)
class RawEntry:
    """Raw scheduling entry from the calendar feed."""
    id: str
    title: str
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    description: Optional[str] = None
    html_link: Optional[str] = None


@dataclass
class ActivityClassification:
    """Category and display metadata derived from an entry title."""
    category: str
    filter_name: str
    specific_name: str
    display_name: str
    color: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'category': self.category,
            'filterName': self.filter_name,
            'specificName': self.specific_name,
            'displayName': self.display_name,
            'color': self.color
        }


@dataclass
class Guest:
    """One roster line: a party of guests under a single name."""
    count: int
    name: str
    is_cancelled: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'name': self.name,
            'isCancelled': self.is_cancelled
        }


@dataclass
class Roster:
    """Guest list parsed from an entry description."""
    guests: List[Guest] = field(default_factory=list)
    total: int = 0
    active: int = 0

    @property
    def has_cancellations(self) -> bool:
        return any(guest.is_cancelled for guest in self.guests)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'guests': [guest.to_dict() for guest in self.guests],
            'total': self.total,
            'active': self.active
        }


@dataclass
class NormalizedRecord:
    """Raw entry enriched with classification, roster, status and capacity."""
    id: str
    title: str
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    description: Optional[str] = None
    html_link: Optional[str] = None
    classification: Optional[ActivityClassification] = None
    roster: Roster = field(default_factory=Roster)
    status: Optional[EventStatus] = None
    current_capacity: Optional[int] = None
    max_capacity: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: RawEntry, **enrichment) -> 'NormalizedRecord':
        """
        Build a record carrying the entry's own fields plus enrichment.

        Args:
            entry: Source RawEntry
            **enrichment: Derived fields (classification, roster, ...)

        Returns:
            NormalizedRecord
        """
        return cls(
            id=entry.id,
            title=entry.title,
            start_time=entry.start_time,
            end_time=entry.end_time,
            description=entry.description,
            html_link=entry.html_link,
            **enrichment
        )

    @property
    def display_name(self) -> Optional[str]:
        if self.classification is None:
            return None
        return self.classification.display_name

    @property
    def is_overbooked(self) -> bool:
        """True when both capacities are known and current exceeds max."""
        return (
            self.current_capacity is not None
            and self.max_capacity is not None
            and self.current_capacity > self.max_capacity
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON-safe shape consumed by renderers and exporters.

        Returns:
            Dictionary with stable camelCase field names
        """
        return {
            'id': self.id,
            'summary': self.title,
            'description': self.description,
            'start': self.start_time.isoformat() if self.start_time else None,
            'end': self.end_time.isoformat() if self.end_time else None,
            'htmlLink': self.html_link,
            'activityInfo': (
                self.classification.to_dict() if self.classification else None
            ),
            'guests': self.roster.to_dict(),
            'status': self.status.value if self.status else None,
            'currentCapacity': self.current_capacity,
            'maxCapacity': self.max_capacity
        }


@dataclass
class DayBucket:
    """Records whose start falls on one local calendar day."""
    day: date
    records: List[NormalizedRecord] = field(default_factory=list)


@dataclass
class DayStats:
    """Statistics folded from a day's filtered records."""
    total_guests: int = 0
    active_now: int = 0
    capacity_issues: int = 0
    cancellations: int = 0
    overbooked_records: List[NormalizedRecord] = field(default_factory=list)
    cancelled_records: List[NormalizedRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalGuests': self.total_guests,
            'activeNow': self.active_now,
            'capacityIssues': self.capacity_issues,
            'cancellations': self.cancellations,
            'overbookedEvents': [r.to_dict() for r in self.overbooked_records],
            'cancelledEvents': [r.to_dict() for r in self.cancelled_records]
        }


@dataclass
class FilterState:
    """Active type and status filters; 'all' disables a dimension."""
    type_filter: str = 'all'
    status_filter: str = 'all'
