"""Heuristic activity classification from entry titles."""
import logging
import re
from typing import Callable, Optional, Tuple

from processor.models import ActivityClassification

logger = logging.getLogger(__name__)

CAPACITY_PATTERN = re.compile(r'\d+\s+of\s+\d+', re.IGNORECASE)
CLOCK_TIME_PATTERN = re.compile(r'\d{1,2}:\d{2}\s*(am|pm)?', re.IGNORECASE)
TRAILING_DASH_PATTERN = re.compile(r'\s*-\s*$')
LEADING_DASH_PATTERN = re.compile(r'^\s*-\s*')

# (substring trigger, category, display name, color); earlier rules win
ACTIVITY_RULES: Tuple[Tuple[str, str, str, str], ...] = (
    ('hike & fly', 'hike-fly', 'Hike & Fly', '#a78bfa'),
    ('hike and fly', 'hike-fly', 'Hike & Fly', '#a78bfa'),
    ('protea', 'protea-tour', 'Protea Tour', '#9333ea'),
    ('adventure course', 'adventure-park', 'Adv. Course', '#f6ad55'),
    ('adv. park', 'adventure-park', 'Adv. Park', '#f6ad55'),
    ('adventure park', 'adventure-park', 'Adventure Park', '#f6ad55'),
    ('skynet', 'skynet', 'SkyNet', '#4299e1'),
    ('sky net', 'skynet', 'SkyNet', '#4299e1'),
    ('zipline', 'zipline', 'Zipline', '#48bb78'),
    ('zip line', 'zipline', 'Zipline', '#48bb78'),
    ('ziplining', 'zipline', 'Zipline', '#48bb78'),
)

# (predicate on lower-cased title, category, display name, color, keeps
# the cleaned title as specific name)
KEYWORD_GROUPS: Tuple[Tuple[Callable[[str], bool], str, str, str, bool], ...] = (
    (lambda t: 'bike night' in t,
     'bike-night', 'Bike Night', '#10b981', False),
    (lambda t: 'private' in t and 'tour' in t,
     'private-tour', 'Private Tour', '#f56565', True),
    (lambda t: 'private event' in t,
     'private-event', 'Private Event', '#ec4899', True),
    (lambda t: 'group tour' in t,
     'group-tour', 'Group Tour', '#8b5cf6', True),
    (lambda t: 'birthday' in t or 'party' in t,
     'party', 'Party/Event', '#f59e0b', True),
    (lambda t: 'corporate' in t or 'team building' in t,
     'corporate', 'Corporate Event', '#6366f1', True),
)

PALETTE: Tuple[str, ...] = (
    '#ef4444', '#f97316', '#f59e0b', '#eab308', '#84cc16',
    '#22c55e', '#10b981', '#14b8a6', '#06b6d4', '#0ea5e9',
    '#3b82f6', '#6366f1', '#8b5cf6', '#a855f7', '#d946ef',
    '#ec4899', '#f43f5e',
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def title_hash(text: str) -> int:
    """
    Order-sensitive string hash used for palette selection.

    Accumulates ``hash = code + ((hash << 5) - hash)`` over the UTF-16 code
    units of ``text``, with the shift applied to the 32-bit signed value of
    the running hash.

    Args:
        text: String to hash

    Returns:
        Signed hash value
    """
    encoded = text.encode('utf-16-le', 'surrogatepass')
    acc = 0
    for i in range(0, len(encoded), 2):
        code = encoded[i] | (encoded[i + 1] << 8)
        shifted = _to_int32(_to_int32(acc) << 5)
        acc = code + (shifted - acc)
    return acc


def pick_color(text: str) -> str:
    """Deterministically choose a palette color for ``text``."""
    return PALETTE[abs(title_hash(text)) % len(PALETTE)]


def strip_title_noise(title: str) -> str:
    """
    Remove capacity and clock-time fragments from a title.

    Args:
        title: Raw entry title

    Returns:
        Trimmed title without "N of M" and "H:MM am" fragments
    """
    cleaned = CAPACITY_PATTERN.sub('', title)
    cleaned = CLOCK_TIME_PATTERN.sub('', cleaned)
    return cleaned.strip()


def candidate_name(title: str) -> str:
    """Cleaned title with leading and trailing dash separators removed."""
    cleaned = CAPACITY_PATTERN.sub('', title)
    cleaned = CLOCK_TIME_PATTERN.sub('', cleaned)
    cleaned = TRAILING_DASH_PATTERN.sub('', cleaned)
    cleaned = LEADING_DASH_PATTERN.sub('', cleaned)
    return cleaned.strip()


def _format_display_name(name: str) -> str:
    return ' '.join(word[:1].upper() + word[1:].lower() for word in name.split())


def classify_activity(title: str) -> Optional[ActivityClassification]:
    """
    Classify an activity from its title.

    Checks the fixed rule table first, then semantic keyword groups, and
    finally synthesizes a classification from the cleaned title.

    Args:
        title: Entry title (may be empty)

    Returns:
        ActivityClassification, or None if nothing remains after cleaning
    """
    lower_title = title.lower()

    for trigger, category, display_name, color in ACTIVITY_RULES:
        if trigger in lower_title:
            return ActivityClassification(
                category=category,
                filter_name=display_name,
                specific_name=display_name,
                display_name=display_name,
                color=color
            )

    name = candidate_name(title)
    if not name:
        return None

    for matches, category, display_name, color, keep_name in KEYWORD_GROUPS:
        if matches(lower_title):
            return ActivityClassification(
                category=category,
                filter_name=display_name,
                specific_name=name if keep_name else display_name,
                display_name=display_name,
                color=color
            )

    display_name = _format_display_name(name)
    classification = ActivityClassification(
        category=re.sub(r'\s+', '-', name.lower()),
        filter_name=display_name,
        specific_name=name,
        display_name=display_name,
        color=pick_color(name)
    )
    logger.debug(
        f"Synthesized classification '{classification.category}' for '{title}'"
    )
    return classification
