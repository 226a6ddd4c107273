"""Guest roster extraction from free-text descriptions."""
import re
from typing import Optional

from processor.models import Guest, Roster

SEPARATOR_MARKER = '==='
COUNT_PREFIX_PATTERN = re.compile(r'^(\d+)x\s+')
CANCELLED_PATTERN = re.compile(r'CANCELLED', re.IGNORECASE)
CONTACT_SUFFIX_PATTERN = re.compile(r'\s*\([^)]*\)$')


def parse_roster(description: Optional[str]) -> Roster:
    """
    Parse guest lines such as ``2x Jane Doe (555-1234)`` into a Roster.

    Lines that are blank, start with ``===`` or lack a ``<count>x`` prefix
    are skipped. A line mentioning CANCELLED marks its guests cancelled;
    cancelled guests count toward ``total`` but not ``active``.

    Args:
        description: Entry description, or None

    Returns:
        Roster with guests in line order
    """
    roster = Roster()
    if not description:
        return roster

    for line in description.split('\n'):
        line = line.strip()
        if not line or line.startswith(SEPARATOR_MARKER):
            continue

        match = COUNT_PREFIX_PATTERN.match(line)
        if not match:
            continue

        count = int(match.group(1))
        if count <= 0:
            continue

        is_cancelled = CANCELLED_PATTERN.search(line) is not None
        name = CANCELLED_PATTERN.sub('', line[match.end():]).strip()
        name = CONTACT_SUFFIX_PATTERN.sub('', name).strip()
        if not name:
            continue

        roster.guests.append(
            Guest(count=count, name=name, is_cancelled=is_cancelled)
        )
        roster.total += count
        if not is_cancelled:
            roster.active += count

    return roster
