"""Google Calendar client supplying raw scheduling entries."""
import logging
import time
from datetime import date, datetime, time as dt_time, tzinfo
from typing import Any, Dict, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from processor.models import RawEntry

logger = logging.getLogger(__name__)

BLOCK_TAGS = ['p', 'div', 'li', 'tr']


def calendar_window(
    start_date: date,
    end_date: date,
    tz: tzinfo
) -> Tuple[datetime, datetime]:
    """
    Request window spanning whole local days.

    Args:
        start_date: First day
        end_date: Last day (inclusive)
        tz: Local timezone

    Returns:
        Tuple of (time_min, time_max) as aware datetimes
    """
    time_min = datetime.combine(start_date, dt_time.min, tzinfo=tz)
    time_max = datetime.combine(
        end_date, dt_time(23, 59, 59, 999000), tzinfo=tz
    )
    return time_min, time_max


def html_to_text(description: Optional[str]) -> Optional[str]:
    """
    Flatten an HTML description into plain text lines.

    Line breaks and block elements become newlines; entities are decoded.

    Args:
        description: Description as returned by the API

    Returns:
        Plain text, or the input unchanged when it has no markup
    """
    if not description or '<' not in description:
        return description

    soup = BeautifulSoup(description, 'html.parser')
    for br in soup.find_all('br'):
        br.replace_with('\n')
    for block in soup.find_all(BLOCK_TAGS):
        block.append('\n')
    return soup.get_text()


class GoogleCalendarClient:
    """Client for the Google Calendar v3 events endpoint."""

    BASE_URL = "https://www.googleapis.com/calendar/v3/calendars"
    MAX_RETRIES = 3
    BASE_DELAY = 1  # seconds

    def __init__(
        self,
        calendar_id: str,
        api_key: str,
        timeout: int = 30,
        default_tz: Optional[tzinfo] = None
    ):
        """
        Initialize the calendar client.

        Args:
            calendar_id: Calendar identifier (usually an email address)
            api_key: Google API key
            timeout: HTTP request timeout in seconds (default: 30)
            default_tz: Timezone for timestamps without an offset
        """
        self.calendar_id = calendar_id
        self.api_key = api_key
        self.timeout = timeout
        self.default_tz = default_tz

    @property
    def events_url(self) -> str:
        return f"{self.BASE_URL}/{self.calendar_id}/events"

    def fetch_entries(
        self,
        time_min: datetime,
        time_max: datetime
    ) -> List[RawEntry]:
        """
        Fetch entries starting within a time window.

        Args:
            time_min: Window start
            time_max: Window end

        Returns:
            List of RawEntry objects ordered by start time

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        logger.info(
            f"Fetching entries between {time_min.isoformat()} "
            f"and {time_max.isoformat()}"
        )
        params = {
            'key': self.api_key,
            'timeMin': time_min.isoformat(),
            'timeMax': time_max.isoformat(),
            'singleEvents': 'true',
            'orderBy': 'startTime'
        }

        payload = self._get_json(params)
        entries = []
        for item in payload.get('items') or []:
            try:
                entries.append(self._parse_item(item))
            except Exception as e:
                logger.warning(f"Failed to parse calendar item: {e}")
                continue

        logger.info(f"Successfully fetched {len(entries)} entries")
        return entries

    def _get_json(self, params: Dict[str, str]) -> Dict[str, Any]:
        """
        GET the events endpoint with exponential backoff.

        Args:
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                logger.info(
                    f"Requesting events (attempt {attempt + 1}/{self.MAX_RETRIES})"
                )
                response = requests.get(
                    self.events_url,
                    params=params,
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()

            except requests.RequestException as e:
                if attempt < self.MAX_RETRIES - 1:
                    delay = self.BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.MAX_RETRIES} retry attempts failed. Last error: {e}"
                    )
                    raise

    def _parse_item(self, item: Dict[str, Any]) -> RawEntry:
        """
        Convert one API item into a RawEntry.

        Args:
            item: Event resource from the API

        Returns:
            RawEntry (timestamps are None when unparseable)
        """
        return RawEntry(
            id=str(item.get('id', '')),
            title=item.get('summary') or '',
            description=html_to_text(item.get('description')),
            start_time=self._parse_timestamp(item.get('start')),
            end_time=self._parse_timestamp(item.get('end')),
            html_link=item.get('htmlLink')
        )

    def _parse_timestamp(
        self,
        value: Optional[Dict[str, str]]
    ) -> Optional[datetime]:
        """
        Parse a start/end object into an aware datetime.

        Args:
            value: Object with 'dateTime' or, for all-day items, 'date'

        Returns:
            Aware datetime or None if parsing fails
        """
        if not value:
            return None

        try:
            if value.get('dateTime'):
                parsed = datetime.fromisoformat(
                    value['dateTime'].replace('Z', '+00:00')
                )
            elif value.get('date'):
                parsed = datetime.combine(
                    date.fromisoformat(value['date']), dt_time.min
                )
            else:
                return None
        except ValueError:
            logger.warning(f"Invalid timestamp in calendar item: {value}")
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self.default_tz)
        return parsed
