"""AWS Lambda handler for the daily activity manifest."""
import json
import logging
import os
import time
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from scraper.google_calendar import GoogleCalendarClient, calendar_window
from processor.event_processor import EventProcessor
from processor.aggregator import Dashboard, day_window


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _parse_date_range(
    event: Dict[str, Any]
) -> Tuple[Optional[date], Optional[date]]:
    """
    Read the optional date range from the invocation payload.

    Args:
        event: Invocation payload with optional 'start_date'/'end_date'

    Returns:
        Tuple of (start_date, end_date); (None, None) if absent or invalid
    """
    start_value = event.get('start_date')
    end_value = event.get('end_date')
    if not start_value or not end_value:
        return None, None

    try:
        return date.fromisoformat(start_value), date.fromisoformat(end_value)
    except (TypeError, ValueError):
        logging.getLogger(__name__).warning(
            f"Ignoring invalid date range: {start_value!r} - {end_value!r}"
        )
        return None, None


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {'statusCode': status_code, 'body': json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Build the activity manifest for a window of days.

    Args:
        event: Invocation payload with optional 'type', 'status',
            'start_date' and 'end_date'
        context: Lambda context object

    Returns:
        Response dict with statusCode and the per-day manifest
    """
    # Read configuration from environment variables
    calendar_id = os.environ.get('CALENDAR_ID', '')
    api_key = os.environ.get('GOOGLE_API_KEY', '')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    days_ahead = int(os.environ.get('DAYS_AHEAD', '3'))
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    timezone_name = os.environ.get('TIMEZONE', 'America/Los_Angeles')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)
    event = event or {}

    start_time = time.time()
    logger.info(
        "Lambda execution started",
        extra={
            'calendar_id': calendar_id,
            'days_ahead': days_ahead,
            'timezone': timezone_name
        }
    )

    try:
        tz = ZoneInfo(timezone_name)
        now = datetime.now(tz)
        start_date, end_date = _parse_date_range(event)
        days = day_window(start_date, end_date, now.date(), days_ahead)

        client = GoogleCalendarClient(
            calendar_id=calendar_id,
            api_key=api_key,
            timeout=timeout_seconds,
            default_tz=tz
        )
        processor = EventProcessor()
        dashboard = Dashboard(tz=tz)
        dashboard.set_filter('type', event.get('type'))
        dashboard.set_filter('status', event.get('status'))

        # A failed fetch still yields an (empty) manifest
        fetch_error = None
        try:
            time_min, time_max = calendar_window(days[0], days[-1], tz)
            raw_entries = client.fetch_entries(time_min, time_max)
            logger.info(f"Fetched {len(raw_entries)} raw entries from calendar")
        except Exception as e:
            logger.error(
                f"Failed to fetch calendar entries after retries: {str(e)}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            fetch_error = e
            raw_entries = []

        records = processor.process_events(raw_entries, now)
        dashboard.refresh(records, days)

        duration = time.time() - start_time
        body = {
            'message': 'Manifest built successfully',
            'generated_at': now.isoformat(),
            'statistics': {
                'raw_entries_fetched': len(raw_entries),
                'records_processed': len(records),
                'duration_seconds': round(duration, 2)
            },
            **dashboard.summary()
        }

        if fetch_error is not None:
            body['message'] = 'Failed to fetch calendar entries'
            body['error'] = str(fetch_error)
            body['error_type'] = type(fetch_error).__name__
            return _response(502, body)

        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'records_processed': len(records)
            }
        )
        return _response(200, body)

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _response(500, {
            'message': 'Manifest build failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'duration_seconds': round(duration, 2)
        })
