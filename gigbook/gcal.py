"""Google Calendar API interactions."""

import calendar
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from gigbook.domain.calendar import UNTITLED_EVENT, CalendarEvent

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.googleapis.com/calendar/v3"


class CalendarAuthError(RuntimeError):
    """The access token was rejected (expired or revoked)."""


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First instant and last second of a month as RFC 3339 timestamps (UTC)."""
    last_day = calendar.monthrange(year, month)[1]
    time_min = datetime(year, month, 1, 0, 0, 0).strftime("%Y-%m-%dT%H:%M:%SZ")
    time_max = datetime(year, month, last_day, 23, 59, 59).strftime("%Y-%m-%dT%H:%M:%SZ")
    return time_min, time_max


def _parse_event_time(value: dict[str, Any] | None) -> datetime | None:
    """Parse an event start/end, which is either {"dateTime": ...} or {"date": ...} for all-day events."""
    if not value:
        return None
    raw = value.get("dateTime") or value.get("date")
    if not raw:
        return None
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        # all-day events carry no offset
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_events(items: list[dict[str, Any]]) -> list[CalendarEvent]:
    """Convert raw API items to CalendarEvents, dropping items without id or start."""
    events = []
    for item in items:
        start = _parse_event_time(item.get("start"))
        if not item.get("id") or start is None:
            logger.debug("Skipping calendar item without id or start: %s", item.get("id"))
            continue
        end = _parse_event_time(item.get("end")) or start
        events.append(
            CalendarEvent(id=item["id"], title=item.get("summary") or UNTITLED_EVENT, start=start, end=end)
        )
    return events


def list_events_for_month(year: int, month: int, token: str, calendar_id: str = "primary") -> list[CalendarEvent]:
    """Fetch all events of a calendar for one month.

    Args:
        year: Year.
        month: Month number (1-12).
        token: OAuth bearer token.
        calendar_id: Calendar to read (default: the user's primary calendar).

    Returns:
        Events ordered by start time.

    Raises:
        CalendarAuthError: If the token is expired or revoked (HTTP 401/403).
        requests.RequestException: If the API request fails otherwise.
    """
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }
    time_min, time_max = month_bounds(year, month)
    params = {
        "timeMin": time_min,
        "timeMax": time_max,
        "singleEvents": "true",
        "orderBy": "startTime",
        "fields": "items(id,summary,start,end)",
        "maxResults": 500,
    }

    url = f"{API_BASE_URL}/calendars/{calendar_id}/events"
    response = requests.get(url, headers=headers, params=params, timeout=30)
    if response.status_code in (401, 403):
        raise CalendarAuthError("Google access token is expired or revoked")
    response.raise_for_status()

    items = response.json().get("items", [])
    logger.debug("Calendar returned %d item(s) for %d-%02d", len(items), year, month)
    return parse_events(items)


def get_token() -> Optional[str]:
    """Get Google Calendar access token from environment.

    Returns:
        Token string or None if not set.
    """
    return os.environ.get("GOOGLE_CALENDAR_TOKEN")
