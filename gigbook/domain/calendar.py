"""Pure mapping from calendar events to draft income entries."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from gigbook.domain import money
from gigbook.domain.entries import Status, VatType

UNTITLED_EVENT = "Untitled event"


@dataclass(frozen=True)
class CalendarEvent:
    """Immutable calendar event candidate for import."""

    id: str
    title: str
    start: datetime
    end: datetime


def event_to_draft(event: CalendarEvent, client: str = "", amount_gross: Any = 0) -> dict[str, Any]:
    """Convert a calendar event into entry fields ready for insert_entry.

    The event title becomes the description and the start date becomes the
    job date. The event id is kept so the same event is not imported twice.
    """
    return {
        "date": event.start.date().isoformat(),
        "description": event.title.strip() or UNTITLED_EVENT,
        "client": client,
        "amount_gross": money.to_money(amount_gross),
        "amount_paid": money.to_money(0),
        "vat_type": VatType.TAXABLE,
        "status": Status.DONE,
        "calendar_event_id": event.id,
    }


def new_events(events: list[CalendarEvent], imported_ids: set[str]) -> list[CalendarEvent]:
    """Events not yet imported, in start order."""
    return sorted((e for e in events if e.id not in imported_ids), key=lambda e: e.start)
