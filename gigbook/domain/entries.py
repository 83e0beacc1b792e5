"""Pure functions for income entries and their invoice lifecycle.

This module contains the functional core for entry operations:
- No I/O operations (no database, no console, no files)
- No side effects; transitions return new entries
- Today's date is always a parameter
- Easy to test

Lifecycle: done -> invoice-sent -> paid. The effective status shown to the
user is derived from the stored status and the job date and is never stored.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any

from gigbook.dates import days_since, is_past_date
from gigbook.domain import money
from gigbook.domain.models import ClientName, EntryId, Money

DEFAULT_OVERDUE_DAYS = 30


class Status(str, Enum):
    """Stored lifecycle marker."""

    DONE = "done"
    SENT = "invoice-sent"
    PAID = "paid"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [Status.DONE, Status.SENT, Status.PAID]


class VatType(str, Enum):
    TAXABLE = "taxable"
    ZERO_RATED = "zero-rated"
    TAX_INCLUSIVE = "tax-inclusive"


class FilterType(str, Enum):
    ALL = "all"
    READY_TO_INVOICE = "ready-to-invoice"
    INVOICED = "invoiced"
    PAID = "paid"
    OVERDUE = "overdue"


CATEGORIES = ["performance", "production", "recording", "teaching", "arrangement", "other"]


@dataclass(frozen=True)
class IncomeEntry:
    """Immutable income entry (one recorded job / invoice)."""

    id: EntryId
    date: str
    description: str
    client: ClientName
    amount_gross: Money
    amount_paid: Money
    vat_type: VatType = VatType.TAXABLE
    status: Status = Status.DONE
    invoice_sent_date: str | None = None
    paid_date: str | None = None
    category: str | None = None
    notes: str | None = None
    calendar_event_id: str | None = None


# ─── Status derivation ───────────────────────────────────────────────────────


def effective_status(entry: IncomeEntry, today: date) -> Status | None:
    """Compute the displayed status of an entry.

    Args:
        entry: The entry.
        today: Reference date.

    Returns:
        The stored status if it is SENT or PAID; None if the job date is
        today or later (nothing to act on yet); otherwise DONE.
    """
    if entry.status in (Status.SENT, Status.PAID):
        return entry.status
    if not is_past_date(entry.date, today):
        return None
    return Status.DONE


def is_overdue(entry: IncomeEntry, today: date, threshold_days: int = DEFAULT_OVERDUE_DAYS) -> bool:
    """Check if an invoice was sent more than threshold_days ago and is still unpaid."""
    if entry.status != Status.SENT or not entry.invoice_sent_date:
        return False
    return days_since(entry.invoice_sent_date, today) > threshold_days


# ─── Lifecycle transitions ───────────────────────────────────────────────────


def apply_status(entry: IncomeEntry, status: Status, today: date) -> IncomeEntry:
    """Transition an entry to a new stored status with its side effects.

    - SENT: invoice_sent_date is set to today only if not already set.
    - PAID: paid_date is set to today and amount_paid to amount_gross.

    Args:
        entry: Entry to transition.
        status: Target status.
        today: Date stamped on the tracking fields.

    Returns:
        The transitioned entry.

    Raises:
        ValueError: If the target status is earlier in the lifecycle than the
            current one (e.g. paid back to invoice-sent).
    """
    status = Status(status)
    if status.rank < entry.status.rank:
        raise ValueError(f"Cannot move entry {entry.id} back from '{entry.status.value}' to '{status.value}'")

    if status == Status.SENT:
        return replace(entry, status=status, invoice_sent_date=entry.invoice_sent_date or today.isoformat())
    if status == Status.PAID:
        return replace(entry, status=status, paid_date=today.isoformat(), amount_paid=entry.amount_gross)
    return replace(entry, status=status)


def mark_invoice_sent(entry: IncomeEntry, today: date) -> IncomeEntry:
    return apply_status(entry, Status.SENT, today)


def mark_as_paid(entry: IncomeEntry, today: date) -> IncomeEntry:
    return apply_status(entry, Status.PAID, today)


def duplicate_fields(entry: IncomeEntry, today: date) -> dict[str, Any]:
    """Field values for a new entry re-logging a recurring job.

    Copies everything except the id and calendar link, dates the copy today,
    and resets status, payment and tracking dates.
    """
    return {
        "date": today.isoformat(),
        "description": entry.description,
        "client": entry.client,
        "amount_gross": entry.amount_gross,
        "amount_paid": money.to_money(0),
        "vat_type": entry.vat_type,
        "status": Status.DONE,
        "invoice_sent_date": None,
        "paid_date": None,
        "category": entry.category,
        "notes": entry.notes,
    }


# ─── Validation ──────────────────────────────────────────────────────────────

ENTRY_FIELDS = {
    "date",
    "description",
    "client",
    "amount_gross",
    "amount_paid",
    "vat_type",
    "status",
    "invoice_sent_date",
    "paid_date",
    "category",
    "notes",
    "calendar_event_id",
}
REQUIRED_FIELDS = ("date", "description", "client", "amount_gross")
NOT_NULL_FIELDS = ("amount_paid", "status", "vat_type")


def _check_date(value: Any) -> bool:
    """True only for canonical YYYY-MM-DD strings, which sort and compare as dates in SQL."""
    try:
        return date.fromisoformat(value).isoformat() == value
    except (TypeError, ValueError):
        return False


def validate_entry_fields(fields: dict[str, Any], partial: bool = False) -> list[str]:
    """Validate entry field values before they reach the store.

    Args:
        fields: Field name to value mapping.
        partial: If True (an edit), required fields may be absent but not blank.

    Returns:
        List of error messages; empty if valid.
    """
    errors: list[str] = []

    unknown = sorted(set(fields) - ENTRY_FIELDS)
    if unknown:
        errors.append(f"Unknown field(s): {', '.join(unknown)}")

    for name in REQUIRED_FIELDS:
        if (not partial or name in fields) and fields.get(name) is None:
            errors.append(f"'{name}' is required")

    for name in NOT_NULL_FIELDS:
        if name in fields and fields[name] is None:
            errors.append(f"'{name}' must not be empty")

    for name in ("description", "client"):
        if name in fields and fields[name] is not None and not str(fields[name]).strip():
            errors.append(f"'{name}' must not be blank")

    for name in ("date", "invoice_sent_date", "paid_date"):
        value = fields.get(name)
        if value is not None and not _check_date(value):
            errors.append(f"'{name}' must be a date in YYYY-MM-DD format, got {value!r}")

    for name in ("amount_gross", "amount_paid"):
        value = fields.get(name)
        if value is None:
            continue
        try:
            amount = money.to_money(value)
        except ValueError:
            errors.append(f"'{name}' must be a number, got {value!r}")
            continue
        if amount < 0:
            errors.append(f"'{name}' must not be negative")

    for name, enum_type in (("status", Status), ("vat_type", VatType)):
        value = fields.get(name)
        if value is None:
            continue
        try:
            enum_type(value)
        except ValueError:
            errors.append(f"'{name}' must be one of {', '.join(member.value for member in enum_type)}")

    return errors


# ─── Filtering and display helpers ───────────────────────────────────────────


def matches_filter(
    entry: IncomeEntry, filter_type: FilterType, today: date, overdue_days: int = DEFAULT_OVERDUE_DAYS
) -> bool:
    if filter_type == FilterType.READY_TO_INVOICE:
        return effective_status(entry, today) == Status.DONE
    if filter_type == FilterType.INVOICED:
        return effective_status(entry, today) == Status.SENT
    if filter_type == FilterType.PAID:
        return effective_status(entry, today) == Status.PAID
    if filter_type == FilterType.OVERDUE:
        return is_overdue(entry, today, overdue_days)
    return True


def matches_search(entry: IncomeEntry, query: str) -> bool:
    """Case-insensitive substring match on description, client and category."""
    query = query.strip().lower()
    if not query:
        return True
    haystacks = [entry.description, entry.client, entry.category or ""]
    return any(query in text.lower() for text in haystacks)


def filter_entries(
    entries: list[IncomeEntry],
    today: date,
    filter_type: FilterType = FilterType.ALL,
    search: str = "",
    newest_first: bool = True,
    overdue_days: int = DEFAULT_OVERDUE_DAYS,
) -> list[IncomeEntry]:
    """Apply status filter and search, then sort by date."""
    result = [
        e for e in entries if matches_filter(e, filter_type, today, overdue_days) and matches_search(e, search)
    ]
    return sorted(result, key=lambda e: e.date, reverse=newest_first)


def vat_amount(entry: IncomeEntry, vat_rate: float | Money) -> Money:
    """VAT portion of an entry's gross amount, for display only.

    Args:
        entry: The entry.
        vat_rate: VAT rate in percent (e.g. 18).

    Returns:
        VAT on top of gross for taxable entries, VAT contained in gross for
        tax-inclusive entries, zero for zero-rated entries.
    """
    if entry.vat_type == VatType.ZERO_RATED:
        return money.to_money(0)
    if entry.vat_type == VatType.TAX_INCLUSIVE:
        return money.divide(money.multiply(entry.amount_gross, vat_rate), money.add(100, vat_rate))
    return money.divide(money.multiply(entry.amount_gross, vat_rate), 100)


def unique_clients(entries: list[IncomeEntry]) -> list[ClientName]:
    return sorted({e.client for e in entries})
