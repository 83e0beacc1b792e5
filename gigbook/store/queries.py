"""Database query functions for income entries.

Each mutation is a single transaction on its own connection. Mutations that
target a missing id return None (or False for delete) and write nothing.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

from gigbook.dates import month_range, previous_month, to_month
from gigbook.domain import money
from gigbook.domain.entries import (
    DEFAULT_OVERDUE_DAYS,
    IncomeEntry,
    Status,
    VatType,
    apply_status,
    duplicate_fields,
    validate_entry_fields,
)
from gigbook.domain.kpi import KPIData, calculate_trend
from gigbook.domain.models import ClientName, EntryId
from gigbook.store.schema import get_db_path

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = (
    "id, date, description, client, amount_gross, amount_paid, vat_type, status, "
    "invoice_sent_date, paid_date, category, notes, calendar_event_id"
)
MONEY_COLUMNS = ("amount_gross", "amount_paid")


@contextmanager
def _connect(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Open a database connection with row factory, closed on exit.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Yields:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def _row_to_entry(row: sqlite3.Row) -> IncomeEntry:
    return IncomeEntry(
        id=EntryId(row["id"]),
        date=row["date"],
        description=row["description"],
        client=ClientName(row["client"]),
        amount_gross=money.from_minor_units(row["amount_gross"]),
        amount_paid=money.from_minor_units(row["amount_paid"]),
        vat_type=VatType(row["vat_type"]),
        status=Status(row["status"]),
        invoice_sent_date=row["invoice_sent_date"],
        paid_date=row["paid_date"],
        category=row["category"],
        notes=row["notes"],
        calendar_event_id=row["calendar_event_id"],
    )


def _to_column_values(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert domain field values to what the table stores."""
    values: dict[str, Any] = {}
    for name, value in fields.items():
        if name in MONEY_COLUMNS and value is not None:
            value = money.to_minor_units(value)
        elif isinstance(value, Enum):
            value = value.value
        values[name] = value
    return values


def _fetch_entry(cursor: sqlite3.Cursor, entry_id: int) -> IncomeEntry | None:
    cursor.execute(f"SELECT {ENTRY_COLUMNS} FROM income_entries WHERE id = ?", (entry_id,))
    row = cursor.fetchone()
    return _row_to_entry(row) if row else None


def _write_entry(cursor: sqlite3.Cursor, entry: IncomeEntry) -> None:
    values = _to_column_values({k: v for k, v in asdict(entry).items() if k != "id"})
    assignments = ", ".join(f"{name} = ?" for name in values)
    cursor.execute(
        f"UPDATE income_entries SET {assignments}, updated_at = datetime('now') WHERE id = ?",
        (*values.values(), entry.id),
    )


def insert_entry(fields: dict[str, Any], db_path: Path | None = None) -> IncomeEntry:
    """Create a new income entry.

    Defaults: status "done", amount_paid 0, vat_type "taxable".

    Args:
        fields: Entry field values (date, description, client, amount_gross, ...).
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The stored entry with its new id.

    Raises:
        ValueError: If the fields are invalid (nothing is written).
        sqlite3.Error: If database operation fails.
    """
    errors = validate_entry_fields(fields)
    if errors:
        raise ValueError("; ".join(errors))

    values = _to_column_values(
        {
            "amount_paid": money.to_money(0),
            "vat_type": VatType.TAXABLE,
            "status": Status.DONE,
            **fields,
        }
    )
    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)

    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(f"INSERT INTO income_entries ({columns}) VALUES ({placeholders})", tuple(values.values()))
            entry_id = cursor.lastrowid
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        entry = _fetch_entry(cursor, entry_id)

    if entry is None:
        raise sqlite3.DatabaseError(f"Inserted entry {entry_id} could not be read back")
    logger.debug("Inserted entry %s", entry_id)
    return entry


def get_entry(entry_id: int, db_path: Path | None = None) -> IncomeEntry | None:
    """Get a single entry by id, or None if it does not exist."""
    with _connect(db_path) as conn:
        return _fetch_entry(conn.cursor(), entry_id)


def get_entries_for_month(year: int, month: int, db_path: Path | None = None) -> list[IncomeEntry]:
    """Get all entries dated within a calendar month.

    Args:
        year: Year.
        month: Month number (1-12).
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Entries ordered by date, then creation order.

    Raises:
        ValueError: If month is out of range.
        sqlite3.Error: If database operation fails.
    """
    since, until, _ = month_range(to_month(year, month))
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {ENTRY_COLUMNS} FROM income_entries WHERE date >= ? AND date < ? ORDER BY date ASC, id ASC",
            (since, until),
        )
        return [_row_to_entry(row) for row in cursor.fetchall()]


def get_all_entries(db_path: Path | None = None, limit: int | None = None) -> list[IncomeEntry]:
    """Get all entries, newest first.

    Args:
        db_path: Path to the database file. If None, uses default location.
        limit: Maximum number of entries to return. If None, returns all.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = f"SELECT {ENTRY_COLUMNS} FROM income_entries ORDER BY date DESC, id DESC"
        params: list[Any] = []

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        return [_row_to_entry(row) for row in cursor.fetchall()]


def update_entry(entry_id: int, fields: dict[str, Any], db_path: Path | None = None) -> IncomeEntry | None:
    """Manually edit an entry.

    Any field may be changed, including clearing invoice_sent_date or
    paid_date. Lifecycle ordering is not enforced for manual edits.

    Args:
        entry_id: Entry id.
        fields: Fields to change.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The updated entry, or None if no entry has that id.

    Raises:
        ValueError: If the fields are invalid (nothing is written).
        sqlite3.Error: If database operation fails.
    """
    errors = validate_entry_fields(fields, partial=True)
    if errors:
        raise ValueError("; ".join(errors))

    values = _to_column_values(fields)
    if not values:
        return get_entry(entry_id, db_path)

    assignments = ", ".join(f"{name} = ?" for name in values)
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                f"UPDATE income_entries SET {assignments}, updated_at = datetime('now') WHERE id = ?",
                (*values.values(), entry_id),
            )
            if cursor.rowcount == 0:
                logger.debug("Update skipped, entry %s not found", entry_id)
                return None
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        return _fetch_entry(cursor, entry_id)


def set_entry_status(entry_id: int, status: Status, today: date, db_path: Path | None = None) -> IncomeEntry | None:
    """Transition an entry's stored status, applying the lifecycle side effects.

    Args:
        entry_id: Entry id.
        status: Target status.
        today: Date stamped on invoice_sent_date / paid_date.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The updated entry, or None if no entry has that id.

    Raises:
        ValueError: If the transition goes backwards in the lifecycle.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            existing = _fetch_entry(cursor, entry_id)
            if existing is None:
                logger.debug("Status change skipped, entry %s not found", entry_id)
                return None
            updated = apply_status(existing, status, today)
            _write_entry(cursor, updated)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise

    logger.debug("Entry %s status %s -> %s", entry_id, existing.status.value, updated.status.value)
    return updated


def mark_invoice_sent(entry_id: int, today: date, db_path: Path | None = None) -> IncomeEntry | None:
    """Mark an invoice as sent. Re-sending keeps the first invoice_sent_date."""
    return set_entry_status(entry_id, Status.SENT, today, db_path)


def mark_as_paid(entry_id: int, today: date, db_path: Path | None = None) -> IncomeEntry | None:
    """Mark an entry as fully paid (amount_paid = amount_gross, paid_date = today)."""
    return set_entry_status(entry_id, Status.PAID, today, db_path)


def duplicate_entry(entry_id: int, today: date, db_path: Path | None = None) -> IncomeEntry | None:
    """Re-log a recurring job as a new entry dated today.

    Returns:
        The new entry, or None if the source entry does not exist.
    """
    source = get_entry(entry_id, db_path)
    if source is None:
        return None
    return insert_entry(duplicate_fields(source, today), db_path)


def delete_entry(entry_id: int, db_path: Path | None = None) -> bool:
    """Permanently delete an entry.

    Returns:
        True if an entry was deleted, False if no entry had that id.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM income_entries WHERE id = ?", (entry_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise

    logger.debug("Delete entry %s: %s", entry_id, "deleted" if deleted else "not found")
    return deleted


def get_unique_clients(db_path: Path | None = None) -> list[ClientName]:
    """Get distinct client names, sorted alphabetically."""
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT DISTINCT client FROM income_entries ORDER BY client")
        return [ClientName(row[0]) for row in cursor.fetchall()]


def get_imported_calendar_event_ids(db_path: Path | None = None) -> set[str]:
    """Get ids of calendar events that already have an entry."""
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT calendar_event_id FROM income_entries WHERE calendar_event_id IS NOT NULL")
        return {row[0] for row in cursor.fetchall()}


def _paid_between(cursor: sqlite3.Cursor, since: str, until: str) -> int:
    cursor.execute(
        "SELECT COALESCE(SUM(amount_paid), 0) FROM income_entries WHERE date >= ? AND date < ? AND status = ?",
        (since, until, Status.PAID.value),
    )
    return int(cursor.fetchone()[0])


def get_kpis_for_month(
    year: int,
    month: int,
    today: date,
    overdue_days: int = DEFAULT_OVERDUE_DAYS,
    db_path: Path | None = None,
) -> KPIData:
    """Compute dashboard KPIs with aggregate queries.

    Same semantics as gigbook.domain.kpi.calculate_kpis, without loading
    every entry into memory.

    Args:
        year: Selected year.
        month: Selected month (1-12).
        today: Reference date for "past" and overdue checks.
        overdue_days: Overdue threshold in days.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        ValueError: If month is out of range.
        sqlite3.Error: If database operation fails.
    """
    since, until, _ = month_range(to_month(year, month))
    prev_since, prev_until, _ = month_range(to_month(*previous_month(year, month)))
    today_str = today.isoformat()

    with _connect(db_path) as conn:
        cursor = conn.cursor()

        # Invoiced, awaiting payment (all time)
        cursor.execute(
            "SELECT COALESCE(SUM(amount_gross - amount_paid), 0), COUNT(*) FROM income_entries WHERE status = ?",
            (Status.SENT.value,),
        )
        outstanding, invoiced_count = cursor.fetchone()

        # Past work with no invoice (all time)
        cursor.execute(
            "SELECT COALESCE(SUM(amount_gross), 0), COUNT(*) FROM income_entries WHERE status = ? AND date < ?",
            (Status.DONE.value, today_str),
        )
        ready_to_invoice, ready_count = cursor.fetchone()

        cursor.execute(
            "SELECT COALESCE(SUM(amount_gross), 0), COUNT(*) FROM income_entries WHERE date >= ? AND date < ?",
            (since, until),
        )
        this_month, this_month_count = cursor.fetchone()

        total_paid = _paid_between(cursor, since, until)
        prev_paid = _paid_between(cursor, prev_since, prev_until)

        # days_since(sent, today) > N  <=>  sent < today - N days
        cursor.execute(
            "SELECT COUNT(*) FROM income_entries "
            "WHERE status = ? AND invoice_sent_date IS NOT NULL AND invoice_sent_date < date(?, ?)",
            (Status.SENT.value, today_str, f"-{overdue_days} days"),
        )
        overdue_count = cursor.fetchone()[0]

    total_paid_money = money.from_minor_units(total_paid)
    prev_paid_money = money.from_minor_units(prev_paid)
    trend, has_baseline = calculate_trend(total_paid_money, prev_paid_money)

    return KPIData(
        outstanding=money.from_minor_units(outstanding),
        ready_to_invoice=money.from_minor_units(ready_to_invoice),
        ready_to_invoice_count=ready_count,
        this_month=money.from_minor_units(this_month),
        this_month_count=this_month_count,
        total_paid=total_paid_money,
        previous_month_paid=prev_paid_money,
        trend=trend,
        has_trend_baseline=has_baseline,
        overdue_count=overdue_count,
        invoiced_count=invoiced_count,
    )
