"""Tests for gigbook.store against a temporary SQLite database."""

import sqlite3
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from gigbook.domain.entries import Status, VatType
from gigbook.domain.kpi import calculate_kpis
from gigbook.store import (
    database_exists,
    delete_entry,
    duplicate_entry,
    get_all_entries,
    get_entries_for_month,
    get_entry,
    get_imported_calendar_event_ids,
    get_kpis_for_month,
    get_unique_clients,
    init_database,
    insert_entry,
    mark_as_paid,
    mark_invoice_sent,
    set_entry_status,
    update_entry,
)

TODAY = date(2024, 3, 1)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "gigbook.db"
    init_database(path)
    return path


def job(**overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "date": "2024-01-10",
        "description": "Club night",
        "client": "Barby",
        "amount_gross": "500.00",
    }
    fields.update(overrides)
    return fields


class TestSchema:
    """Tests for init_database."""

    def test_creates_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "gigbook.db"
        assert not database_exists(path)

        init_database(path)

        assert database_exists(path)

    def test_init_is_idempotent(self, db_path: Path) -> None:
        insert_entry(job(), db_path)
        init_database(db_path)
        assert len(get_all_entries(db_path)) == 1

    def test_migrates_old_table(self, tmp_path: Path) -> None:
        """Databases created before calendar import gain the new columns."""
        path = tmp_path / "old.db"
        conn = sqlite3.connect(path)
        conn.execute(
            "CREATE TABLE income_entries (id INTEGER PRIMARY KEY AUTOINCREMENT, date TEXT NOT NULL, "
            "description TEXT NOT NULL, client TEXT NOT NULL, amount_gross INTEGER NOT NULL DEFAULT 0, "
            "amount_paid INTEGER NOT NULL DEFAULT 0, vat_type TEXT NOT NULL DEFAULT 'taxable', "
            "status TEXT NOT NULL DEFAULT 'done', invoice_sent_date TEXT, paid_date TEXT, category TEXT, "
            "notes TEXT, created_at TEXT NOT NULL DEFAULT (datetime('now')))"
        )
        conn.commit()
        conn.close()

        init_database(path)

        conn = sqlite3.connect(path)
        columns = [row[1] for row in conn.execute("PRAGMA table_info(income_entries)")]
        conn.close()
        assert "calendar_event_id" in columns
        assert "updated_at" in columns


class TestInsertAndRead:
    """Tests for insert_entry, get_entry and listing."""

    def test_insert_applies_defaults(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)

        assert entry.id == 1
        assert entry.status == Status.DONE
        assert entry.vat_type == VatType.TAXABLE
        assert entry.amount_gross == Decimal("500.00")
        assert entry.amount_paid == Decimal("0.00")
        assert get_entry(entry.id, db_path) == entry

    def test_amounts_survive_storage_exactly(self, db_path: Path) -> None:
        entry = insert_entry(job(amount_gross=0.1 + 0.2), db_path)
        assert get_entry(entry.id, db_path).amount_gross == Decimal("0.30")  # type: ignore[union-attr]

    def test_invalid_fields_write_nothing(self, db_path: Path) -> None:
        with pytest.raises(ValueError, match="client"):
            insert_entry(job(client=""), db_path)
        assert get_all_entries(db_path) == []

    @pytest.mark.parametrize("name", ["amount_paid", "status", "vat_type"])
    def test_explicit_none_rejected_before_write(self, db_path: Path, name: str) -> None:
        with pytest.raises(ValueError, match=name):
            insert_entry(job(**{name: None}), db_path)
        assert get_all_entries(db_path) == []

    def test_non_canonical_date_rejected(self, db_path: Path) -> None:
        with pytest.raises(ValueError, match="YYYY-MM-DD"):
            insert_entry(job(date="20240110"), db_path)
        assert get_all_entries(db_path) == []

    def test_unreadable_insert_raises_database_error(self, db_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("gigbook.store.queries._fetch_entry", lambda cursor, entry_id: None)
        with pytest.raises(sqlite3.DatabaseError, match="could not be read back"):
            insert_entry(job(), db_path)

    def test_get_missing_returns_none(self, db_path: Path) -> None:
        assert get_entry(42, db_path) is None

    def test_entries_for_month_bounds_and_order(self, db_path: Path) -> None:
        insert_entry(job(date="2024-01-31", description="late"), db_path)
        insert_entry(job(date="2024-01-01", description="early"), db_path)
        insert_entry(job(date="2024-02-01", description="next month"), db_path)
        insert_entry(job(date="2023-12-31", description="last year"), db_path)

        entries = get_entries_for_month(2024, 1, db_path)

        assert [e.description for e in entries] == ["early", "late"]

    def test_all_entries_newest_first_with_limit(self, db_path: Path) -> None:
        for day in ("05", "20", "12"):
            insert_entry(job(date=f"2024-01-{day}"), db_path)

        assert [e.date for e in get_all_entries(db_path)] == ["2024-01-20", "2024-01-12", "2024-01-05"]
        assert len(get_all_entries(db_path, limit=2)) == 2


class TestUpdate:
    """Tests for update_entry."""

    def test_partial_update(self, db_path: Path) -> None:
        entry = insert_entry(job(notes="bring cables"), db_path)

        updated = update_entry(entry.id, {"amount_gross": "650", "category": "performance"}, db_path)

        assert updated is not None
        assert updated.amount_gross == Decimal("650.00")
        assert updated.category == "performance"
        assert updated.notes == "bring cables"

    def test_manual_edit_can_clear_tracking_dates(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)
        mark_as_paid(entry.id, TODAY, db_path)

        updated = update_entry(entry.id, {"status": Status.DONE, "paid_date": None}, db_path)

        assert updated is not None
        assert updated.status == Status.DONE
        assert updated.paid_date is None

    def test_missing_returns_none(self, db_path: Path) -> None:
        assert update_entry(99, {"notes": "x"}, db_path) is None

    @pytest.mark.parametrize("name", ["amount_paid", "status", "vat_type"])
    def test_clearing_non_nullable_field_rejected(self, db_path: Path, name: str) -> None:
        entry = insert_entry(job(), db_path)
        with pytest.raises(ValueError, match=name):
            update_entry(entry.id, {name: None}, db_path)
        assert get_entry(entry.id, db_path) == entry

    def test_non_canonical_sent_date_rejected(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)
        with pytest.raises(ValueError, match="invoice_sent_date"):
            update_entry(entry.id, {"invoice_sent_date": "2024-W02-1"}, db_path)
        assert get_entry(entry.id, db_path) == entry

    def test_invalid_update_rejected(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)
        with pytest.raises(ValueError):
            update_entry(entry.id, {"amount_gross": -1}, db_path)
        assert get_entry(entry.id, db_path) == entry


class TestStatusTransitions:
    """Tests for mark_invoice_sent, mark_as_paid and set_entry_status."""

    def test_mark_invoice_sent(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)

        sent = mark_invoice_sent(entry.id, TODAY, db_path)

        assert sent is not None
        assert sent.status == Status.SENT
        assert sent.invoice_sent_date == "2024-03-01"
        assert get_entry(entry.id, db_path) == sent

    def test_resend_keeps_first_date(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)
        mark_invoice_sent(entry.id, date(2024, 2, 1), db_path)

        again = mark_invoice_sent(entry.id, TODAY, db_path)

        assert again.invoice_sent_date == "2024-02-01"  # type: ignore[union-attr]

    def test_mark_as_paid(self, db_path: Path) -> None:
        entry = insert_entry(job(amount_gross="1234.56"), db_path)

        paid = mark_as_paid(entry.id, TODAY, db_path)

        assert paid is not None
        assert paid.amount_paid == Decimal("1234.56")
        assert paid.paid_date == "2024-03-01"
        assert paid.description == entry.description

    def test_backward_transition_rejected(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)
        mark_as_paid(entry.id, TODAY, db_path)

        with pytest.raises(ValueError):
            set_entry_status(entry.id, Status.SENT, TODAY, db_path)
        assert get_entry(entry.id, db_path).status == Status.PAID  # type: ignore[union-attr]

    def test_missing_returns_none(self, db_path: Path) -> None:
        assert mark_as_paid(7, TODAY, db_path) is None
        assert mark_invoice_sent(7, TODAY, db_path) is None


class TestDuplicateAndDelete:
    """Tests for duplicate_entry and delete_entry."""

    def test_duplicate_resets_lifecycle(self, db_path: Path) -> None:
        source = insert_entry(job(category="teaching", calendar_event_id="evt-1"), db_path)
        mark_as_paid(source.id, date(2024, 1, 20), db_path)

        copy = duplicate_entry(source.id, TODAY, db_path)

        assert copy is not None
        assert copy.id != source.id
        assert copy.date == "2024-03-01"
        assert copy.status == Status.DONE
        assert copy.amount_paid == Decimal("0.00")
        assert copy.paid_date is None
        assert copy.calendar_event_id is None
        assert copy.category == "teaching"

    def test_duplicate_missing(self, db_path: Path) -> None:
        assert duplicate_entry(3, TODAY, db_path) is None

    def test_delete(self, db_path: Path) -> None:
        entry = insert_entry(job(), db_path)

        assert delete_entry(entry.id, db_path)
        assert get_entry(entry.id, db_path) is None
        assert not delete_entry(entry.id, db_path)


def test_unique_clients(db_path: Path) -> None:
    for client in ("Zappa", "Barby", "Zappa"):
        insert_entry(job(client=client), db_path)
    assert get_unique_clients(db_path) == ["Barby", "Zappa"]


def test_imported_calendar_event_ids(db_path: Path) -> None:
    insert_entry(job(calendar_event_id="evt-1"), db_path)
    insert_entry(job(), db_path)
    assert get_imported_calendar_event_ids(db_path) == {"evt-1"}


class TestKpisForMonth:
    """SQL KPIs agree with the in-memory calculation."""

    @pytest.fixture
    def populated(self, db_path: Path) -> Path:
        sent = insert_entry(job(date="2024-01-05", amount_gross="1000", amount_paid="200"), db_path)
        update_entry(sent.id, {"status": Status.SENT, "invoice_sent_date": "2024-01-01"}, db_path)
        insert_entry(job(date="2024-01-10", amount_gross="500"), db_path)
        paid = insert_entry(job(date="2024-01-15", amount_gross="700"), db_path)
        mark_as_paid(paid.id, date(2024, 1, 20), db_path)
        insert_entry(job(date="2024-02-10", amount_gross="300"), db_path)
        insert_entry(job(date="2024-03-05", amount_gross="450"), db_path)
        return db_path

    def test_january(self, populated: Path) -> None:
        kpis = get_kpis_for_month(2024, 1, TODAY, db_path=populated)

        assert kpis.outstanding == Decimal("800.00")
        assert kpis.invoiced_count == 1
        assert kpis.ready_to_invoice == Decimal("800.00")
        assert kpis.ready_to_invoice_count == 2
        assert kpis.this_month == Decimal("2200.00")
        assert kpis.this_month_count == 3
        assert kpis.total_paid == Decimal("700.00")
        assert kpis.overdue_count == 1
        assert not kpis.has_trend_baseline

    @pytest.mark.parametrize("month", [1, 2, 3])
    @pytest.mark.parametrize("overdue_days", [30, 59, 60])
    def test_matches_in_memory(self, populated: Path, month: int, overdue_days: int) -> None:
        entries = get_all_entries(populated)

        expected = calculate_kpis(entries, 2024, month, TODAY, overdue_days=overdue_days)
        actual = get_kpis_for_month(2024, month, TODAY, overdue_days=overdue_days, db_path=populated)

        assert actual == expected

    def test_non_canonical_date_never_reaches_aggregates(self, populated: Path) -> None:
        """A compact ISO date is refused, so SQL and in-memory KPIs stay equal."""
        with pytest.raises(ValueError):
            insert_entry(job(date="20240115", amount_gross="100"), populated)

        entries = get_all_entries(populated)
        expected = calculate_kpis(entries, 2024, 1, TODAY)
        assert get_kpis_for_month(2024, 1, TODAY, db_path=populated) == expected
        assert expected.this_month == Decimal("2200.00")

    def test_invalid_month(self, db_path: Path) -> None:
        with pytest.raises(ValueError):
            get_kpis_for_month(2024, 0, TODAY, db_path=db_path)
