"""Pure functions for dashboard KPI calculations.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

The store computes the same KPIs with SQL aggregates
(gigbook.store.queries.get_kpis_for_month); both must agree.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from gigbook.dates import month_of, month_range, previous_month, to_month
from gigbook.domain import money
from gigbook.domain.entries import DEFAULT_OVERDUE_DAYS, IncomeEntry, Status, effective_status, is_overdue, vat_amount
from gigbook.domain.models import Money


@dataclass(frozen=True)
class KPIData:
    """Immutable dashboard summary for one month."""

    outstanding: Money
    ready_to_invoice: Money
    ready_to_invoice_count: int
    this_month: Money
    this_month_count: int
    total_paid: Money
    previous_month_paid: Money
    trend: Money
    has_trend_baseline: bool
    overdue_count: int
    invoiced_count: int


@dataclass(frozen=True)
class MonthTotals:
    """Immutable totals over a list of entries (table footer)."""

    total_gross: Money
    total_paid: Money
    total_unpaid: Money
    vat_total: Money
    jobs_count: int


def calculate_trend(this_month_paid: Money, previous_month_paid: Money) -> tuple[Money, bool]:
    """Percentage change of paid income versus the previous month.

    Args:
        this_month_paid: Paid total for the selected month.
        previous_month_paid: Paid total for the month before.

    Returns:
        Tuple of (trend_percent, has_baseline). When the previous month has
        nothing paid the trend is 0 and has_baseline is False, so callers can
        show "no baseline" instead of a misleading 0%.
    """
    if previous_month_paid <= 0:
        return money.to_money(0), False
    change = money.divide(money.subtract(this_month_paid, previous_month_paid), previous_month_paid)
    return money.multiply(change, 100), True


def entries_in_month(entries: list[IncomeEntry], year: int, month: int) -> list[IncomeEntry]:
    return [e for e in entries if month_of(e.date) == (year, month)]


def paid_in_month(entries: list[IncomeEntry], year: int, month: int, today: date) -> Money:
    """Sum of amount_paid for entries in the month whose effective status is PAID."""
    return money.total(
        [e.amount_paid for e in entries_in_month(entries, year, month) if effective_status(e, today) == Status.PAID]
    )


def calculate_kpis(
    entries: list[IncomeEntry],
    year: int,
    month: int,
    today: date,
    previous_month_paid: Money | None = None,
    overdue_days: int = DEFAULT_OVERDUE_DAYS,
) -> KPIData:
    """Compute dashboard KPIs from an in-memory list of entries.

    Args:
        entries: All entries (cross-month KPIs look at every entry).
        year: Selected year.
        month: Selected month (1-12).
        today: Reference date for status derivation and overdue checks.
        previous_month_paid: Paid total of the prior month. If None it is
            computed from entries.
        overdue_days: Overdue threshold in days.

    Returns:
        KPIData for the selected month.
    """
    to_month(year, month)  # validates month number

    sent = [e for e in entries if effective_status(e, today) == Status.SENT]
    ready = [e for e in entries if effective_status(e, today) == Status.DONE]
    month_entries = entries_in_month(entries, year, month)

    outstanding = money.total([money.subtract(e.amount_gross, e.amount_paid) for e in sent])
    total_paid = paid_in_month(entries, year, month, today)

    if previous_month_paid is None:
        prev_year, prev_month = previous_month(year, month)
        previous_month_paid = paid_in_month(entries, prev_year, prev_month, today)
    trend, has_baseline = calculate_trend(total_paid, previous_month_paid)

    return KPIData(
        outstanding=outstanding,
        ready_to_invoice=money.total([e.amount_gross for e in ready]),
        ready_to_invoice_count=len(ready),
        this_month=money.total([e.amount_gross for e in month_entries]),
        this_month_count=len(month_entries),
        total_paid=total_paid,
        previous_month_paid=money.to_money(previous_month_paid),
        trend=trend,
        has_trend_baseline=has_baseline,
        overdue_count=sum(1 for e in entries if is_overdue(e, today, overdue_days)),
        invoiced_count=len(sent),
    )


def calculate_totals(entries: list[IncomeEntry], vat_rate: float | Decimal) -> MonthTotals:
    """Totals row for a list of entries."""
    total_gross = money.total([e.amount_gross for e in entries])
    total_paid = money.total([e.amount_paid for e in entries])
    return MonthTotals(
        total_gross=total_gross,
        total_paid=total_paid,
        total_unpaid=money.subtract(total_gross, total_paid),
        vat_total=money.total([vat_amount(e, vat_rate) for e in entries]),
        jobs_count=len(entries),
    )


def month_label(year: int, month: int) -> str:
    """Human-readable month, e.g. "January 2025"."""
    return month_range(to_month(year, month))[2]
