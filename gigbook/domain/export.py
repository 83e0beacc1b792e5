"""Pure row building for the CSV export."""

from gigbook.dates import weekday_name
from gigbook.domain.entries import IncomeEntry

EXPORT_COLUMNS = [
    "date",
    "weekday",
    "description",
    "amount_gross",
    "amount_paid",
    "client",
    "status",
    "invoice_sent_date",
    "category",
]


def entry_to_row(entry: IncomeEntry) -> list[str]:
    """One export row, every value as text; missing optional values are empty."""
    return [
        entry.date,
        weekday_name(entry.date),
        entry.description,
        f"{entry.amount_gross:.2f}",
        f"{entry.amount_paid:.2f}",
        entry.client,
        entry.status.value,
        entry.invoice_sent_date or "",
        entry.category or "",
    ]


def build_export_rows(entries: list[IncomeEntry]) -> list[list[str]]:
    """Header plus one row per entry, keeping the caller's filter and sort order."""
    return [list(EXPORT_COLUMNS)] + [entry_to_row(e) for e in entries]
