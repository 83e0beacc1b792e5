"""CSV export of income entries."""

import csv
from datetime import date
from pathlib import Path

from gigbook.domain.entries import IncomeEntry
from gigbook.domain.export import build_export_rows


def default_export_path(today: date) -> Path:
    return Path(f"income-{today.isoformat()}.csv")


def write_csv(entries: list[IncomeEntry], path: Path) -> int:
    """Write entries to a CSV file.

    Every value is quoted and the file starts with a UTF-8 byte-order mark
    so spreadsheet apps read non-Latin text correctly.

    Args:
        entries: Entries in the order they should appear.
        path: Output file.

    Returns:
        Number of entry rows written.

    Raises:
        OSError: If the file cannot be written.
    """
    rows = build_export_rows(entries)
    with open(path, "w", newline="", encoding="utf-8-sig") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerows(rows)
    return len(rows) - 1
