"""Entry management commands (add, edit, delete, duplicate, list, clients)."""

import sqlite3
import sys
from datetime import date
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from gigbook.config import Settings, load_settings
from gigbook.dates import normalize_date, parse_month
from gigbook.domain.entries import (
    FilterType,
    IncomeEntry,
    Status,
    effective_status,
    filter_entries,
    is_overdue,
)
from gigbook.domain.kpi import calculate_totals, month_label
from gigbook.domain.money import format_money
from gigbook.store.queries import (
    delete_entry,
    duplicate_entry,
    get_all_entries,
    get_entries_for_month,
    get_entry,
    get_unique_clients,
    insert_entry,
    update_entry,
)
from gigbook.store.schema import get_db_path

console = Console()

STATUS_LABELS = {
    None: "[dim]upcoming[/dim]",
    Status.DONE: "done",
    Status.SENT: "[yellow]invoice sent[/yellow]",
    Status.PAID: "[green]paid[/green]",
}


def status_display(entry: IncomeEntry, today: date, overdue_days: int) -> str:
    """Colored effective status label, flagging overdue invoices."""
    if is_overdue(entry, today, overdue_days):
        return "[red bold]overdue[/red bold]"
    return STATUS_LABELS[effective_status(entry, today)]


def build_entries_table(entries: list[IncomeEntry], today: date, settings: Settings, title: str) -> Table:
    """Render entries with a totals footer."""
    symbol = settings.currency_symbol
    table = Table(title=title, show_footer=True)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Client", style="magenta")
    table.add_column("Gross", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Category", style="dim")

    for entry in entries:
        table.add_row(
            str(entry.id),
            entry.date,
            entry.description,
            entry.client,
            format_money(entry.amount_gross, symbol),
            format_money(entry.amount_paid, symbol),
            status_display(entry, today, settings.overdue_days),
            entry.category or "[dim]-[/dim]",
        )

    totals = calculate_totals(entries, settings.vat_rate)
    table.columns[2].footer = f"{totals.jobs_count} job(s), VAT {format_money(totals.vat_total, symbol)}"
    table.columns[4].footer = format_money(totals.total_gross, symbol)
    table.columns[5].footer = format_money(totals.total_paid, symbol)
    table.columns[6].footer = f"unpaid {format_money(totals.total_unpaid, symbol)}"
    return table


def print_entry(entry: IncomeEntry, today: date, settings: Settings) -> None:
    """Print one entry's details."""
    symbol = settings.currency_symbol
    console.print(f"  ID: {entry.id}")
    console.print(f"  Date: {entry.date}")
    console.print(f"  Description: {entry.description}")
    console.print(f"  Client: {entry.client}")
    console.print(f"  Gross: {format_money(entry.amount_gross, symbol)} ({entry.vat_type.value})")
    console.print(f"  Paid: {format_money(entry.amount_paid, symbol)}")
    console.print(f"  Status: {status_display(entry, today, settings.overdue_days)}")
    if entry.invoice_sent_date:
        console.print(f"  Invoice sent: {entry.invoice_sent_date}")
    if entry.paid_date:
        console.print(f"  Paid on: {entry.paid_date}")
    if entry.category:
        console.print(f"  Category: {entry.category}")
    if entry.notes:
        console.print(f"  [dim]Notes: {entry.notes}[/dim]")


def not_found(entry_id: int) -> NoReturn:
    console.print(f"[red]Entry {entry_id} not found[/red]", style="bold")
    sys.exit(1)


def add_command(
    description: str,
    client: str,
    amount: str,
    date_str: str | None = None,
    paid: str | None = None,
    vat_type: str = "taxable",
    status: str = "done",
    category: str | None = None,
    notes: str | None = None,
) -> None:
    """Add an income entry.

    Args:
        description: What the job was.
        client: Who it was for.
        amount: Gross amount.
        date_str: Job date (YYYY-MM-DD, DD/MM/YYYY, ...). Defaults to today.
        paid: Amount already received.
        vat_type: taxable, zero-rated or tax-inclusive.
        status: done, invoice-sent or paid.
        category: Optional category.
        notes: Optional notes.
    """
    db_path = get_db_path()
    today = date.today()

    try:
        job_date = normalize_date(date_str) if date_str else today.isoformat()
    except ValueError as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)

    fields: dict[str, Any] = {
        "date": job_date,
        "description": description,
        "client": client,
        "amount_gross": amount,
        "vat_type": vat_type,
        "status": status,
    }
    if paid is not None:
        fields["amount_paid"] = paid
    if category:
        fields["category"] = category
    if notes:
        fields["notes"] = notes
    if status == Status.SENT.value:
        fields["invoice_sent_date"] = today.isoformat()
    elif status == Status.PAID.value:
        fields["paid_date"] = today.isoformat()
        fields.setdefault("amount_paid", amount)

    try:
        entry = insert_entry(fields, db_path)
    except ValueError as e:
        console.print(f"[red]Invalid entry: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Entry added:")
    print_entry(entry, today, load_settings())


def edit_command(entry_id: int, changes: dict[str, Any]) -> None:
    """Edit fields of an entry.

    Args:
        entry_id: Entry id.
        changes: Field name to new value; None values are left out, empty
            strings clear optional text/date fields.
    """
    db_path = get_db_path()
    today = date.today()

    fields = {name: value for name, value in changes.items() if value is not None}
    for name in ("invoice_sent_date", "paid_date", "category", "notes"):
        if fields.get(name) == "":
            fields[name] = None

    try:
        for name in ("date", "invoice_sent_date", "paid_date"):
            if fields.get(name):
                fields[name] = normalize_date(fields[name])
        entry = update_entry(entry_id, fields, db_path)
    except ValueError as e:
        console.print(f"[red]Invalid entry: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if entry is None:
        not_found(entry_id)

    console.print(f"[green]✓[/green] Updated entry {entry_id}:")
    print_entry(entry, today, load_settings())


def delete_command(entry_id: int, yes: bool = False) -> None:
    """Delete an entry permanently."""
    db_path = get_db_path()

    try:
        entry = get_entry(entry_id, db_path)
        if entry is None:
            not_found(entry_id)

        if not yes:
            confirm = typer.confirm(f"Delete '{entry.description}' ({entry.date})? This cannot be undone", default=False)
            if not confirm:
                console.print("[dim]Aborted[/dim]")
                return

        if not delete_entry(entry_id, db_path):
            not_found(entry_id)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Deleted entry {entry_id}")


def duplicate_command(entry_id: int) -> None:
    """Re-log a recurring job as a new entry dated today."""
    db_path = get_db_path()
    today = date.today()

    try:
        entry = duplicate_entry(entry_id, today, db_path)
    except (ValueError, sqlite3.Error) as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)

    if entry is None:
        not_found(entry_id)

    console.print(f"[green]✓[/green] Duplicated entry {entry_id} as {entry.id}:")
    print_entry(entry, today, load_settings())


def load_entries(month: str | None, all: bool, today: date) -> tuple[list[IncomeEntry], str]:
    """Load entries for the month (default: current) or all time, with a period label.

    Raises:
        ValueError: If month is not YYYY-MM.
        sqlite3.Error: If database operation fails.
    """
    db_path = get_db_path()
    if all:
        return get_all_entries(db_path), "All Time"
    year, month_num = parse_month(month) if month else (today.year, today.month)
    return get_entries_for_month(year, month_num, db_path), month_label(year, month_num)


def list_command(
    month: str | None = None,
    all: bool = False,
    filter_type: FilterType = FilterType.ALL,
    search: str = "",
    oldest_first: bool = False,
) -> None:
    """List entries for a month with filter, search and sort."""
    today = date.today()

    try:
        settings = load_settings()
        entries, period = load_entries(month, all, today)
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    shown = filter_entries(entries, today, filter_type, search, not oldest_first, settings.overdue_days)
    if not shown:
        console.print(f"[yellow]No entries found ({period})[/yellow]")
        return

    title = f"Income - {period}"
    if filter_type != FilterType.ALL:
        title += f" ({filter_type.value})"
    console.print(build_entries_table(shown, today, settings, title))


def clients_command() -> None:
    """List known client names."""
    try:
        clients = get_unique_clients(get_db_path())
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not clients:
        console.print("[yellow]No clients yet[/yellow]")
        return

    for client in clients:
        console.print(f"  • {client}")
