"""CLI entry point for gigbook."""

import logging

import typer
from rich.logging import RichHandler

from gigbook.commands.admin import backup_command, export_command, init_command
from gigbook.commands.calendar import import_calendar_command
from gigbook.commands.dashboard import dashboard_command
from gigbook.commands.entries import (
    add_command,
    clients_command,
    delete_command,
    duplicate_command,
    edit_command,
    list_command,
)
from gigbook.commands.review import review_command
from gigbook.commands.status import paid_command, sent_command, status_command
from gigbook.domain.entries import FilterType, Status, VatType

app = typer.Typer(
    name="gigbook",
    help="gigbook - income and invoice tracking for freelance musicians",
    add_completion=False,
)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """gigbook - income and invoice tracking for freelance musicians."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update the database schema only"),
) -> None:
    """Initialize gigbook database and configuration."""
    init_command(force, migrate)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: ~/.gigbook/backups)"),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command()
def add(
    description: str,
    client: str = typer.Option(..., "--client", "-c", help="Client name"),
    amount: str = typer.Option(..., "--amount", "-a", help="Gross amount"),
    date: str = typer.Option(None, "--date", "-d", help="Job date (default: today)"),
    paid: str = typer.Option(None, "--paid", help="Amount already received"),
    vat: VatType = typer.Option(VatType.TAXABLE, "--vat", help="VAT treatment"),
    status: Status = typer.Option(Status.DONE, "--status", help="Initial status"),
    category: str = typer.Option(None, "--category", help="Category (e.g. performance, teaching)"),
    notes: str = typer.Option(None, "--notes", help="Free-text notes"),
) -> None:
    """Record a job."""
    add_command(description, client, amount, date, paid, vat.value, status.value, category, notes)


@app.command()
def edit(
    entry_id: int,
    date: str = typer.Option(None, "--date", help="Job date"),
    description: str = typer.Option(None, "--description", help="Description"),
    client: str = typer.Option(None, "--client", help="Client name"),
    amount: str = typer.Option(None, "--amount", help="Gross amount"),
    paid: str = typer.Option(None, "--paid", help="Amount received"),
    vat: VatType = typer.Option(None, "--vat", help="VAT treatment"),
    status: Status = typer.Option(None, "--status", help="Stored status (no lifecycle checks)"),
    sent_date: str = typer.Option(None, "--sent-date", help="Invoice sent date ('' to clear)"),
    paid_date: str = typer.Option(None, "--paid-date", help="Payment date ('' to clear)"),
    category: str = typer.Option(None, "--category", help="Category ('' to clear)"),
    notes: str = typer.Option(None, "--notes", help="Notes ('' to clear)"),
) -> None:
    """Edit an entry manually."""
    edit_command(
        entry_id,
        {
            "date": date,
            "description": description,
            "client": client,
            "amount_gross": amount,
            "amount_paid": paid,
            "vat_type": vat.value if vat else None,
            "status": status.value if status else None,
            "invoice_sent_date": sent_date,
            "paid_date": paid_date,
            "category": category,
            "notes": notes,
        },
    )


@app.command()
def delete(
    entry_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Delete an entry permanently."""
    delete_command(entry_id, yes)


@app.command()
def duplicate(entry_id: int) -> None:
    """Copy an entry as a new job dated today."""
    duplicate_command(entry_id)


@app.command(name="list")
def list_entries(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all time"),
    filter: FilterType = typer.Option(FilterType.ALL, "--filter", help="Status filter"),
    search: str = typer.Option("", "--search", "-s", help="Search description, client and category"),
    oldest_first: bool = typer.Option(False, "--oldest-first", help="Oldest first (default: newest first)"),
) -> None:
    """List your jobs for a month."""
    list_command(month, all, filter, search, oldest_first)


@app.command()
def sent(entry_id: int) -> None:
    """Mark an invoice as sent."""
    sent_command(entry_id)


@app.command()
def paid(entry_id: int) -> None:
    """Mark an entry as paid in full."""
    paid_command(entry_id)


@app.command(name="status")
def set_status(entry_id: int, status: Status) -> None:
    """Move an entry forward to a status (done, invoice-sent, paid)."""
    status_command(entry_id, status)


@app.command()
def dashboard(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    local: bool = typer.Option(False, "--local", help="Compute from loaded entries instead of SQL aggregates"),
) -> None:
    """Show outstanding, ready-to-invoice and monthly income KPIs."""
    dashboard_command(month, local)


@app.command()
def clients() -> None:
    """List your clients."""
    clients_command()


@app.command()
def export(
    output: str = typer.Option(None, "--output", "-o", help="Output file (default: income-<today>.csv)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    all: bool = typer.Option(False, "--all", "-a", help="Export all time"),
    filter: FilterType = typer.Option(FilterType.ALL, "--filter", help="Status filter"),
    search: str = typer.Option("", "--search", "-s", help="Search description, client and category"),
    oldest_first: bool = typer.Option(False, "--oldest-first", help="Oldest first (default: newest first)"),
) -> None:
    """Export jobs to CSV."""
    export_command(output, month, all, filter, search, oldest_first)


@app.command(name="import-calendar")
def import_calendar(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    client: str = typer.Option(None, "--client", "-c", help="Client for the imported jobs"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Import all new events without prompting"),
) -> None:
    """Import jobs from your Google Calendar."""
    import_calendar_command(month, client, yes)


@app.command()
def review(
    newest_first: bool = typer.Option(False, "--newest-first", help="Review newest jobs first (default: oldest)"),
) -> None:
    """Walk through jobs to invoice or mark as paid."""
    review_command(not newest_first)


if __name__ == "__main__":
    app()
