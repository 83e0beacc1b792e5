"""Invoice lifecycle commands (sent, paid, status)."""

import sqlite3
import sys
from datetime import date

from rich.console import Console

from gigbook.commands.entries import not_found, print_entry
from gigbook.config import load_settings
from gigbook.domain.entries import Status
from gigbook.store.queries import set_entry_status
from gigbook.store.schema import get_db_path

console = Console()


def status_command(entry_id: int, status: Status) -> None:
    """Move an entry forward in the lifecycle.

    invoice-sent stamps the invoice date the first time only; paid stamps
    the payment date and records the full gross amount as received.
    """
    db_path = get_db_path()
    today = date.today()

    try:
        entry = set_entry_status(entry_id, status, today, db_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        console.print("[dim]Use 'gigbook edit' to correct an entry manually[/dim]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if entry is None:
        not_found(entry_id)

    console.print(f"[green]✓[/green] Entry {entry_id} is now '{entry.status.value}':")
    print_entry(entry, today, load_settings())


def sent_command(entry_id: int) -> None:
    """Mark an invoice as sent."""
    status_command(entry_id, Status.SENT)


def paid_command(entry_id: int) -> None:
    """Mark an entry as paid in full."""
    status_command(entry_id, Status.PAID)
