"""Review command for walking through jobs that need invoicing or payment."""

import sqlite3
import sys
from datetime import date

import typer
from rich.console import Console

from gigbook.commands.dashboard import build_kpi_table
from gigbook.commands.entries import print_entry
from gigbook.config import Settings, load_settings
from gigbook.domain.entries import IncomeEntry, Status, apply_status, effective_status
from gigbook.domain.kpi import calculate_kpis, month_label
from gigbook.domain.reconcile import EntryView, run_optimistic
from gigbook.store.queries import get_all_entries, set_entry_status
from gigbook.store.schema import get_db_path

console = Console()

ACTIONS = {"s": Status.SENT, "p": Status.PAID}


def prompt_action(entry: IncomeEntry, today: date) -> str:
    """Prompt for what to do with an entry.

    Returns:
        User's choice as string.
    """
    if effective_status(entry, today) == Status.SENT:
        prompt_text = "\nMark as (p)aid, (k) skip, (q) quit"
    else:
        prompt_text = "\nMark invoice (s)ent, (p)aid, (k) skip, (q) quit"
    result: str = typer.prompt(prompt_text, type=str, default="k")
    return result.strip().lower()


def review_entry(view: EntryView, entry: IncomeEntry, target: Status, today: date) -> IncomeEntry | None:
    """Apply a status change to the local view first, then confirm with the store.

    Raises:
        ValueError: If the change goes backwards in the lifecycle.
        sqlite3.Error: If database operation fails (the view is rolled back).
    """
    tentative = apply_status(entry, target, today)
    db_path = get_db_path()
    return run_optimistic(view, entry.id, tentative, lambda: set_entry_status(entry.id, target, today, db_path))


def review_command(oldest_first: bool = True) -> None:
    """Review jobs that are ready to invoice or awaiting payment."""
    db_path = get_db_path()
    today = date.today()

    try:
        settings: Settings = load_settings()
        view = EntryView()
        view.reload(get_all_entries(db_path))
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    queue = [e for e in view.entries if effective_status(e, today) in (Status.DONE, Status.SENT)]
    queue.sort(key=lambda e: e.date, reverse=not oldest_first)

    if not queue:
        console.print("[green]Nothing to invoice or chase - all caught up![/green]")
        return

    console.print(f"[cyan]{len(queue)} job(s) to review[/cyan]")
    changed = 0

    for entry in queue:
        console.print("─" * 80, style="dim")
        print_entry(entry, today, settings)

        choice = prompt_action(entry, today)
        if choice == "q":
            break
        if choice not in ACTIONS:
            continue

        try:
            confirmed = review_entry(view, entry, ACTIONS[choice], today)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            continue
        except sqlite3.Error as e:
            console.print(f"[red]Database error: {e}[/red]", style="bold")
            sys.exit(1)

        if confirmed is None:
            console.print(f"[yellow]Entry {entry.id} no longer exists[/yellow]")
            continue

        changed += 1
        console.print(f"[green]✓[/green] Entry {entry.id} is now '{confirmed.status.value}'")

    console.print(f"\n[green]Review complete - {changed} entr{'y' if changed == 1 else 'ies'} updated[/green]")

    kpis = calculate_kpis(view.entries, today.year, today.month, today, overdue_days=settings.overdue_days)
    console.print(build_kpi_table(kpis, settings, f"Dashboard - {month_label(today.year, today.month)}"))
