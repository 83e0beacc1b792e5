"""Import jobs from a Google Calendar month."""

import sqlite3
import sys
from datetime import date

import requests
import typer
from rich.console import Console

from gigbook.config import load_settings
from gigbook.dates import parse_month
from gigbook.domain.calendar import CalendarEvent, event_to_draft, new_events
from gigbook.domain.kpi import month_label
from gigbook.gcal import CalendarAuthError, get_token, list_events_for_month
from gigbook.store.queries import get_imported_calendar_event_ids, get_unique_clients, insert_entry
from gigbook.store.schema import get_db_path

console = Console()


def prompt_event_details(event: CalendarEvent, default_client: str | None, clients: list[str]) -> tuple[str, str] | None:
    """Ask for client and amount for an event.

    Returns:
        Tuple of (client, amount), or None to skip the event.
    """
    console.print("─" * 80, style="dim")
    console.print(f"[bold]Date:[/bold] {event.start.date().isoformat()}")
    console.print(f"[bold]Event:[/bold] {event.title}")

    if not typer.confirm("Import this event?", default=True):
        return None

    if clients:
        console.print(f"[dim]Known clients: {', '.join(clients)}[/dim]")
    client: str = typer.prompt("Client", default=default_client or "")
    amount: str = typer.prompt("Gross amount", default="0")
    return client, amount


def import_calendar_command(month: str | None = None, client: str | None = None, yes: bool = False) -> None:
    """Import calendar events of a month as draft entries.

    Args:
        month: Month in YYYY-MM format (default: current month).
        client: Client name to use for every event.
        yes: Import every new event without prompting (amount 0, requires client).
    """
    db_path = get_db_path()
    today = date.today()

    token = get_token()
    if not token:
        console.print("[red]GOOGLE_CALENDAR_TOKEN environment variable not set[/red]", style="bold")
        sys.exit(1)

    if yes and not client:
        console.print("[red]--client is required with --yes[/red]", style="bold")
        sys.exit(1)

    try:
        settings = load_settings()
        year, month_num = parse_month(month) if month else (today.year, today.month)
        console.print(f"[cyan]Fetching calendar events for {month_label(year, month_num)}...[/cyan]")
        events = list_events_for_month(year, month_num, token, settings.calendar_id)
        imported_ids = get_imported_calendar_event_ids(db_path)
        clients = get_unique_clients(db_path)
    except CalendarAuthError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        console.print("[dim]Refresh GOOGLE_CALENDAR_TOKEN and try again[/dim]")
        sys.exit(1)
    except requests.RequestException as e:
        console.print(f"[red]Calendar request failed: {e}[/red]", style="bold")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    candidates = new_events(events, imported_ids)
    skipped_existing = len(events) - len(candidates)
    if not candidates:
        console.print(f"[yellow]No new events to import[/yellow] [dim]({skipped_existing} already imported)[/dim]")
        return

    inserted = 0
    for event in candidates:
        if yes:
            details: tuple[str, str] | None = (client or "", "0")
        else:
            details = prompt_event_details(event, client, clients)
        if details is None:
            continue

        event_client, amount = details
        try:
            insert_entry(event_to_draft(event, event_client, amount), db_path)
            inserted += 1
        except ValueError as e:
            console.print(f"[red]Skipped '{event.title}': {e}[/red]")
        except sqlite3.Error as e:
            console.print(f"[red]Database error: {e}[/red]", style="bold")
            sys.exit(1)

    console.print(f"\n[green]✓[/green] Imported {inserted} event(s)")
    if skipped_existing:
        console.print(f"[dim]{skipped_existing} event(s) were already imported[/dim]")
