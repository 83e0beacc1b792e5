"""Dashboard command showing the monthly KPIs."""

import sqlite3
import sys
from datetime import date

from rich.console import Console
from rich.table import Table

from gigbook.config import Settings, load_settings
from gigbook.dates import parse_month
from gigbook.domain.kpi import KPIData, calculate_kpis, month_label
from gigbook.domain.money import format_money
from gigbook.store.queries import get_all_entries, get_kpis_for_month
from gigbook.store.schema import get_db_path

console = Console()


def format_trend(kpis: KPIData) -> str:
    """Format the trend with color, or note that there is no baseline."""
    if not kpis.has_trend_baseline:
        return "[dim]n/a (nothing paid last month)[/dim]"
    text = f"{kpis.trend:+.2f}%"
    if kpis.trend > 0:
        return f"[green]{text}[/green]"
    if kpis.trend < 0:
        return f"[red]{text}[/red]"
    return text


def build_kpi_table(kpis: KPIData, settings: Settings, title: str) -> Table:
    symbol = settings.currency_symbol
    table = Table(title=title, show_header=False)
    table.add_column("KPI", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Detail", style="dim")

    table.add_row(
        "Outstanding",
        f"[yellow]{format_money(kpis.outstanding, symbol)}[/yellow]",
        f"{kpis.invoiced_count} invoice(s) awaiting payment",
    )
    table.add_row(
        "Ready to invoice",
        format_money(kpis.ready_to_invoice, symbol),
        f"{kpis.ready_to_invoice_count} job(s) done, not invoiced",
    )
    table.add_row("This month", format_money(kpis.this_month, symbol), f"{kpis.this_month_count} job(s)")
    table.add_row(
        "Paid this month",
        f"[green]{format_money(kpis.total_paid, symbol)}[/green]",
        f"last month {format_money(kpis.previous_month_paid, symbol)}",
    )
    table.add_row("Trend", format_trend(kpis), "vs previous month")
    overdue = f"[red bold]{kpis.overdue_count}[/red bold]" if kpis.overdue_count else "0"
    table.add_row("Overdue", overdue, f"invoices sent over {settings.overdue_days} days ago")
    return table


def dashboard_command(month: str | None = None, local: bool = False) -> None:
    """Show KPIs for a month (default: current month).

    Args:
        month: Month in YYYY-MM format.
        local: Compute from all entries in memory instead of SQL aggregates.
    """
    db_path = get_db_path()
    today = date.today()

    try:
        settings = load_settings()
        year, month_num = parse_month(month) if month else (today.year, today.month)
        if local:
            kpis = calculate_kpis(get_all_entries(db_path), year, month_num, today, overdue_days=settings.overdue_days)
        else:
            kpis = get_kpis_for_month(year, month_num, today, settings.overdue_days, db_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(build_kpi_table(kpis, settings, f"Dashboard - {month_label(year, month_num)}"))
