"""Database schema initialization and migrations."""

import logging
import os
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "gigbook" / "gigbook.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Money columns hold integer minor units (e.g. agorot) so SQL sums are exact.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS income_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date TEXT NOT NULL,
                description TEXT NOT NULL,
                client TEXT NOT NULL,
                amount_gross INTEGER NOT NULL DEFAULT 0,
                amount_paid INTEGER NOT NULL DEFAULT 0,
                vat_type TEXT NOT NULL DEFAULT 'taxable',
                status TEXT NOT NULL DEFAULT 'done',
                invoice_sent_date TEXT,
                paid_date TEXT,
                category TEXT,
                notes TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        # Migrations for older databases (must run before creating indexes on new columns)
        cursor.execute("PRAGMA table_info(income_entries)")
        columns = [row[1] for row in cursor.fetchall()]

        if "calendar_event_id" not in columns:
            logger.debug("Adding income_entries.calendar_event_id")
            cursor.execute("ALTER TABLE income_entries ADD COLUMN calendar_event_id TEXT")

        if "updated_at" not in columns:
            logger.debug("Adding income_entries.updated_at")
            cursor.execute("ALTER TABLE income_entries ADD COLUMN updated_at TEXT")

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_entry_date ON income_entries(date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_entry_status_date ON income_entries(status, date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_entry_client ON income_entries(client)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_entry_calendar_event ON income_entries(calendar_event_id)")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
