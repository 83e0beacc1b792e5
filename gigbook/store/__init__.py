"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

# Re-export all query and schema functions
from gigbook.store.queries import (
    delete_entry,
    duplicate_entry,
    get_all_entries,
    get_entries_for_month,
    get_entry,
    get_imported_calendar_event_ids,
    get_kpis_for_month,
    get_unique_clients,
    insert_entry,
    mark_as_paid,
    mark_invoice_sent,
    set_entry_status,
    update_entry,
)
from gigbook.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "delete_entry",
    "duplicate_entry",
    "get_all_entries",
    "get_entries_for_month",
    "get_entry",
    "get_imported_calendar_event_ids",
    "get_kpis_for_month",
    "get_unique_clients",
    "insert_entry",
    "mark_as_paid",
    "mark_invoice_sent",
    "set_entry_status",
    "update_entry",
]
