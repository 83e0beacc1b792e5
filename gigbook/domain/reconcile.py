"""Local entry list with optimistic updates.

An interactive view may show a mutation before the store confirms it. The
store is authoritative: a confirmed record replaces the tentative one, a
failed mutation restores the previous record, and a reload discards all
local state.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from gigbook.domain.entries import IncomeEntry
from gigbook.domain.models import EntryId

T = TypeVar("T")


@dataclass
class EntryView:
    """Mutable local copy of entries keyed by id, in display order."""

    entries: list[IncomeEntry] = field(default_factory=list)
    _pending: dict[EntryId, IncomeEntry | None] = field(default_factory=dict)

    def get(self, entry_id: EntryId) -> IncomeEntry | None:
        return next((e for e in self.entries if e.id == entry_id), None)

    @property
    def pending_ids(self) -> set[EntryId]:
        return set(self._pending)

    def reload(self, entries: list[IncomeEntry]) -> None:
        """Replace local state with fresh store data."""
        self.entries = list(entries)
        self._pending.clear()

    def apply_tentative(self, entry_id: EntryId, updated: IncomeEntry | None) -> None:
        """Show a change before it is confirmed.

        Args:
            entry_id: Entry being changed.
            updated: Tentative record, or None for a tentative delete.
        """
        previous = self.get(entry_id)
        self._pending.setdefault(entry_id, previous)
        self._replace(entry_id, updated)

    def confirm(self, entry_id: EntryId, confirmed: IncomeEntry | None) -> None:
        """Overwrite the tentative record with the store's record (None if deleted)."""
        self._pending.pop(entry_id, None)
        self._replace(entry_id, confirmed)

    def rollback(self, entry_id: EntryId) -> None:
        """Restore the record as it was before the tentative change."""
        if entry_id not in self._pending:
            return
        self._replace(entry_id, self._pending.pop(entry_id))

    def _replace(self, entry_id: EntryId, record: IncomeEntry | None) -> None:
        for i, existing in enumerate(self.entries):
            if existing.id == entry_id:
                if record is None:
                    del self.entries[i]
                else:
                    self.entries[i] = record
                return
        if record is not None:
            self.entries.insert(0, record)


def run_optimistic(
    view: EntryView,
    entry_id: EntryId,
    tentative: IncomeEntry | None,
    commit: Callable[[], IncomeEntry | None],
) -> IncomeEntry | None:
    """Apply a tentative change, run the store mutation, then reconcile.

    Args:
        view: Local view to update.
        entry_id: Entry being changed.
        tentative: What the entry is expected to look like (None for delete).
        commit: Store call returning the confirmed record, or None if the
            entry no longer exists.

    Returns:
        The confirmed record (None if the store reported it missing).

    Raises:
        Exception: Whatever commit raises, after rolling the view back.
    """
    view.apply_tentative(entry_id, tentative)
    try:
        confirmed = commit()
    except Exception:
        view.rollback(entry_id)
        raise
    view.confirm(entry_id, confirmed)
    return confirmed
