"""Domain models and types for gigbook.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- "today" is always passed in, never read from the clock
- Business logic separated from infrastructure
"""

from gigbook.domain.models import ClientName, EntryId, Money, Month

__all__ = ["Money", "Month", "EntryId", "ClientName"]
