"""Domain type definitions for gigbook.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in major units as a two-place Decimal (e.g. Decimal("1250.50"))
- Month: Month in YYYY-MM format
- EntryId: Store-assigned identifier of an income entry
- ClientName: Name of the client a job was done for
"""

from decimal import Decimal
from typing import NewType

# Money is a Decimal rounded to 2 places; it is persisted as integer minor units
Money = NewType("Money", Decimal)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

EntryId = NewType("EntryId", int)

ClientName = NewType("ClientName", str)
