from __future__ import annotations

from typing import Tuple

# Vocabulary shared by the data model, the change payloads and the state builder.
FREQUENCIES: Tuple[str, ...] = ("once", "daily", "weekly", "biweekly", "monthly")
TRANSACTION_TYPES: Tuple[str, ...] = ("income", "expense")
MONTHLY_MODES: Tuple[str, ...] = ("day", "nth")
NTH_WEEKS: Tuple[str, ...] = ("1", "2", "3", "4", "5", "last")
SOURCE_TYPES: Tuple[str, ...] = ("one-off", "recurring", "income-stream", "adjustment")

CHANGE_TYPES: Tuple[str, ...] = (
    "transaction_add",
    "transaction_remove",
    "transaction_modify",
    "bulk_adjustment",
    "income_adjust",
    "expense_adjust",
    "setting_override",
)

# Columns of ProjectionResult.to_frame(), in order.
CALENDAR_COLUMNS: Tuple[str, ...] = (
    "date",
    "income",
    "expenses",
    "net",
    "running",
)
