"""
Core package: data model, configuration, error taxonomy and shared date math.
No projection logic lives here.
"""

from .config import ProjectionConfig
from .errors import (
    ProjectionError,
    RangeTooLargeError,
    UnresolvedTargetError,
    UnsupportedOperationError,
    ValidationError,
)
from .models import (
    Adjustment,
    BaselineState,
    IncomeStream,
    RecurrenceRule,
    Settings,
    Step,
    Transaction,
)
from .utils import months_between, parse_ymd, round2, to_ymd, weekday_index

__all__ = [
    "ProjectionConfig",
    "ProjectionError",
    "RangeTooLargeError",
    "UnresolvedTargetError",
    "UnsupportedOperationError",
    "ValidationError",
    "Adjustment",
    "BaselineState",
    "IncomeStream",
    "RecurrenceRule",
    "Settings",
    "Step",
    "Transaction",
    "months_between",
    "parse_ymd",
    "round2",
    "to_ymd",
    "weekday_index",
]
