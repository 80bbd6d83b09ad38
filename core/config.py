"""
Projection configuration.
Passed explicitly to the engine entry points; nothing here is process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class ProjectionConfig:
    # hard cap on calendar length (~20 years); longer windows fail fast
    max_days: int = 7320

    # "daily": conditional changes are checked against the evolving balance
    # "once":  conditional changes are checked a single time against the baseline
    conditional_evaluation: Literal["daily", "once"] = "daily"

    # scenario fan-out (None lets the executor decide)
    max_workers: Optional[int] = None
