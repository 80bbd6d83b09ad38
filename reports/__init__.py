"""
Reports: metrics tables and scenario comparison over projection results.
"""

from .aggregator import comparative_metrics, daily_balance_comparison
from .metrics import compare_projections, projection_metrics, runway_days

__all__ = [
    "comparative_metrics",
    "daily_balance_comparison",
    "compare_projections",
    "projection_metrics",
    "runway_days",
]
