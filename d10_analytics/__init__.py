"""
D10 Analytics Module

Dashboard statistics computed from the record store.
"""

from .aggregators import (
    DEFAULT_RECENT_LIMIT,
    DashboardAggregator,
    DashboardStatistics,
    build_dashboard_stats,
)

__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "DashboardAggregator",
    "DashboardStatistics",
    "build_dashboard_stats",
]
