"""
D10 Analytics Aggregators

Dashboard statistics derived from the record store on every request:
total count, per-unit counts and the most recently created reports.
Nothing here is cached, so the numbers always match the store at read time.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.config import get_settings
from d1_records.schemas import ReportRecord
from d1_records.store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 5


@dataclass
class DashboardStatistics:
    """Read model behind the dashboard"""

    total_reports: int = 0
    by_unit: Dict[str, int] = field(default_factory=dict)
    recent_reports: List[ReportRecord] = field(default_factory=list)

    @property
    def most_active_unit(self) -> Optional[str]:
        """Unit with the most reports; on a tie the later unit wins"""
        best_unit = None
        best_count = None
        for unit, count in self.by_unit.items():
            if best_count is None or not best_count > count:
                best_unit, best_count = unit, count
        return best_unit

    def chart_series(self) -> List[Dict[str, Any]]:
        """Per-unit counts shaped for a bar chart"""
        return [{"name": unit, "value": count} for unit, count in self.by_unit.items()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_reports": self.total_reports,
            "by_unit": dict(self.by_unit),
            "most_active_unit": self.most_active_unit,
            "recent_reports": [record.summary() for record in self.recent_reports],
        }


def build_dashboard_stats(records: Iterable[ReportRecord], recent_limit: int = DEFAULT_RECENT_LIMIT) -> DashboardStatistics:
    """
    Compute dashboard statistics from records in store order.

    Args:
        records: Records in the order the store returns them
        recent_limit: Maximum length of the recent list

    Returns:
        DashboardStatistics; ties on creation time keep store order
    """
    if recent_limit < 0:
        raise ValueError("recent_limit must not be negative")

    ordered = list(records)
    by_unit: Dict[str, int] = {}
    for record in ordered:
        by_unit[record.unit] = by_unit.get(record.unit, 0) + 1

    # sorted() is stable, so equal timestamps stay in store order
    newest_first = sorted(ordered, key=lambda record: record.created_at, reverse=True)

    return DashboardStatistics(
        total_reports=len(ordered),
        by_unit=by_unit,
        recent_reports=newest_first[:recent_limit],
    )


class DashboardAggregator:
    """Builds dashboard statistics from a record store"""

    def __init__(self, store: RecordStore, recent_limit: Optional[int] = None):
        self.store = store
        self.recent_limit = recent_limit if recent_limit is not None else get_settings().dashboard_recent_limit

    def compute_stats(self) -> DashboardStatistics:
        records = self.store.get_all()
        stats = build_dashboard_stats(records, self.recent_limit)
        logger.debug(f"Dashboard computed: {stats.total_reports} reports across {len(stats.by_unit)} units")
        return stats
