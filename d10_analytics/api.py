"""
Analytics API Endpoints

Dashboard statistics for the reports overview screen.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from core.logging import get_logger
from d1_records.store import RecordStore, get_record_store

from .aggregators import DashboardAggregator

logger = get_logger("d10_analytics_api", domain="d10_analytics")

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(store: RecordStore = Depends(get_record_store)) -> Dict[str, Any]:
    """Total count, per-unit counts and the most recent reports"""
    stats = DashboardAggregator(store).compute_stats()
    return {**stats.to_dict(), "chart": stats.chart_series()}
