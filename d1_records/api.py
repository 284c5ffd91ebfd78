"""
FastAPI endpoints for D1 Records Domain

Listing, retrieval, creation and draft saving of report records.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ValidationError
from core.logging import get_logger
from d1_records.schemas import ReportRecord, default_allocator, now_ms
from d1_records.store import RecordStore, get_record_store

logger = get_logger("d1_records_api", domain="d1_records")

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


class ReportDraftRequest(BaseModel):
    """Editable report fields; identifier and creation time are server-assigned"""

    model_config = ConfigDict(extra="forbid")

    unit: str = ""
    title: str = ""
    date: Optional[str] = None
    day: str = ""
    time: str = ""
    objectives: str = ""
    activities: str = ""
    strengths: str = ""
    weaknesses: str = ""
    improvements: str = ""
    reflection: str = ""
    prepared_by: str = ""
    position: str = ""
    photos: List[str] = Field(default_factory=list)


def _build_record(fields: Dict[str, Any], **fixed) -> ReportRecord:
    data = {key: value for key, value in fields.items() if value is not None}
    data.update(fixed)
    try:
        return ReportRecord.model_validate(data)
    except ValueError as e:
        raise ValidationError(f"Invalid report: {e}") from e


@router.get("")
async def list_reports(store: RecordStore = Depends(get_record_store)) -> Dict[str, Any]:
    """List stored reports (without photos)"""
    records = store.get_all()
    return {"total": len(records), "reports": [record.summary() for record in records]}


@router.post("", status_code=201)
async def create_report(
    request: Optional[ReportDraftRequest] = None,
    store: RecordStore = Depends(get_record_store),
) -> Dict[str, Any]:
    """Create and persist a new draft report"""
    fields = request.model_dump() if request else {}
    record = _build_record(fields, id=default_allocator.allocate(), created_at=now_ms())
    store.save(record)
    logger.info(f"Created report {record.id}")
    return record.to_storage()


@router.get("/{report_id}")
async def get_report(report_id: str, store: RecordStore = Depends(get_record_store)) -> Dict[str, Any]:
    """Full report including embedded photos"""
    return store.get(report_id).to_storage()


@router.put("/{report_id}")
async def save_draft(
    report_id: str,
    request: ReportDraftRequest,
    store: RecordStore = Depends(get_record_store),
) -> Dict[str, Any]:
    """Replace the editable fields of an existing report"""
    existing = store.get(report_id)
    record = _build_record(
        request.model_dump(),
        id=existing.id,
        created_at=existing.created_at,
        status=existing.status,
    )
    store.save(record)
    return record.to_storage()
