"""
FastAPI endpoints for D9 Delivery Domain

PDF download and remote sync of stored reports.
"""
from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from core.logging import get_logger
from d0_gateway.sync_gateway import get_sync_gateway
from d1_records.schemas import ReportStatus
from d1_records.store import RecordStore, get_record_store
from d6_reports.renderer import PDF_MIME_TYPE, ArtifactRenderer
from d9_delivery.hosts import InMemorySaveHost
from d9_delivery.orchestrator import DistributionOrchestrator, DistributionResult

logger = get_logger("d9_delivery_api", domain="d9_delivery")

router = APIRouter(prefix="/api/v1/reports", tags=["delivery"])

_FAILURE_STATUS = {
    "BUSY": 409,
    "RENDER_FAILURE": 500,
    "HANDOFF_FAILURE": 500,
    "CONFIGURATION_ERROR": 503,
    "TRANSPORT_FAILURE": 502,
}


@lru_cache()
def get_orchestrator() -> DistributionOrchestrator:
    """Process-wide orchestrator; downloads are held in memory until served"""
    return DistributionOrchestrator(
        renderer=ArtifactRenderer(),
        save_host=InMemorySaveHost(),
        gateway=get_sync_gateway(),
    )


def _failure_response(result: DistributionResult) -> JSONResponse:
    return JSONResponse(status_code=_FAILURE_STATUS.get(result.error_code, 500), content=result.to_dict())


@router.post("/{report_id}/export")
async def export_report(
    report_id: str,
    store: RecordStore = Depends(get_record_store),
    orchestrator: DistributionOrchestrator = Depends(get_orchestrator),
):
    """Render the report and return it as a PDF download"""
    record = store.get(report_id)
    result = await orchestrator.export_local(record)
    if not result.success:
        return _failure_response(result)

    pdf_data = orchestrator.save_host.files.pop(result.location)
    return Response(
        content=pdf_data,
        media_type=PDF_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post("/{report_id}/sync")
async def sync_report(
    report_id: str,
    store: RecordStore = Depends(get_record_store),
    orchestrator: DistributionOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Push the report to the remote store; a successful sync finalizes it"""
    record = store.get(report_id)
    result = await orchestrator.sync_remote(record)
    if not result.success:
        return _failure_response(result)

    store.save(record.model_copy(update={"status": ReportStatus.FINALIZED}))
    logger.info(f"Report {report_id} finalized after sync")
    return result.to_dict()
