"""
D6 Reports Artifact Renderer

Turns one report record into a single-page PDF in two phases:

1. snapshot: the record's printable page is rendered to HTML and captured as
   a PNG raster at a fixed page width and scale;
2. pack: the raster is placed full-bleed on one A4 page.

A failure in either phase raises RenderFailure. Partial output is never
returned.
"""

import base64
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from core.config import get_settings
from core.exceptions import RenderFailure
from core.metrics import metrics
from d1_records.schemas import ReportRecord
from d6_reports.packer import PDFPacker
from d6_reports.snapshot import PlaywrightSnapshotter, SnapshotOptions
from d6_reports.template_engine import TemplateEngine

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass
class RenderedArtifact:
    """An ephemeral rendered document for one record"""

    record_id: str
    pdf_data: bytes
    page_size: Tuple[float, float]
    image_size: Tuple[int, int]
    generation_time_ms: int = 0
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def file_size(self) -> int:
        return len(self.pdf_data)

    def to_bytes(self) -> bytes:
        """Document byte stream"""
        return self.pdf_data

    def to_data_uri(self) -> str:
        """Text-safe self-describing encoding for transport"""
        encoded = base64.b64encode(self.pdf_data).decode("ascii")
        return f"data:{PDF_MIME_TYPE};base64,{encoded}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "file_size": self.file_size,
            "page_size": list(self.page_size),
            "image_size": list(self.image_size),
            "generation_time_ms": self.generation_time_ms,
            "generated_at": self.generated_at.isoformat(),
        }


class ArtifactRenderer:
    """Renders report records into single-page PDF artifacts"""

    def __init__(
        self,
        template_engine: Optional[TemplateEngine] = None,
        snapshotter: Optional[PlaywrightSnapshotter] = None,
        packer: Optional[PDFPacker] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        settings = get_settings()
        self.template_engine = template_engine or TemplateEngine()
        self.snapshotter = snapshotter or PlaywrightSnapshotter(
            SnapshotOptions(scale=settings.render_scale, timeout_ms=settings.render_timeout_ms)
        )
        self.packer = packer or PDFPacker()
        self.metadata = metadata if metadata is not None else {"organization": settings.organization}

    async def render(self, record: ReportRecord) -> RenderedArtifact:
        """
        Render ``record`` into a PDF artifact

        Raises:
            RenderFailure: capture or packing failed
        """
        start = time.monotonic()

        try:
            html_content = self.template_engine.render_report(record, metadata=self.metadata)
            image_bytes = await self.snapshotter.capture(html_content)
        except Exception as e:
            logger.error(
                f"Snapshot failed for report {record.id}: {e}",
                extra={"record_id": record.id, "phase": "snapshot"},
            )
            raise RenderFailure(f"Snapshot capture failed: {e}", phase="snapshot", record_id=record.id) from e

        try:
            pdf_data = self.packer.pack(image_bytes, title=f"OPR {record.title}".strip())
            image_size = self.packer.image_size(image_bytes)
        except Exception as e:
            logger.error(
                f"Packing failed for report {record.id}: {e}",
                extra={"record_id": record.id, "phase": "pack"},
            )
            raise RenderFailure(f"Document packing failed: {e}", phase="pack", record_id=record.id) from e

        artifact = RenderedArtifact(
            record_id=record.id,
            pdf_data=pdf_data,
            page_size=tuple(self.packer.pagesize),
            image_size=image_size,
            generation_time_ms=int((time.monotonic() - start) * 1000),
        )
        metrics.track_render(time.monotonic() - start)
        logger.info(
            f"Rendered report {record.id}. Size: {artifact.file_size} bytes, Time: {artifact.generation_time_ms}ms"
        )
        return artifact
