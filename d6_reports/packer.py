"""
D6 Reports Page Packer

Places a snapshot raster full-bleed on a single page and returns the PDF
bytes. The canvas runs in reportlab's invariant mode, so the same raster
always packs to the same bytes.
"""

import io
import logging
from typing import Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)


class PDFPacker:
    """Packs one raster image onto one page"""

    def __init__(self, pagesize: Tuple[float, float] = A4, title: str = "OPR"):
        self.pagesize = pagesize
        self.title = title

    def pack(self, image_bytes: bytes, title: Optional[str] = None) -> bytes:
        """
        Args:
            image_bytes: PNG (or JPEG) raster
            title: Document title metadata

        Returns:
            PDF document bytes
        """
        image = ImageReader(io.BytesIO(image_bytes))
        page_width, page_height = self.pagesize

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.pagesize, invariant=1, pageCompression=1)
        pdf.setTitle(title or self.title)
        # Full bleed: the raster is stretched to the page edges
        pdf.drawImage(image, 0, 0, width=page_width, height=page_height)
        pdf.showPage()
        pdf.save()

        pdf_bytes = buffer.getvalue()
        logger.debug(f"Packed {len(image_bytes)} byte raster into {len(pdf_bytes)} byte page")
        return pdf_bytes

    @staticmethod
    def image_size(image_bytes: bytes) -> Tuple[int, int]:
        width, height = ImageReader(io.BytesIO(image_bytes)).getSize()
        return int(width), int(height)
