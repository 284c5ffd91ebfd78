"""
D6 Reports Snapshot Capture

Captures the rendered OPR page into a PNG raster using headless Chromium
through Playwright. The viewport width is fixed at the A4 page width so text
wraps the same way on every machine, and the device scale factor is at least
2 so the raster stays legible once placed on the page.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from playwright.async_api import Browser, async_playwright

from d6_reports.template_engine import DOCUMENT_ROOT_ID

logger = logging.getLogger(__name__)

CSS_DPI = 96
MM_PER_INCH = 25.4
A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297

# A4 at 96 DPI: 793.7 x 1122.5 CSS pixels
A4_WIDTH_PX = round(A4_WIDTH_MM * CSS_DPI / MM_PER_INCH)
A4_HEIGHT_PX = round(A4_HEIGHT_MM * CSS_DPI / MM_PER_INCH)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


@dataclass
class SnapshotOptions:
    """Configuration options for snapshot capture"""

    scale: float = 2.0
    width_px: int = A4_WIDTH_PX
    height_px: int = A4_HEIGHT_PX
    selector: str = f"#{DOCUMENT_ROOT_ID}"
    timeout_ms: int = 15000

    def __post_init__(self):
        if self.scale < 2.0:
            raise ValueError("Snapshot scale must be at least 2")

    def to_context_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser context options"""
        return {
            "viewport": {"width": self.width_px, "height": self.height_px},
            "device_scale_factor": self.scale,
        }


class PlaywrightSnapshotter:
    """
    Rasterises HTML with Playwright.

    Used as an async context manager it keeps one browser for several
    captures; otherwise each capture launches and closes its own browser.
    """

    def __init__(self, options: Optional[SnapshotOptions] = None):
        self.options = options or SnapshotOptions()
        self._playwright = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self):
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=True, args=BROWSER_ARGS)
        logger.info("Playwright browser launched for snapshots")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def capture(self, html_content: str) -> bytes:
        """
        Capture the document root of ``html_content`` as PNG bytes

        Raises:
            Any Playwright or browser error; the renderer wraps it.
        """
        start_time = datetime.now()

        if self._browser is not None:
            png = await self._capture_with(self._browser, html_content)
        else:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=True, args=BROWSER_ARGS)
                try:
                    png = await self._capture_with(browser, html_content)
                finally:
                    await browser.close()

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(f"Snapshot captured. Size: {len(png)} bytes, Time: {elapsed_ms:.1f}ms")
        return png

    async def _capture_with(self, browser: Browser, html_content: str) -> bytes:
        context = await browser.new_context(**self.options.to_context_options())
        try:
            page = await context.new_page()
            page.set_default_timeout(self.options.timeout_ms)

            # Photos are data URIs, so "load" already covers every image
            await page.set_content(html_content, wait_until="load")

            element = page.locator(self.options.selector)
            return await element.screenshot(type="png", animations="disabled")
        finally:
            await context.close()
