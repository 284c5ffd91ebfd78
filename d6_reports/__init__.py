"""
D6 Reports Module

Printable OPR page rendering: Jinja2 template, Playwright snapshot and
single-page PDF packing.
"""

from .packer import PDFPacker
from .renderer import ArtifactRenderer, RenderedArtifact
from .snapshot import A4_HEIGHT_PX, A4_WIDTH_PX, PlaywrightSnapshotter, SnapshotOptions
from .template_engine import TemplateData, TemplateEngine

__all__ = [
    "ArtifactRenderer",
    "RenderedArtifact",
    "PDFPacker",
    "PlaywrightSnapshotter",
    "SnapshotOptions",
    "A4_WIDTH_PX",
    "A4_HEIGHT_PX",
    "TemplateEngine",
    "TemplateData",
]
