"""
D6 Reports Template Engine

Renders the printable OPR page for a report record. The HTML produced here is
the visual source the snapshot phase captures; its styling is presentation
only and carries no contract beyond the ``#opr-document`` root element.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError, Undefined
from jinja2.sandbox import SandboxedEnvironment

from d1_records.schemas import ReportRecord

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = "opr_report"
DOCUMENT_ROOT_ID = "opr-document"

MALAY_MONTHS = [
    "Januari",
    "Februari",
    "Mac",
    "April",
    "Mei",
    "Jun",
    "Julai",
    "Ogos",
    "September",
    "Oktober",
    "November",
    "Disember",
]

# (label, record attribute) in page order
NARRATIVE_SECTIONS = [
    ("Objektif", "objectives"),
    ("Aktiviti", "activities"),
    ("Kekuatan", "strengths"),
    ("Kelemahan", "weaknesses"),
    ("Penambahbaikan", "improvements"),
    ("Refleksi", "reflection"),
]


@dataclass
class TemplateData:
    """Container for template rendering data"""

    report: Dict[str, Any]
    sections: List[Dict[str, str]]
    photos: List[str]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: ReportRecord, metadata: Optional[Dict[str, Any]] = None) -> "TemplateData":
        report = record.to_storage()
        report.pop("photos")
        return cls(
            report=report,
            sections=[{"label": label, "body": getattr(record, attr)} for label, attr in NARRATIVE_SECTIONS],
            photos=list(record.photos),
            metadata=metadata or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for template rendering"""
        return {
            "report": self.report,
            "sections": self.sections,
            "photos": self.photos,
            "metadata": self.metadata,
            "document_root_id": DOCUMENT_ROOT_ID,
        }


class TemplateLoader(BaseLoader):
    """Template loader backed by an in-memory name → source mapping"""

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        self.templates = templates or {}

    def get_source(self, environment: Environment, template: str) -> tuple:
        if template not in self.templates:
            raise TemplateError(f"Template '{template}' not found")

        source = self.templates[template]
        return source, None, lambda: True

    def add_template(self, name: str, content: str) -> None:
        self.templates[name] = content

    def list_templates(self) -> List[str]:
        return list(self.templates.keys())


def format_date(value: Optional[str]) -> str:
    """Format an ISO date as '1 Mei 2024'; other strings pass through"""
    if not value:
        return "-"
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return value
    return f"{parsed.day} {MALAY_MONTHS[parsed.month - 1]} {parsed.year}"


def or_dash(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        return "-"
    return value


def photo_grid_class(count: int) -> str:
    """CSS grid class keeping all photos on the single page"""
    if count <= 1:
        return "photos-1"
    if count == 2:
        return "photos-2"
    if count <= 4:
        return "photos-4"
    return "photos-many"


class TemplateEngine:
    """
    Template processing engine for OPR pages
    """

    def __init__(self, use_sandbox: bool = True, strict_undefined: bool = True):
        """
        Initialize template engine

        Args:
            use_sandbox: Use sandboxed environment for security
            strict_undefined: Raise errors for undefined variables
        """
        self.loader = TemplateLoader()
        undefined = StrictUndefined if strict_undefined else Undefined

        if use_sandbox:
            self.env = SandboxedEnvironment(loader=self.loader, autoescape=True, undefined=undefined)
        else:
            self.env = Environment(loader=self.loader, autoescape=True, undefined=undefined)

        self.env.filters["format_date"] = format_date
        self.env.filters["or_dash"] = or_dash
        self.env.filters["photo_grid_class"] = photo_grid_class

        self._load_default_templates()

        logger.info(f"Initialized TemplateEngine with sandbox={use_sandbox}")

    def _load_default_templates(self) -> None:
        for path in sorted(TEMPLATE_DIR.glob("*.html")):
            self.loader.add_template(path.stem, path.read_text(encoding="utf-8"))

    def add_template(self, name: str, content: str) -> None:
        self.loader.add_template(name, content)
        logger.debug(f"Added template '{name}'")

    def list_templates(self) -> List[str]:
        return self.loader.list_templates()

    def render_template(self, template_name: str, data: TemplateData) -> str:
        """
        Render a template with the provided data

        Raises:
            TemplateError: If template rendering fails
        """
        try:
            template = self.env.get_template(template_name)
            rendered_html = template.render(**data.to_dict())
        except TemplateError as e:
            logger.error(f"Template rendering failed for '{template_name}': {e}")
            raise
        except Exception as e:
            logger.error(f"Unexpected error rendering template '{template_name}': {e}")
            raise TemplateError(f"Template rendering failed: {e}") from e

        logger.debug(f"Rendered template '{template_name}' ({len(rendered_html)} chars)")
        return rendered_html

    def render_report(
        self,
        record: ReportRecord,
        template_name: str = DEFAULT_TEMPLATE,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Render the printable page for one record"""
        return self.render_template(template_name, TemplateData.from_record(record, metadata))
