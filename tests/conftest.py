"""
Root conftest.py for all tests
Provides common fixtures and configuration
"""
import io
import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Settings are read at import time, so the test environment goes in first
os.environ["OPR_ENVIRONMENT"] = "test"
os.environ["OPR_TESTING"] = "true"
os.environ["OPR_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["OPR_LOG_FORMAT"] = "text"
os.environ.pop("OPR_GATEWAY_URL", None)
os.environ.pop("OPR_GATEWAY_TOKEN", None)

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from core.config import get_settings  # noqa: E402
from d1_records.schemas import ReportRecord, encode_photo  # noqa: E402
from d1_records.store import RecordStore  # noqa: E402
from d6_reports.renderer import RenderedArtifact  # noqa: E402
from database.session import create_db_engine  # noqa: E402

get_settings.cache_clear()


def make_png(width: int = 40, height: int = 56, color=(153, 27, 27)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Small solid-colour PNG"""
    return make_png()


@pytest.fixture
def photo_uri(png_bytes):
    return encode_photo(png_bytes, "image/png")


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_db_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()


@pytest.fixture
def record_store(db_engine):
    return RecordStore(engine=db_engine)


@pytest.fixture
def make_record():
    """Factory for report records with sensible defaults"""
    counter = {"next": 1714521600000}

    def _make(**overrides):
        counter["next"] += 1
        data = {
            "id": str(counter["next"]),
            "unit": "Kurikulum",
            "title": "Program Membaca",
            "date": "2024-05-01",
            "day": "Rabu",
            "time": "8.00 pagi - 10.00 pagi",
            "objectives": "Memupuk minat membaca",
            "activities": "Bacaan senyap dan perkongsian buku",
            "strengths": "Penyertaan aktif",
            "weaknesses": "Masa terhad",
            "improvements": "Tambah sesi",
            "reflection": "Murid seronok",
            "prepared_by": "Cikgu Aminah",
            "position": "Guru Bahasa Melayu",
            "created_at": counter["next"],
        }
        data.update(overrides)
        return ReportRecord(**data)

    return _make


@pytest.fixture
def sample_record(make_record):
    return make_record()


@pytest.fixture
def rendered_artifact():
    return RenderedArtifact(
        record_id="1714521600001",
        pdf_data=b"%PDF-1.4 test document",
        page_size=(595.27, 841.89),
        image_size=(1588, 2246),
    )


@pytest.fixture
def mock_renderer(rendered_artifact):
    """Renderer double returning a fixed artifact"""
    renderer = AsyncMock()
    renderer.render.return_value = rendered_artifact
    return renderer
