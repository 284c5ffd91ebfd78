"""
Tests for the D6 OPR page template engine
"""

import pytest
from jinja2 import TemplateError

from d6_reports.template_engine import (
    DEFAULT_TEMPLATE,
    DOCUMENT_ROOT_ID,
    TemplateData,
    TemplateEngine,
    format_date,
    or_dash,
    photo_grid_class,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def engine():
    return TemplateEngine()


class TestFilters:
    def test_format_date_malay_month(self):
        assert format_date("2024-05-01") == "1 Mei 2024"
        assert format_date("2024-12-25") == "25 Disember 2024"

    def test_format_date_passthrough(self):
        assert format_date("Minggu ke-3") == "Minggu ke-3"
        assert format_date("") == "-"

    def test_or_dash(self):
        assert or_dash("  ") == "-"
        assert or_dash(None) == "-"
        assert or_dash("Ada") == "Ada"

    @pytest.mark.parametrize("count,expected", [(0, "photos-1"), (1, "photos-1"), (2, "photos-2"), (4, "photos-4"), (6, "photos-many")])
    def test_photo_grid_class(self, count, expected):
        assert photo_grid_class(count) == expected


class TestTemplateData:
    def test_from_record(self, make_record, photo_uri):
        record = make_record(photos=[photo_uri])

        data = TemplateData.from_record(record, {"organization": "SMA MAIWP Labuan"})

        assert "photos" not in data.report
        assert data.photos == [photo_uri]
        assert [s["label"] for s in data.sections] == [
            "Objektif",
            "Aktiviti",
            "Kekuatan",
            "Kelemahan",
            "Penambahbaikan",
            "Refleksi",
        ]
        assert data.to_dict()["document_root_id"] == DOCUMENT_ROOT_ID


class TestTemplateEngine:
    def test_default_template_loaded(self, engine):
        assert DEFAULT_TEMPLATE in engine.list_templates()

    def test_render_report(self, engine, make_record, photo_uri):
        record = make_record(photos=[photo_uri, photo_uri])

        html = engine.render_report(record, metadata={"organization": "SMA MAIWP Labuan"})

        assert f'id="{DOCUMENT_ROOT_ID}"' in html
        assert "Program Membaca" in html
        assert "1 Mei 2024" in html
        assert "SMA MAIWP Labuan" in html
        assert "photos-2" in html
        assert html.count(photo_uri) == 2

    def test_render_escapes_user_text(self, engine, make_record):
        html = engine.render_report(make_record(title="<script>alert(1)</script>"))

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_render_without_photos(self, engine, make_record):
        html = engine.render_report(make_record(photos=[]))

        assert "<img" not in html

    def test_unknown_template(self, engine, sample_record):
        with pytest.raises(TemplateError):
            engine.render_report(sample_record, template_name="missing")

    def test_strict_undefined(self, engine, sample_record):
        engine.add_template("broken", "{{ nothing_here.value }}")

        with pytest.raises(TemplateError):
            engine.render_report(sample_record, template_name="broken")
