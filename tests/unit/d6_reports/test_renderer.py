"""
Tests for the D6 artifact renderer
"""

import base64
from unittest.mock import AsyncMock, Mock

import pytest

from core.exceptions import RenderFailure
from d6_reports.packer import PDFPacker
from d6_reports.renderer import PDF_MIME_TYPE, ArtifactRenderer, RenderedArtifact
from d6_reports.snapshot import A4_HEIGHT_PX, A4_WIDTH_PX, SnapshotOptions
from d6_reports.template_engine import TemplateEngine

pytestmark = pytest.mark.unit


@pytest.fixture
def snapshotter(png_bytes):
    snapshotter = Mock()
    snapshotter.capture = AsyncMock(return_value=png_bytes)
    return snapshotter


@pytest.fixture
def renderer(snapshotter):
    return ArtifactRenderer(
        template_engine=TemplateEngine(),
        snapshotter=snapshotter,
        packer=PDFPacker(),
        metadata={"organization": "SMA MAIWP Labuan"},
    )


class TestRenderedArtifact:
    def test_encodings(self, rendered_artifact):
        uri = rendered_artifact.to_data_uri()

        assert rendered_artifact.to_bytes() == b"%PDF-1.4 test document"
        assert uri.startswith(f"data:{PDF_MIME_TYPE};base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == rendered_artifact.pdf_data

    def test_to_dict(self, rendered_artifact):
        data = rendered_artifact.to_dict()

        assert data["file_size"] == len(rendered_artifact.pdf_data)
        assert data["image_size"] == [1588, 2246]


class TestArtifactRenderer:
    @pytest.mark.asyncio
    async def test_render_success(self, renderer, snapshotter, sample_record):
        artifact = await renderer.render(sample_record)

        assert isinstance(artifact, RenderedArtifact)
        assert artifact.record_id == sample_record.id
        assert artifact.to_bytes().startswith(b"%PDF-")
        assert artifact.image_size == (40, 56)

        html = snapshotter.capture.await_args.args[0]
        assert "Program Membaca" in html
        assert "SMA MAIWP Labuan" in html

    @pytest.mark.asyncio
    async def test_same_snapshot_same_bytes(self, renderer, sample_record):
        first = await renderer.render(sample_record)
        second = await renderer.render(sample_record)

        assert first.to_bytes() == second.to_bytes()

    @pytest.mark.asyncio
    async def test_snapshot_failure(self, renderer, snapshotter, sample_record):
        snapshotter.capture.side_effect = RuntimeError("browser crashed")

        with pytest.raises(RenderFailure) as exc_info:
            await renderer.render(sample_record)

        assert exc_info.value.details["phase"] == "snapshot"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_template_failure_is_snapshot_phase(self, snapshotter, sample_record):
        engine = Mock()
        engine.render_report.side_effect = ValueError("bad template")
        renderer = ArtifactRenderer(template_engine=engine, snapshotter=snapshotter, packer=PDFPacker())

        with pytest.raises(RenderFailure):
            await renderer.render(sample_record)

        snapshotter.capture.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pack_failure(self, snapshotter, sample_record):
        packer = Mock()
        packer.pack.side_effect = OSError("cannot decode image")
        renderer = ArtifactRenderer(template_engine=TemplateEngine(), snapshotter=snapshotter, packer=packer)

        with pytest.raises(RenderFailure) as exc_info:
            await renderer.render(sample_record)

        assert exc_info.value.details["phase"] == "pack"

    def test_default_metadata_uses_organization(self, snapshotter):
        renderer = ArtifactRenderer(snapshotter=snapshotter)

        assert renderer.metadata == {"organization": "SMA MAIWP Labuan"}


class TestSnapshotOptions:
    def test_a4_viewport(self):
        options = SnapshotOptions()

        assert (A4_WIDTH_PX, A4_HEIGHT_PX) == (794, 1123)
        assert options.to_context_options() == {
            "viewport": {"width": 794, "height": 1123},
            "device_scale_factor": 2.0,
        }
        assert options.selector == "#opr-document"

    def test_scale_below_two_rejected(self):
        with pytest.raises(ValueError):
            SnapshotOptions(scale=1.0)
