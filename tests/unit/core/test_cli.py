"""
Tests for the click command-line interface
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from core.cli import cli
from core.exceptions import RenderFailure
from d1_records.schemas import ReportStatus
from d9_delivery.hosts import DirectorySaveHost, MemoryClipboard
from d9_delivery.orchestrator import DistributionOrchestrator
from d11_orchestration.lifecycle import LifecycleController

pytestmark = pytest.mark.unit


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def use_store(record_store):
    with patch("core.cli._store", return_value=record_store):
        yield record_store


@pytest.fixture
def use_controller(use_store, mock_renderer, tmp_path):
    def build(output_dir=None, use_clipboard=True):
        orchestrator = DistributionOrchestrator(
            renderer=mock_renderer,
            save_host=DirectorySaveHost(output_dir or str(tmp_path)),
            clipboard=MemoryClipboard(),
        )
        return LifecycleController(use_store, orchestrator, return_delay=0)

    with patch("core.cli._controller", side_effect=build):
        yield tmp_path


class TestReportCommands:
    def test_new_from_options(self, runner, use_controller, use_store):
        result = runner.invoke(cli, ["new", "--unit", "HEM", "--title", "Hari Guru", "--date", "2024-05-16"])

        assert result.exit_code == 0, result.output
        records = use_store.get_all()
        assert len(records) == 1
        assert records[0].id in result.output
        assert records[0].unit == "HEM"
        assert records[0].status == ReportStatus.DRAFT

    def test_new_from_yaml_with_wire_names(self, runner, use_controller, use_store, tmp_path):
        source = tmp_path / "report.yaml"
        source.write_text("unit: PIBG\ntajukProgram: Mesyuarat Agung\ntarikh: 2024-03-02\n", encoding="utf-8")

        result = runner.invoke(cli, ["new", "--from-file", str(source)])

        assert result.exit_code == 0, result.output
        record = use_store.get_all()[0]
        assert record.title == "Mesyuarat Agung"
        assert record.date == "2024-03-02"

    def test_new_rejects_unknown_field(self, runner, use_controller, use_store, tmp_path):
        source = tmp_path / "report.yaml"
        source.write_text("warna: merah\n", encoding="utf-8")

        result = runner.invoke(cli, ["new", "--from-file", str(source)])

        assert result.exit_code != 0
        assert use_store.get_all() == []

    def test_list_empty(self, runner, use_store):
        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "No reports yet." in result.output

    def test_list_and_show(self, runner, use_store, sample_record, photo_uri):
        use_store.save(sample_record.model_copy(update={"photos": [photo_uri]}))

        listed = runner.invoke(cli, ["list"])
        shown = runner.invoke(cli, ["show", sample_record.id])

        assert sample_record.id in listed.output
        assert "Program Membaca" in listed.output
        data = json.loads(shown.output)
        assert data["title"] == "Program Membaca"
        assert data["photos"] == "<1 photo(s)>"

    def test_show_missing(self, runner, use_store):
        result = runner.invoke(cli, ["show", "nope"])

        assert result.exit_code != 0

    def test_dashboard(self, runner, use_store, make_record):
        use_store.save(make_record(unit="HEM"))
        use_store.save(make_record(unit="Kurikulum"))

        result = runner.invoke(cli, ["dashboard"])

        assert result.exit_code == 0
        assert "Jumlah Laporan: 2" in result.output
        assert "Unit Teraktif: Kurikulum" in result.output


class TestDistributionCommands:
    def test_export_writes_pdf(self, runner, use_controller, use_store, sample_record):
        use_store.save(sample_record)

        result = runner.invoke(cli, ["export", sample_record.id])

        assert result.exit_code == 0, result.output
        exported = use_controller / "OPR_Kurikulum_Program_Membaca_2024-05-01.pdf"
        assert exported.read_bytes() == b"%PDF-1.4 test document"
        assert "PDF Berjaya Dimuat Turun!" in result.output

    def test_export_failure_exit_code(self, runner, use_controller, use_store, sample_record, mock_renderer):
        use_store.save(sample_record)
        mock_renderer.render.side_effect = RenderFailure("capture failed")

        result = runner.invoke(cli, ["export", sample_record.id])

        assert result.exit_code == 1
        assert list(use_controller.iterdir()) == []

    def test_sync_without_gateway(self, runner, use_controller, use_store, sample_record):
        use_store.save(sample_record)

        result = runner.invoke(cli, ["sync", sample_record.id])

        assert result.exit_code == 1
        assert use_store.get(sample_record.id).status == ReportStatus.DRAFT


class TestInfoCommands:
    def test_env_info(self, runner):
        result = runner.invoke(cli, ["env-info"])

        assert result.exit_code == 0
        assert "OPR Digital" in result.output
        assert "Gateway: not configured" in result.output
