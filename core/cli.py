"""
Command-line interface for OPR Digital
"""
import asyncio
import json
from datetime import date, datetime
from typing import Any, Dict, Optional

import click
import yaml

from core.config import settings
from core.exceptions import OPRError
from core.logging import get_logger

logger = get_logger(__name__)


def _store():
    from d1_records.store import get_record_store

    return get_record_store()


def _controller(output_dir: Optional[str] = None, use_clipboard: bool = True):
    """Lifecycle controller wired to the configured store, renderer and gateway"""
    from d0_gateway.sync_gateway import get_sync_gateway
    from d6_reports.renderer import ArtifactRenderer
    from d9_delivery.hosts import DirectorySaveHost, MemoryClipboard, PyperclipClipboard
    from d9_delivery.orchestrator import DistributionOrchestrator
    from d11_orchestration.lifecycle import LifecycleController

    orchestrator = DistributionOrchestrator(
        renderer=ArtifactRenderer(),
        save_host=DirectorySaveHost(output_dir or settings.export_dir),
        gateway=get_sync_gateway(),
        clipboard=PyperclipClipboard() if use_clipboard else MemoryClipboard(),
    )
    return LifecycleController(_store(), orchestrator)


def _load_fields(path: str) -> Dict[str, Any]:
    """Report fields from a YAML/JSON file, keyed by attribute or wire name"""
    from d1_records.schemas import ReportRecord

    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise click.BadParameter("expected a mapping of report fields", param_hint="--from-file")

    aliases = {info.alias: name for name, info in ReportRecord.model_fields.items() if info.alias}
    fields = {}
    for key, value in data.items():
        # YAML reads bare dates and times as objects
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        fields[aliases.get(key, key)] = value
    return fields


def _echo_notifications(controller, err: bool = False) -> None:
    for notification in controller.notifications.active():
        click.echo(notification.detail or notification.message, err=err)


@click.group()
@click.version_option(version=settings.app_version)
def cli():
    """OPR Digital CLI - One Page Report lifecycle"""
    pass


@cli.command()
def init_db():
    """Initialize database with tables"""
    from database.session import init_db as create_tables

    click.echo("Creating database tables...")
    create_tables()
    click.echo("Database initialized successfully!")


@cli.command()
@click.option("--from-file", "from_file", type=click.Path(exists=True, dir_okay=False), help="YAML/JSON report fields")
@click.option("--unit", help="Unit (Pentadbiran, Kurikulum, Kokurikulum, HEM, PIBG)")
@click.option("--title", help="Programme title")
@click.option("--date", "report_date", help="Programme date (YYYY-MM-DD)")
@click.option("--photo", "photos", multiple=True, type=click.Path(exists=True, dir_okay=False), help="Photo to embed")
def new(from_file, unit, title, report_date, photos):
    """Create a draft report and save it"""
    from d1_records.schemas import photo_from_path

    controller = _controller(use_clipboard=False)
    controller.create_new()

    changes = _load_fields(from_file) if from_file else {}
    for key, value in (("unit", unit), ("title", title), ("date", report_date)):
        if value:
            changes[key] = value
    if photos:
        changes["photos"] = list(changes.get("photos", [])) + [photo_from_path(p) for p in photos]

    try:
        record = controller.update_draft(**changes) if changes else controller.record
        controller.save_draft(record)
    except OPRError as e:
        raise click.ClickException(e.message)

    click.echo(record.id)


@cli.command("list")
def list_reports():
    """List stored reports in the order they were created"""
    records = _store().get_all()
    if not records:
        click.echo("No reports yet.")
        return

    for record in records:
        click.echo(f"{record.id}  {record.date}  {record.status.value:<9}  {record.unit:<12}  {record.title}")


@cli.command()
@click.argument("report_id")
@click.option("--with-photos", is_flag=True, help="Include embedded photo data")
def show(report_id: str, with_photos: bool):
    """Show one report as JSON"""
    try:
        record = _store().get(report_id)
    except OPRError as e:
        raise click.ClickException(e.message)

    data = record.to_storage()
    if not with_photos:
        data["photos"] = f"<{len(record.photos)} photo(s)>"
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@cli.command()
def dashboard():
    """Display dashboard statistics"""
    from d10_analytics.aggregators import DashboardAggregator

    stats = DashboardAggregator(_store()).compute_stats()
    click.echo(f"Jumlah Laporan: {stats.total_reports}")
    click.echo(f"Unit Teraktif: {stats.most_active_unit or '-'}")
    for unit, count in stats.by_unit.items():
        click.echo(f"  {unit or '(tiada unit)'}: {count}")
    click.echo("Laporan Terkini:")
    for record in stats.recent_reports:
        click.echo(f"  {record.date}  {record.unit:<12}  {record.title}")


def _distribute(report_id: str, action: str, **controller_options):
    controller = _controller(**controller_options)
    try:
        controller.open_existing(_store().get(report_id))
    except OPRError as e:
        raise click.ClickException(e.message)

    async def run():
        try:
            return await getattr(controller, action)()
        finally:
            if controller.orchestrator.gateway is not None:
                await controller.orchestrator.gateway.aclose()

    result = asyncio.run(run())
    _echo_notifications(controller, err=not result.success)
    return controller, result


@cli.command()
@click.argument("report_id")
@click.option("--output-dir", type=click.Path(file_okay=False), help="Directory to write the PDF to")
def export(report_id: str, output_dir: Optional[str]):
    """Render a report to a PDF file"""
    controller, result = _distribute(report_id, "export_pdf", output_dir=output_dir, use_clipboard=False)
    controller.close()
    if not result.success:
        raise SystemExit(1)
    click.echo(result.location)


@cli.command()
@click.argument("report_id")
def sync(report_id: str):
    """Upload a report to the remote document store"""
    controller, result = _distribute(report_id, "sync_to_cloud", use_clipboard=False)
    controller.close()
    if not result.success:
        raise SystemExit(1)
    if result.file_url:
        click.echo(result.file_url)


@cli.command()
@click.argument("report_id")
@click.option("--no-clipboard", is_flag=True, help="Print the link without touching the clipboard")
def share(report_id: str, no_clipboard: bool):
    """Create a session-only link to a rendered report"""
    controller, result = _distribute(report_id, "share_link", use_clipboard=not no_clipboard)
    if not result.success:
        controller.close()
        raise SystemExit(1)

    try:
        click.pause("Tekan sebarang kekunci untuk tamatkan sesi dan padam pautan...")
    finally:
        controller.close()


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def runserver(host: str, port: int, reload: bool):
    """Run the FastAPI development server"""
    import uvicorn

    click.echo(f"Starting {settings.app_name} server on {host}:{port}")
    click.echo(f"Environment: {settings.environment}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def env_info():
    """Display environment information"""
    click.echo(f"{settings.app_name} v{settings.app_version}")
    click.echo(f"Organization: {settings.organization}")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Database: {settings.database_url}")
    click.echo(f"Gateway: {settings.gateway_url or 'not configured'}")
    click.echo(f"Export directory: {settings.export_dir}")
    click.echo(f"Render scale: {settings.render_scale:g}x")


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
