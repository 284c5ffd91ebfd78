"""
Distribution Orchestrator

Runs the three distribution paths for a report:

1. export_local: render -> bytes -> derived filename -> local save host
2. sync_remote: render -> data URI -> remote sync gateway (bounded wait)
3. share_ephemeral: render -> bytes -> session share handle -> clipboard

Every operation renders afresh and reports its outcome as a
DistributionResult. Render, transport and handoff failures are caught here
and turned into one user-visible message; nothing is retried.
"""

import asyncio
import logging
import re
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Set

from core.config import get_settings
from core.exceptions import (
    ConfigurationError,
    HandoffFailure,
    OperationInProgressError,
    OPRError,
    RenderFailure,
    TransportFailure,
)
from core.metrics import metrics
from d0_gateway.sync_gateway import RemoteSyncGateway
from d1_records.schemas import ReportRecord
from d6_reports.renderer import ArtifactRenderer, RenderedArtifact
from d9_delivery import messages
from d9_delivery.hosts import Clipboard, EphemeralShareRegistry, LocalSaveHost, MemoryClipboard

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "OPR"
PDF_EXTENSION = ".pdf"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


class DistributionChannel(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    SHARE = "share"


@dataclass
class DistributionResult:
    """Outcome of one distribution operation"""

    success: bool
    channel: DistributionChannel
    record_id: str
    message: str
    filename: Optional[str] = None
    location: Optional[str] = None
    file_url: Optional[str] = None
    share_url: Optional[str] = None
    caveat: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["channel"] = self.channel.value
        return data


def derive_export_basename(record: ReportRecord) -> str:
    """
    Deterministic, whitespace-free base name for an exported report

    ``OPR_<unit>_<title>_<date>``: whitespace is removed from the unit,
    whitespace runs in the title become a single underscore and characters
    no filesystem accepts are replaced.
    """
    unit = _WHITESPACE.sub("", record.unit)
    title = _WHITESPACE.sub("_", record.title.strip())
    date = _WHITESPACE.sub("", record.date)
    basename = "_".join([EXPORT_PREFIX, unit, title, date])
    return _UNSAFE_CHARS.sub("-", basename)


def derive_export_filename(record: ReportRecord) -> str:
    return derive_export_basename(record) + PDF_EXTENSION


class BusyGuard:
    """Single-flight guard: one distribution operation per record at a time"""

    def __init__(self):
        self._active: Set[str] = set()

    def is_busy(self, record_id: str) -> bool:
        return record_id in self._active

    @property
    def active(self) -> Set[str]:
        return set(self._active)

    @contextmanager
    def hold(self, record_id: str, channel: Optional[str] = None) -> Iterator[None]:
        if record_id in self._active:
            raise OperationInProgressError(record_id, channel)
        self._active.add(record_id)
        try:
            yield
        finally:
            self._active.discard(record_id)


class DistributionOrchestrator:
    """Renders a report and hands it to one of the distribution targets"""

    def __init__(
        self,
        renderer: ArtifactRenderer,
        save_host: LocalSaveHost,
        gateway: Optional[RemoteSyncGateway] = None,
        share_registry: Optional[EphemeralShareRegistry] = None,
        clipboard: Optional[Clipboard] = None,
        sync_timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.renderer = renderer
        self.save_host = save_host
        self.gateway = gateway
        self.share_registry = share_registry or EphemeralShareRegistry(settings.share_dir)
        self.clipboard = clipboard or MemoryClipboard()
        self.sync_timeout = sync_timeout if sync_timeout is not None else settings.sync_timeout_seconds
        self.guard = BusyGuard()

    def is_busy(self, record_id: str) -> bool:
        return self.guard.is_busy(record_id)

    async def export_local(self, record: ReportRecord) -> DistributionResult:
        """Render the report and save it through the local save host"""
        channel = DistributionChannel.LOCAL
        try:
            with self.guard.hold(record.id, channel.value):
                artifact = await self.renderer.render(record)
                filename = derive_export_filename(record)
                location = await self.save_host.save(filename, artifact.to_bytes())
        except OperationInProgressError as e:
            return self._busy(channel, record, e)
        except (RenderFailure, HandoffFailure) as e:
            return self._failed(channel, record, messages.EXPORT_FAILED, e)

        logger.info(
            f"Report {record.id} exported to {location}",
            extra={"record_id": record.id, "channel": channel.value},
        )
        metrics.track_distribution(channel.value, "success")
        return DistributionResult(
            success=True,
            channel=channel,
            record_id=record.id,
            message=messages.EXPORT_SUCCESS,
            filename=filename,
            location=location,
        )

    async def sync_remote(self, record: ReportRecord) -> DistributionResult:
        """Render the report and push it to the remote document store"""
        channel = DistributionChannel.REMOTE
        try:
            with self.guard.hold(record.id, channel.value):
                if self.gateway is None:
                    raise ConfigurationError("Remote sync gateway is not configured", setting="gateway_url")

                artifact = await self.renderer.render(record)
                filename = derive_export_filename(record)
                file_url = await self._transport(record, artifact, filename)
        except OperationInProgressError as e:
            return self._busy(channel, record, e)
        except ConfigurationError as e:
            return self._failed(channel, record, messages.SYNC_NOT_CONFIGURED, e)
        except (RenderFailure, TransportFailure) as e:
            return self._failed(channel, record, messages.SYNC_FAILED, e)

        logger.info(
            f"Report {record.id} synced to remote store",
            extra={"record_id": record.id, "channel": channel.value},
        )
        metrics.track_distribution(channel.value, "success")
        return DistributionResult(
            success=True,
            channel=channel,
            record_id=record.id,
            message=messages.SYNC_SUCCESS,
            filename=filename,
            file_url=file_url,
        )

    async def _transport(self, record: ReportRecord, artifact: RenderedArtifact, filename: str) -> Optional[str]:
        try:
            response = await asyncio.wait_for(
                self.gateway.sync(record, artifact.to_data_uri(), filename),
                timeout=self.sync_timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportFailure(f"Gateway did not answer within {self.sync_timeout:g}s") from e
        except TransportFailure:
            raise
        except Exception as e:
            raise TransportFailure(f"Gateway call failed: {e}") from e

        if not response.success:
            raise TransportFailure(response.message or "Gateway reported an unsuccessful save")
        return response.file_url

    async def share_ephemeral(self, record: ReportRecord) -> DistributionResult:
        """Render the report, publish a session-only link and copy it to the clipboard"""
        channel = DistributionChannel.SHARE
        try:
            with self.guard.hold(record.id, channel.value):
                artifact = await self.renderer.render(record)
                filename = derive_export_filename(record)
                handle = await self.share_registry.publish(filename, artifact.to_bytes())
                try:
                    await self.clipboard.write_text(handle.url)
                except HandoffFailure:
                    self.share_registry.revoke(handle)
                    raise
        except OperationInProgressError as e:
            return self._busy(channel, record, e)
        except (RenderFailure, HandoffFailure) as e:
            return self._failed(channel, record, messages.SHARE_FAILED, e)

        metrics.track_distribution(channel.value, "success")
        return DistributionResult(
            success=True,
            channel=channel,
            record_id=record.id,
            message=messages.SHARE_SUCCESS,
            filename=filename,
            location=handle.path,
            share_url=handle.url,
            caveat=handle.caveat,
        )

    def close(self) -> None:
        """End the session: revoke share links"""
        self.share_registry.close()

    def _busy(self, channel: DistributionChannel, record: ReportRecord, error: OperationInProgressError):
        logger.warning(
            f"Ignoring {channel.value} request for report {record.id}: operation in progress",
            extra={"record_id": record.id, "channel": channel.value},
        )
        metrics.track_distribution(channel.value, "busy")
        return DistributionResult(
            success=False,
            channel=channel,
            record_id=record.id,
            message=messages.BUSY,
            error_code=error.error_code,
            error_message=error.message,
        )

    def _failed(self, channel: DistributionChannel, record: ReportRecord, message: str, error: OPRError):
        logger.error(
            f"{channel.value} distribution of report {record.id} failed: {error.message}",
            extra={"record_id": record.id, "channel": channel.value},
        )
        metrics.track_distribution(channel.value, "failed")
        metrics.track_error(error.error_code, "d9_delivery")
        return DistributionResult(
            success=False,
            channel=channel,
            record_id=record.id,
            message=message,
            error_code=error.error_code,
            error_message=error.message,
        )
