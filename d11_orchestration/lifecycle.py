"""
Report Lifecycle Controller

Owns the current view and the working record, and moves a report through

    DASHBOARD -> EDITING -> PREVIEWING -> (export | share | sync) -> DASHBOARD

Distribution is delegated to the DistributionOrchestrator; outcomes are
published as toasts (success) or alerts (failure). Only a successful remote
sync changes the stored record: it is saved as Finalized and the controller
returns to the dashboard after a short delay.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import ValidationError as SchemaValidationError

from core.config import get_settings
from core.exceptions import InvalidTransitionError, NotFoundError, StorageFailure, ValidationError, ValidationGap
from d1_records.schemas import IMMUTABLE_FIELDS, IdentifierAllocator, ReportRecord, ReportStatus, default_allocator, now_ms
from d1_records.store import RecordStore
from d10_analytics.aggregators import DashboardAggregator, DashboardStatistics
from d9_delivery import messages
from d9_delivery.orchestrator import DistributionChannel, DistributionOrchestrator, DistributionResult
from d11_orchestration.notifications import NotificationCenter

logger = logging.getLogger(__name__)

DRAFT_SAVED = "Draft disimpan di dalam pangkalan data."


class View(str, Enum):
    DASHBOARD = "dashboard"
    EDITING = "editing"
    PREVIEWING = "previewing"


@dataclass(frozen=True)
class LifecycleState:
    view: View
    record: Optional[ReportRecord] = None


class LifecycleController:
    """State machine for one user's report session"""

    def __init__(
        self,
        store: RecordStore,
        orchestrator: DistributionOrchestrator,
        aggregator: Optional[DashboardAggregator] = None,
        notifications: Optional[NotificationCenter] = None,
        allocator: Optional[IdentifierAllocator] = None,
        return_delay: Optional[float] = None,
    ):
        settings = get_settings()
        self.store = store
        self.orchestrator = orchestrator
        self.aggregator = aggregator or DashboardAggregator(store)
        self.notifications = notifications or NotificationCenter()
        self.allocator = allocator or default_allocator
        self.return_delay = return_delay if return_delay is not None else settings.sync_return_delay_seconds

        self._state = LifecycleState(View.DASHBOARD)
        self._listeners: List[Callable[[LifecycleState], None]] = []
        self.pending_return: Optional[asyncio.Task] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def view(self) -> View:
        return self._state.view

    @property
    def record(self) -> Optional[ReportRecord]:
        return self._state.record

    @property
    def is_busy(self) -> bool:
        return self.record is not None and self.orchestrator.is_busy(self.record.id)

    def subscribe(self, listener: Callable[[LifecycleState], None]) -> Callable[[], None]:
        """Call ``listener`` with the new state after every transition"""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _transition(self, view: View, record: Optional[ReportRecord]) -> LifecycleState:
        previous = self._state
        self._state = LifecycleState(view, record)
        logger.info(
            f"Lifecycle {previous.view.value} -> {view.value}",
            extra={"record_id": record.id if record else None},
        )
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _require(self, action: str, view: View) -> ReportRecord:
        if self.view != view:
            raise InvalidTransitionError(action, self.view.value, view.value)
        if self.record is None:
            raise ValidationGap(f"No report to {action}", field="record")
        return self.record

    # Navigation

    def create_new(self) -> ReportRecord:
        """Start a fresh draft with a new identifier"""
        record = ReportRecord(id=self.allocator.allocate(), created_at=now_ms())
        self._transition(View.EDITING, record)
        return record

    def open_existing(self, record: ReportRecord) -> None:
        self._transition(View.PREVIEWING, record)

    def update_draft(self, **changes: Any) -> ReportRecord:
        """Apply field edits to the working copy"""
        current = self._require("edit", View.EDITING)

        frozen = IMMUTABLE_FIELDS.intersection(changes)
        if frozen:
            raise ValidationError(f"Fields cannot be changed: {', '.join(sorted(frozen))}", field=sorted(frozen)[0])

        try:
            record = ReportRecord.model_validate({**current.to_storage(), **changes})
        except SchemaValidationError as e:
            raise ValidationError(f"Invalid report: {e}") from e

        self._transition(View.EDITING, record)
        return record

    def request_preview(self, record: Optional[ReportRecord] = None) -> None:
        record = record or self.record
        if record is None:
            raise ValidationGap("No report to preview", field="record")
        if self.view != View.EDITING:
            raise InvalidTransitionError("preview", self.view.value, View.EDITING.value)
        if self.record is not None and record.id != self.record.id:
            raise ValidationError("Preview must keep the report identifier", field="id")

        self._transition(View.PREVIEWING, record)

    def edit_again(self) -> None:
        record = self._require("edit", View.PREVIEWING)
        self._transition(View.EDITING, record)

    def go_to_dashboard(self) -> None:
        self._transition(View.DASHBOARD, None)

    def dashboard(self) -> DashboardStatistics:
        return self.aggregator.compute_stats()

    # Persistence

    def save_draft(self, record: Optional[ReportRecord] = None) -> ReportRecord:
        """
        Write the record through to the store without changing view

        Raises:
            StorageFailure: the store could not be written
        """
        record = record or self.record
        if record is None:
            raise ValidationGap("No report to save", field="record")

        self.store.save(record)
        if self._holds(record.id):
            self._transition(self.view, record)

        self.notifications.toast(DRAFT_SAVED)
        return record

    # Distribution

    async def export_pdf(self) -> DistributionResult:
        record = self._require("export", View.PREVIEWING)
        result = await self.orchestrator.export_local(record)
        self._publish(result)
        return result

    async def share_link(self) -> DistributionResult:
        record = self._require("share", View.PREVIEWING)
        result = await self.orchestrator.share_ephemeral(record)
        self._publish(result)
        return result

    async def sync_to_cloud(self) -> DistributionResult:
        record = self._require("sync", View.PREVIEWING)
        result = await self.orchestrator.sync_remote(record)
        if not result.success:
            self._publish(result)
            return result

        try:
            finalized = self._finalize(record)
        except StorageFailure as e:
            # Remote copy exists; the local record stays as it was
            logger.error(
                f"Report {record.id} synced but could not be finalized locally: {e.message}",
                extra={"record_id": record.id},
            )
            self.notifications.alert(messages.SYNC_FAILED, detail=e.message)
            return result

        returning = self.view == View.PREVIEWING and self._holds(record.id)
        if returning:
            self._transition(View.PREVIEWING, finalized)
        elif self._holds(record.id):
            # Back in the editor on this report: unsaved edits stay, status follows the store
            self._transition(self.view, self.record.model_copy(update={"status": ReportStatus.FINALIZED}))

        self._publish(result)
        if returning:
            self._schedule_return(record.id)
        return result

    def _finalize(self, record: ReportRecord) -> ReportRecord:
        """Store the latest saved copy of ``record`` as Finalized"""
        try:
            latest = self.store.get(record.id)
        except NotFoundError:
            latest = record
        finalized = latest.model_copy(update={"status": ReportStatus.FINALIZED})
        self.store.save(finalized)
        return finalized

    def _holds(self, record_id: str) -> bool:
        return self.record is not None and self.record.id == record_id

    def _schedule_return(self, record_id: str) -> None:
        if self.pending_return is not None and not self.pending_return.done():
            self.pending_return.cancel()
        self.pending_return = asyncio.get_running_loop().create_task(self._return_after(record_id))

    async def _return_after(self, record_id: str) -> None:
        await asyncio.sleep(self.return_delay)
        if self.view == View.PREVIEWING and self._holds(record_id):
            self.go_to_dashboard()

    def _publish(self, result: DistributionResult) -> None:
        if not result.success:
            self.notifications.alert(result.message, detail=result.error_message)
            return

        if result.channel == DistributionChannel.SHARE:
            self.notifications.alert(
                result.message,
                detail=messages.SHARE_DETAIL.format(url=result.share_url, caveat=result.caveat),
            )
        self.notifications.toast(result.message)

    def close(self) -> None:
        if self.pending_return is not None and not self.pending_return.done():
            self.pending_return.cancel()
        self.orchestrator.close()
