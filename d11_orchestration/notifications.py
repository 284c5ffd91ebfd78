"""
Notification center for the report lifecycle

Toasts are transient confirmations that expire on their own; alerts stay
until dismissed.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from core.config import get_settings


class NotificationKind(str, Enum):
    TOAST = "toast"
    ALERT = "alert"


@dataclass
class Notification:
    kind: NotificationKind
    message: str
    created_at: float
    expires_at: Optional[float] = None
    detail: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    def is_active(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


class NotificationCenter:
    """Keeps the user-facing toasts and alerts"""

    def __init__(self, toast_duration: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.toast_duration = toast_duration if toast_duration is not None else get_settings().toast_duration_seconds
        self._clock = clock
        self._notifications: List[Notification] = []
        self._listeners: List[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it"""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def toast(self, message: str) -> Notification:
        now = self._clock()
        return self._publish(
            Notification(NotificationKind.TOAST, message, created_at=now, expires_at=now + self.toast_duration)
        )

    def alert(self, message: str, detail: Optional[str] = None) -> Notification:
        return self._publish(Notification(NotificationKind.ALERT, message, created_at=self._clock(), detail=detail))

    def dismiss(self, notification_id: str) -> bool:
        before = len(self._notifications)
        self._notifications = [n for n in self._notifications if n.id != notification_id]
        return len(self._notifications) != before

    def active(self) -> List[Notification]:
        """Notifications still visible, oldest first; expired toasts are dropped"""
        now = self._clock()
        self._notifications = [n for n in self._notifications if n.is_active(now)]
        return list(self._notifications)

    def latest_toast(self) -> Optional[Notification]:
        toasts = [n for n in self.active() if n.kind == NotificationKind.TOAST]
        return toasts[-1] if toasts else None

    def _publish(self, notification: Notification) -> Notification:
        self._notifications = [n for n in self._notifications if n.is_active(notification.created_at)]
        self._notifications.append(notification)
        for listener in list(self._listeners):
            listener(notification)
        return notification
