"""
D11 Orchestration Domain

Report lifecycle state machine and user notifications.
"""

from .lifecycle import LifecycleController, LifecycleState, View
from .notifications import Notification, NotificationCenter, NotificationKind

__all__ = [
    "LifecycleController",
    "LifecycleState",
    "View",
    "Notification",
    "NotificationCenter",
    "NotificationKind",
]
