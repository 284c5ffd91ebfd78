"""
D9 Delivery Module

Distribution of rendered reports: local export, remote sync and
session-only share links.
"""

from .hosts import (
    Clipboard,
    DirectorySaveHost,
    EphemeralShareRegistry,
    InMemorySaveHost,
    LocalSaveHost,
    MemoryClipboard,
    PyperclipClipboard,
    ShareHandle,
)
from .orchestrator import (
    BusyGuard,
    DistributionChannel,
    DistributionOrchestrator,
    DistributionResult,
    derive_export_basename,
    derive_export_filename,
)

__all__ = [
    "BusyGuard",
    "Clipboard",
    "DirectorySaveHost",
    "DistributionChannel",
    "DistributionOrchestrator",
    "DistributionResult",
    "EphemeralShareRegistry",
    "InMemorySaveHost",
    "LocalSaveHost",
    "MemoryClipboard",
    "PyperclipClipboard",
    "ShareHandle",
    "derive_export_basename",
    "derive_export_filename",
]
