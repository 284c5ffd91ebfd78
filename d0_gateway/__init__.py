"""
D0 Gateway - Client for the remote report store

No other domain makes direct external calls - everything goes through this gateway.
"""

from .base import BaseAPIClient
from .sync_gateway import RemoteSyncGateway, SyncResponse, get_sync_gateway

__all__ = [
    "BaseAPIClient",
    "RemoteSyncGateway",
    "SyncResponse",
    "get_sync_gateway",
]
