"""
Remote Sync Gateway client

Posts a rendered report and its metadata to the document-store web app. The
web app uploads the PDF to the shared drive folder and appends the metadata
row to the index sheet; the two steps are reported back as one outcome.

Endpoint: POST <gateway_url>
Body: {"action": "saveReport", "fileName": ..., "pdfBase64": ..., "record": {...}}
Response: {"status": "success", "fileUrl": ...} or {"status": "error", "message": ...}
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from core.config import get_settings
from core.exceptions import ConfigurationError, TransportFailure
from d0_gateway.base import BaseAPIClient
from d1_records.schemas import ReportRecord

SAVE_ACTION = "saveReport"
SUCCESS_STATUS = "success"


@dataclass
class SyncResponse:
    """Decoded gateway reply"""

    success: bool
    file_url: Optional[str] = None
    message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SyncResponse":
        return cls(
            success=payload.get("status") == SUCCESS_STATUS,
            file_url=payload.get("fileUrl"),
            message=payload.get("message"),
            raw=payload,
        )


class RemoteSyncGateway(BaseAPIClient):
    """Client for the report document store + metadata sheet web app"""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        url = url or settings.gateway_url
        if not url:
            raise ConfigurationError("Remote sync gateway URL is not configured", setting="gateway_url")

        if token is None and settings.gateway_token is not None:
            token = settings.gateway_token.get_secret_value()
        self.token = token

        super().__init__(provider="sync_gateway", base_url=url, timeout=timeout, transport=transport)

    def _get_base_url(self) -> str:
        return get_settings().gateway_url or ""

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def build_payload(record: ReportRecord, data_uri: str, filename: str) -> Dict[str, Any]:
        """Request body for one report upload"""
        return {
            "action": SAVE_ACTION,
            "fileName": filename,
            "pdfBase64": data_uri,
            "record": record.to_wire(),
        }

    async def sync(self, record: ReportRecord, data_uri: str, filename: str) -> SyncResponse:
        """
        Upload the rendered document and index the record

        Returns:
            SyncResponse, successful only when the gateway says so

        Raises:
            TransportFailure: network error, non-2xx status or undecodable reply
        """
        self.logger.info(f"Syncing report {record.id} as {filename}")
        payload = self.build_payload(record, data_uri, filename)
        response = SyncResponse.from_payload(await self.make_request("POST", json=payload))

        if response.success:
            self.logger.info(f"Report {record.id} synced: {response.file_url}")
        else:
            self.logger.warning(f"Gateway rejected report {record.id}: {response.message or response.raw.get('status')}")
        return response


def get_sync_gateway(transport: Optional[httpx.AsyncBaseTransport] = None) -> Optional[RemoteSyncGateway]:
    """Gateway built from settings, or None when no URL is configured"""
    if not get_settings().gateway_configured:
        return None
    return RemoteSyncGateway(transport=transport)


__all__ = ["RemoteSyncGateway", "SyncResponse", "TransportFailure", "get_sync_gateway"]
