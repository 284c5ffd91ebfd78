"""
Base API client with common functionality for external web services
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from core.config import get_settings
from core.exceptions import TransportFailure
from core.logging import get_logger
from core.metrics import metrics


class BaseAPIClient(ABC):
    """Abstract base class for external API clients"""

    def __init__(
        self,
        provider: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider = provider
        self.settings = get_settings()
        self.logger = get_logger(f"gateway.{provider}", domain="d0_gateway")
        self.base_url = base_url or self._get_base_url()
        self.timeout = timeout if timeout is not None else float(self.settings.request_timeout)

        # Web app deployments answer through a redirect to the content host
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=self._get_headers(),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    @abstractmethod
    def _get_base_url(self) -> str:
        """Get the base URL for this provider"""

    @abstractmethod
    def _get_headers(self) -> Dict[str, str]:
        """Get request headers for this provider"""

    async def make_request(self, method: str, endpoint: str = "", **kwargs) -> Dict[str, Any]:
        """
        Make a request and decode the JSON body

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Path appended to the base URL, empty for the base URL itself
            **kwargs: Additional arguments passed to httpx

        Returns:
            Dict containing the decoded response

        Raises:
            TransportFailure: network error, non-2xx status or undecodable body
        """
        url = self.base_url if not endpoint else f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        start_time = time.time()
        success = False

        try:
            try:
                response = await self.client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                self.logger.error(f"{self.provider} request failed: {e}")
                raise TransportFailure(f"Request failed: {e}", provider=self.provider) from e

            if response.status_code >= 400 or response.status_code < 200:
                error_msg = f"HTTP {response.status_code}"
                self.logger.error(f"{self.provider} returned {error_msg}")
                raise TransportFailure(
                    error_msg,
                    provider=self.provider,
                    status_code=response.status_code,
                    response_body=response.text[:500],
                )

            try:
                response_data = response.json()
            except ValueError as e:
                raise TransportFailure(
                    "Response was not valid JSON",
                    provider=self.provider,
                    status_code=response.status_code,
                    response_body=response.text[:500],
                ) from e

            if not isinstance(response_data, dict):
                raise TransportFailure(
                    "Response JSON was not an object",
                    provider=self.provider,
                    status_code=response.status_code,
                )

            success = True
            return response_data

        finally:
            duration = time.time() - start_time
            metrics.track_gateway_call(duration, success)
            self.logger.debug(f"{method} {self.provider} finished in {duration:.2f}s (success={success})")
