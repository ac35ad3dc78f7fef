"""
Low-level HTTP client for the productivity backend.
Handles client lifecycle, bearer headers and mapping responses to typed failures.
Requests are sent once; nothing here retries.
"""

import time
from typing import Any

import httpx

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger, log_sync_call
from growseed.services.errors import FormatFailure, TransportFailure

logger = get_logger(__name__)


class BackendClient:
    """Thin async wrapper around httpx for backend calls."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.BACKEND_BASE_URL).rstrip("/")
        self._client = self._create_client(timeout or settings.REQUEST_TIMEOUT_SECONDS)

    def _create_client(self, timeout_seconds: float) -> httpx.AsyncClient:
        """Create async HTTP client for backend calls."""
        timeout = httpx.Timeout(timeout_seconds)
        limits = httpx.Limits(max_keepalive_connections=5, max_connections=10)
        return httpx.AsyncClient(timeout=timeout, limits=limits)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def headers(token: str | None = None) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def send(self, method: str, path: str, operation: str, **kwargs) -> httpx.Response:
        """
        Send one request.

        Raises:
            TransportFailure: If the backend cannot be reached
        """
        start = time.time()
        try:
            response = await self._client.request(method, self.url(path), **kwargs)
        except httpx.RequestError as e:
            log_sync_call(operation, False, round((time.time() - start) * 1000, 2))
            logger.error("Backend unreachable", operation=operation, error=str(e))
            raise TransportFailure(f"{operation} failed: {e}") from e

        log_sync_call(
            operation,
            response.is_success,
            round((time.time() - start) * 1000, 2),
            status_code=response.status_code,
        )
        return response

    @staticmethod
    def error_message(response: httpx.Response, label: str, *fields: str) -> str:
        """Server-provided message if present, else the status reason phrase."""
        try:
            data = response.json() if response.text else {}
        except ValueError:
            data = {}

        if isinstance(data, dict):
            for field in fields:
                value = data.get(field)
                if isinstance(value, str) and value:
                    return value

        reason = response.reason_phrase or f"HTTP {response.status_code}"
        return f"{label}: {reason}"

    @staticmethod
    def parse_json(response: httpx.Response, operation: str) -> Any:
        """
        Decode a successful response body.

        Raises:
            FormatFailure: If the body is not JSON
        """
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error("Failed to parse backend response", operation=operation, error=str(e))
            raise FormatFailure(f"Invalid response format from {operation}: {e}") from e

    def raise_for_failure(self, response: httpx.Response, operation: str, label: str) -> None:
        """Map a non-2xx response to TransportFailure."""
        if response.is_success:
            return

        message = self.error_message(response, label, "error", "message")
        logger.warning(
            "Backend call failed",
            operation=operation,
            status_code=response.status_code,
            error_message=message,
        )
        raise TransportFailure(message, status_code=response.status_code)
