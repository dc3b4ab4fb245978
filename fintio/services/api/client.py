"""
Fintio Backend API Client

DESIGN DECISION: One thin client owns every HTTP call.
Read hooks and mutation services never build requests themselves, so
there is exactly one place that decides what a failed response means.

This service handles:
1. Issuing JSON requests against the backend
2. Turning transport failures and bad statuses into typed errors
3. Parsing response bodies, in one of two styles:
   - STRICT: a non-2xx status is an error before the body is read
   - LENIENT: the body is parsed whatever the status; only an empty or
     unparseable body is an error

No retries happen here. A failed call is terminal for that attempt.
"""

import time
from enum import Enum
from typing import Any, Optional

import httpx

from fintio.cache.keys import CacheKey
from fintio.config import get_settings
from fintio.telemetry import get_logger


class FetchStyle(str, Enum):
    """How a read treats a non-2xx response."""
    STRICT = "strict"
    LENIENT = "lenient"


class ApiError(Exception):
    """Base exception for backend API errors."""
    pass


class HttpStatusError(ApiError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str, detail: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        self.detail = detail
        message = f"Request to {url} failed with status {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ResponseParseError(ApiError):
    """The response body was empty or not valid JSON."""
    pass


class TransportError(ApiError):
    """The request never got an HTTP answer (DNS, connect, timeout...)."""
    pass


def error_detail(response: httpx.Response) -> Optional[str]:
    """The backend's {"error": "..."} message, if the body carries one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class BudgetApiClient:
    """
    Async JSON client for the Fintio backend.

    Args:
        base_url: Backend base URL. Defaults to ApiSettings.base_url.
        timeout: Seconds per request. Defaults to ApiSettings.timeout_seconds.
        fetch_style: Default read style. Defaults to ApiSettings.fetch_style.
        transport: Optional httpx transport (e.g. httpx.MockTransport).
        http_client: Optional long-lived httpx.AsyncClient. The caller owns
            its lifecycle. Without one, each request opens a short-lived
            client, which keeps the client usable across event loops.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        fetch_style: Optional[FetchStyle] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings().api
        self._base_url = (base_url or settings.base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.timeout_seconds
        self._fetch_style = fetch_style or FetchStyle(settings.fetch_style)
        self._transport = transport
        self._http_client = http_client
        self._logger = get_logger("fintio.api")

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def fetch_style(self) -> FetchStyle:
        return self._fetch_style

    async def request(
        self,
        method: str,
        path: str,
        payload: Optional[Any] = None,
    ) -> httpx.Response:
        """
        Send one request and return the raw response, whatever its status.

        Bodies are sent as JSON with Content-Type: application/json.

        Raises:
            TransportError: If no HTTP response was received
        """
        kwargs: dict[str, Any] = {}
        if payload is not None:
            kwargs["json"] = payload

        started = time.monotonic()
        try:
            if self._http_client is not None:
                response = await self._http_client.request(
                    method, self._absolute(path), **kwargs
                )
            else:
                async with httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            self._logger.error(
                "api_request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(f"{method} {path} failed: {e}") from e

        self._logger.info(
            "api_request",
            method=method,
            path=path,
            status=response.status_code,
            elapsed_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return response

    async def get_json(self, path: str, style: Optional[FetchStyle] = None) -> Any:
        """
        GET a path and return the parsed JSON body.

        Raises:
            HttpStatusError: STRICT style and a non-2xx status
            ResponseParseError: Empty or unparseable body
            TransportError: No HTTP response
        """
        style = style or self._fetch_style
        response = await self.request("GET", path)

        if style == FetchStyle.STRICT and not response.is_success:
            raise HttpStatusError(
                status_code=response.status_code,
                url=path,
                detail=error_detail(response),
            )

        return self.parse_json(response)

    async def fetch(self, key: CacheKey, style: Optional[FetchStyle] = None) -> Any:
        """Cache fetcher: GET the URL a key renders to."""
        return await self.get_json(key.url, style)

    @staticmethod
    def parse_json(response: httpx.Response) -> Any:
        """
        Parse a response body as JSON.

        Raises:
            ResponseParseError: If the body is empty or not JSON
        """
        if not response.content:
            raise ResponseParseError(
                f"Empty response body (status {response.status_code})"
            )
        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(
                f"Invalid JSON in response (status {response.status_code}): {e}"
            ) from e

    def _absolute(self, path: str) -> str:
        return f"{self._base_url}{path}"
