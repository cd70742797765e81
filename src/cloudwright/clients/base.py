from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cloudwright.errors import (
    PlatformAPIError,
    ResourceConflictError,
    ResourceNotFoundError,
    RetryableHTTPError,
    UnauthorizedError,
)

logger = structlog.get_logger()


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


@dataclass(frozen=True)
class ApiResponse:
    """Status code and decoded JSON body of a platform response."""

    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def classify(response: ApiResponse, message: str) -> PlatformAPIError:
    """Map a non-success response onto the matching error class."""
    status = response.status_code
    if status == 404:
        return ResourceNotFoundError(message, status)
    if status == 409:
        return ResourceConflictError(message, status)
    if status in (401, 403):
        return UnauthorizedError(message, status)
    return PlatformAPIError(message, status)


class BaseHTTPClient:
    """Base HTTP client with retry logic for transient failures.

    Non-retryable statuses are returned to the caller untouched; callers
    decide whether a 404 or 409 is an error.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_factor = backoff_factor

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        """Override to provide custom headers."""
        return {"Content-Type": "application/json", "Accept": "application/json"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Execute HTTP request, retrying transient failures."""
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff_factor, max=30),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._send(method, path, json=json)
        return response

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> ApiResponse:
        url = f"{self._base_url}{path}"
        req_headers = self._headers()

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    json=json,
                    headers=req_headers,
                )
        except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableHTTPError(f"{method} {path}: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("http_unexpected_error", method=method, url=url, error=str(exc))
            raise PlatformAPIError(f"{method} {path}: {exc}") from exc

        if is_retryable_status(response.status_code):
            logger.warning(
                "http_retryable_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise RetryableHTTPError(
                f"HTTP {response.status_code}: {response.text}",
                response.status_code,
            )

        return ApiResponse(status_code=response.status_code, body=_decode(response))

    async def get(self, path: str) -> ApiResponse:
        """Execute GET request."""
        return await self._request("GET", path)

    async def post(self, path: str, *, json: dict[str, Any] | None = None) -> ApiResponse:
        """Execute POST request."""
        return await self._request("POST", path, json=json)

    async def delete(self, path: str) -> ApiResponse:
        """Execute DELETE request."""
        return await self._request("DELETE", path)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        logger.debug("http_non_json_body", status=response.status_code)
        return None
