"""Base async HTTP client with optional retry logic."""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from journal_sync.exceptions import RemoteAuthFailure, RemoteSyncFailure


class BaseAsyncClient:
    """Base async HTTP client for Google REST endpoints.

    ``max_attempts`` defaults to 1: remote calls are not retried
    automatically, a manual reconnect re-runs the initialization path.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_attempts: int = 1,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.access_token = access_token
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAsyncClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client instance."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._client

    def _get_headers(self) -> dict[str, str]:
        """Get default headers, with a bearer token when one is set."""
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request, retrying transport errors up to ``max_attempts``."""
        headers = {**self._get_headers(), **kwargs.pop("headers", {})}
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        ):
            with attempt:
                response = await self.client.request(
                    method,
                    endpoint,
                    headers=headers,
                    **kwargs,
                )
                response.raise_for_status()
        return response


class GoogleApiClient(BaseAsyncClient):
    """Base client translating Google REST failures into remote errors."""

    def _handle_http_error(self, operation: str, exc: httpx.HTTPStatusError) -> None:
        response = exc.response
        message = response.reason_phrase
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            message = payload["error"].get("message") or message

        error_cls = RemoteAuthFailure if response.status_code in (401, 403) else RemoteSyncFailure
        raise error_cls(
            f"HTTP {response.status_code} during {operation}: {message}",
            operation=operation,
            status_code=response.status_code,
        ) from exc

    async def _send(self, operation: str, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make a request, raising RemoteAuthFailure/RemoteSyncFailure on failure."""
        try:
            return await self._request(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(operation, exc)
            raise
        except httpx.HTTPError as exc:
            raise RemoteSyncFailure(
                f"Transport error during {operation}: {exc}",
                operation=operation,
            ) from exc

    async def _send_json(self, operation: str, method: str, endpoint: str, **kwargs: Any) -> Any:
        response = await self._send(operation, method, endpoint, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteSyncFailure(
                f"Invalid JSON response during {operation}",
                operation=operation,
                status_code=response.status_code,
            ) from exc
