"""Sync and async HTTP transports for the Notion API.

Each request makes exactly one attempt:

1. Send the HTTP request with auth and version headers.
2. On ``2xx`` -- return the parsed JSON body.
3. On any other status -- raise the matching typed error.
4. On timeouts and connection failures -- raise
   :class:`NotionBlogNetworkError`.

Nothing is retried.  Callers that can degrade (the tree fetcher) catch
:class:`NotionBlogError` themselves; everything else propagates.
"""

from __future__ import annotations

import json as _json
import sys
import time
from typing import Any

import httpx

from notionblog.config import NotionBlogConfig
from notionblog.errors import (
    NotionBlogAuthError,
    NotionBlogNetworkError,
    NotionBlogNotFoundError,
    NotionBlogPermissionError,
    NotionBlogRateLimitError,
    NotionBlogValidationError,
)
from notionblog.observability import get_logger, log_event, resolve_metrics

log = get_logger("notionblog.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Return the ``Retry-After`` header as seconds, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the :class:`NotionBlogError` subclass matching a non-2xx status."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    notion_message = body.get("message", response.text[:500])
    notion_code = body.get("code", "")
    ctx: dict[str, Any] = {"status_code": status, "notion_code": notion_code, "path": path}

    if status == 401:
        raise NotionBlogAuthError(
            message=f"Authentication failed on {method} {path}: {notion_message}",
            context=ctx,
        )
    if status == 403:
        raise NotionBlogPermissionError(
            message=f"Permission denied on {method} {path}: {notion_message}",
            context={**ctx, "operation": f"{method} {path}"},
        )
    if status == 404:
        raise NotionBlogNotFoundError(
            message=f"Resource not found on {method} {path}: {notion_message}",
            context=ctx,
        )
    if status == 429:
        raise NotionBlogRateLimitError(
            message=f"Rate limited on {method} {path}: {notion_message}",
            context={**ctx, "retry_after_seconds": _parse_retry_after(response)},
        )
    raise NotionBlogValidationError(
        message=f"Notion returned {status} on {method} {path}: {notion_message}",
        context=ctx,
    )


def _dump_payload(
    config: NotionBlogConfig,
    method: str,
    response: httpx.Response,
    request_body: Any | None,
) -> None:
    """Write a redacted request/response dump to stderr when enabled."""
    if not config.debug_dump_payload:
        return
    from notionblog.utils.redact import redact

    try:
        response_body: Any = response.json()
    except ValueError:
        response_body = response.text[:1000]

    dump: dict[str, Any] = {
        "method": method,
        "url": str(response.url),
        "response_status": response.status_code,
        "response_body": response_body,
    }
    if request_body is not None:
        dump["request_body"] = request_body
    print(
        _json.dumps(redact(dump, secrets=[config.token]), indent=2, default=str),
        file=sys.stderr,
    )


def _build_client_kwargs(config: NotionBlogConfig) -> dict[str, Any]:
    return {
        "base_url": config.base_url,
        "headers": {
            "Authorization": f"Bearer {config.token}",
            "Notion-Version": config.notion_version,
            "Content-Type": "application/json",
        },
        "timeout": httpx.Timeout(config.timeout_seconds),
        "proxy": config.http_proxy,
    }


class _TransportBase:
    """Response handling shared by the sync and async transports."""

    def __init__(self, config: NotionBlogConfig) -> None:
        self._config = config
        self._metrics = resolve_metrics(config.metrics)

    def _network_error(self, method: str, path: str, exc: Exception) -> NotionBlogNetworkError:
        self._metrics.increment(
            "notionblog.requests_total",
            tags={"method": method, "status": "error"},
        )
        log.warning(
            "Notion request failed at the network level",
            extra=log_event("request", method=method, path=path, error=str(exc)),
        )
        return NotionBlogNetworkError(
            message=f"Network error on {method} {path}: {exc}",
            context={"url": path},
            cause=exc,
        )

    def _handle_response(
        self,
        method: str,
        path: str,
        response: httpx.Response,
        elapsed_ms: float,
        request_body: Any | None,
    ) -> dict:
        status = str(response.status_code)
        self._metrics.increment(
            "notionblog.requests_total",
            tags={"method": method, "status": status},
        )
        self._metrics.timing(
            "notionblog.request_duration_ms",
            elapsed_ms,
            tags={"method": method, "status": status},
        )
        _dump_payload(self._config, method, response, request_body)

        if 200 <= response.status_code < 300:
            if response.status_code == 204 or not response.content:
                return {}
            result: dict = response.json()
            return result

        _raise_for_status(response, method, path)
        return {}  # unreachable: _raise_for_status always raises


# ---------------------------------------------------------------------------
# Sync transport
# ---------------------------------------------------------------------------

class NotionTransport(_TransportBase):
    """Synchronous Notion transport.

    Parameters
    ----------
    config:
        Supplies credentials, base URL, timeout and proxy.
    client:
        Optional pre-built :class:`httpx.Client`; tests pass one wired to an
        :class:`httpx.MockTransport`.
    """

    def __init__(self, config: NotionBlogConfig, client: httpx.Client | None = None) -> None:
        super().__init__(config)
        self._client = client or httpx.Client(**_build_client_kwargs(config))

    def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Send one request and return the parsed JSON body.

        Parameters
        ----------
        method:
            HTTP method.
        path:
            Path relative to ``base_url`` (e.g. ``/pages/<id>``).
        **kwargs:
            Forwarded to :meth:`httpx.Client.request` (``params=``,
            ``json=``).

        Raises
        ------
        NotionBlogAuthError
            On 401.
        NotionBlogPermissionError
            On 403.
        NotionBlogNotFoundError
            On 404.
        NotionBlogRateLimitError
            On 429.
        NotionBlogValidationError
            On every other non-2xx status.
        NotionBlogNetworkError
            On timeouts and connection failures.
        """
        t0 = time.monotonic()
        try:
            response = self._client.request(method, path, **kwargs)
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            raise self._network_error(method, path, exc) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000
        return self._handle_response(method, path, response, elapsed_ms, kwargs.get("json"))

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> NotionTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncNotionTransport(_TransportBase):
    """Asynchronous Notion transport.

    Mirrors :class:`NotionTransport` over :class:`httpx.AsyncClient`.
    """

    def __init__(
        self,
        config: NotionBlogConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self._client = client or httpx.AsyncClient(**_build_client_kwargs(config))

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Send one request (async).

        See :meth:`NotionTransport.request` for the error contract.
        """
        t0 = time.monotonic()
        try:
            response = await self._client.request(method, path, **kwargs)
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            raise self._network_error(method, path, exc) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000
        return self._handle_response(method, path, response, elapsed_ms, kwargs.get("json"))

    async def close(self) -> None:
        """Close the underlying async HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
