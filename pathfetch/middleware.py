"""
Ready-made middlewares.

Each factory returns an async `(url, init, next)` callable suitable for
`Fetcher.use()` or `Fetcher.configure(use=[...])`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from .clients.pipeline import Fetch, Middleware
from .exceptions import ApiError, MethodNotAllowedError
from .models import ApiResponse
from .types import BODY_METHODS, Method, RequestInit

SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})


def redact_headers(headers: Any) -> dict[str, str]:
    """Return a printable copy of `headers` with credentials masked."""
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in httpx.Headers(headers).items()
    }


def with_headers(headers: Mapping[str, str]) -> Middleware:
    """Set headers on every request, replacing values already present."""

    async def _middleware(url: str, init: RequestInit, next: Fetch) -> ApiResponse[Any]:
        merged = httpx.Headers(init.get("headers"))
        for key, value in headers.items():
            merged[key] = value
        return await next(url, {**init, "headers": merged})

    return _middleware


def bearer_auth(token: str) -> Middleware:
    """Inject `Authorization: Bearer <token>`."""
    return with_headers({"Authorization": f"Bearer {token}"})


def request_logger(
    logger: logging.Logger | None = None,
    *,
    level: int = logging.DEBUG,
) -> Middleware:
    """
    Log each request and its outcome.

    Credentials in headers are redacted. Failures are logged and re-raised.
    """
    log = logger or logging.getLogger("pathfetch.requests")

    async def _middleware(url: str, init: RequestInit, next: Fetch) -> ApiResponse[Any]:
        method = init.get("method", "GET")
        if log.isEnabledFor(level):
            log.log(level, f"--> {method} {url} headers={redact_headers(init.get('headers'))}")
        started = time.monotonic()
        try:
            response = await next(url, init)
        except ApiError as e:
            elapsed = time.monotonic() - started
            log.log(level, f"<-- {e.status} {e.status_text} {method} {url} ({elapsed:.3f}s)")
            raise
        except Exception as e:
            elapsed = time.monotonic() - started
            log.warning(f"<-- {type(e).__name__} {method} {url} ({elapsed:.3f}s): {e}")
            raise
        elapsed = time.monotonic() - started
        log.log(level, f"<-- {response.status} {response.status_text} {method} {url} ({elapsed:.3f}s)")
        return response

    return _middleware


def block_methods(methods: Iterable[Method | str] = BODY_METHODS) -> Middleware:
    """
    Refuse requests whose method is in `methods` before they reach the network.

    The default blocks every body-sending method, making the fetcher read-only.
    """
    blocked = frozenset(Method(m.lower() if isinstance(m, str) else m).value.upper() for m in methods)

    async def _middleware(url: str, init: RequestInit, next: Fetch) -> ApiResponse[Any]:
        method = str(init.get("method", Method.GET.value)).upper()
        if method in blocked:
            raise MethodNotAllowedError(f"{method} {url} is blocked by this fetcher", method=method, url=url)
        return await next(url, init)

    return _middleware
