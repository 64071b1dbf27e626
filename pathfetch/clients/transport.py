"""
Default raw transport built on `httpx.AsyncClient`.

Any `async (url, init) -> httpx.Response` callable can be used instead.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..models import FormData
from ..types import RequestInit
from .codec import stringify

logger = logging.getLogger(__name__)

_PASSTHROUGH = ("timeout", "follow_redirects", "extensions")


def _is_file(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, tuple)) or hasattr(value, "read")


def form_to_httpx(form: FormData) -> list[tuple[str, Any]]:
    """
    Convert a `FormData` into an httpx `files=` list.

    Plain values become `(None, text)` parts so httpx encodes them as regular
    fields, keeping field order and forcing a multipart body.
    """
    files: list[tuple[str, Any]] = []
    for name, value in form:
        if _is_file(value):
            files.append((name, value))
        else:
            files.append((name, (None, stringify(value))))
    return files


class HttpxTransport:
    """
    Raw fetch primitive backed by `httpx.AsyncClient`.

    Redirects are followed by default, as browser fetch does.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(transport=transport, follow_redirects=True)

    async def __call__(self, url: str, init: RequestInit) -> httpx.Response:
        kwargs: dict[str, Any] = {key: init[key] for key in _PASSTHROUGH if key in init}  # type: ignore[literal-required]
        body = init.get("body")
        headers = httpx.Headers(init.get("headers"))

        if isinstance(body, FormData):
            # httpx writes its own multipart Content-Type with the boundary.
            kwargs["files"] = form_to_httpx(body)
        elif body is not None:
            kwargs["content"] = body

        method = init.get("method", "GET")
        response = await self._client.request(method, url, headers=headers, **kwargs)
        logger.debug(f"{method} {url} -> {response.status_code} ({response.http_version})")
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
