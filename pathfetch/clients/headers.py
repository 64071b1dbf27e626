"""
Header defaults and request-init merging.
"""

from __future__ import annotations

from typing import Any

import httpx

from ..models import FormData
from ..types import DEFAULT_ACCEPT, ContentType, HeadersInit, RequestInit


def compose_headers(
    body: str | FormData | None,
    headers: HeadersInit | None,
    content_type: ContentType | None,
) -> httpx.Headers:
    """
    Fill in `Content-Type` and `Accept` without overriding explicit values.

    Multipart bodies never get a `Content-Type` here; the transport sets it
    together with the boundary.
    """
    result = httpx.Headers(headers)

    if body is not None and "Content-Type" not in result and content_type is not ContentType.MULTIPART:
        result["Content-Type"] = (content_type or ContentType.JSON).value

    if "Accept" not in result:
        result["Accept"] = DEFAULT_ACCEPT

    return result


def merge_request_init(
    first: RequestInit | None = None,
    second: RequestInit | None = None,
) -> RequestInit:
    """
    Overlay `second` onto `first`.

    Headers are merged key by key with `second` winning; every other key is
    replaced wholesale by `second`'s value.
    """
    headers = httpx.Headers((first or {}).get("headers"))
    other = httpx.Headers((second or {}).get("headers"))
    for key in other.keys():
        # Repeated values collapse into one comma-joined value.
        headers[key] = other[key]

    merged: dict[str, Any] = {**(first or {}), **(second or {}), "headers": headers}
    return merged  # type: ignore[return-value]
