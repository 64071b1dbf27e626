"""
Response normalization.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

import httpx

from ..exceptions import ApiError, ResponseDecodeError
from ..models import ApiResponse
from ..types import NO_CONTENT, RequestInit

logger = logging.getLogger(__name__)

RawFetch: TypeAlias = Callable[[str, RequestInit], Awaitable[httpx.Response]]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_json(text: str | bytes) -> Any:
    """Strict JSON parsing: `NaN`, `Infinity` and `-Infinity` are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


async def read_response_data(response: httpx.Response) -> Any:
    """
    Decode a response body.

    204 yields None without reading. A JSON content type is decoded strictly;
    anything else is read as text and parsed as JSON when it happens to be JSON.
    """
    if response.status_code == NO_CONTENT:
        return None

    await response.aread()
    content_type = response.headers.get("content-type")
    if content_type and "application/json" in content_type:
        try:
            return parse_json(response.content)
        except ValueError as e:
            raise ResponseDecodeError(
                f"Response declared {content_type!r} but body is not valid JSON",
                status=response.status_code,
                text=response.text,
            ) from e

    text = response.text
    try:
        return parse_json(text)
    except ValueError:
        return text


def _url_of(response: httpx.Response) -> str:
    try:
        return str(response.url)
    except RuntimeError:
        # Responses built by hand have no request attached.
        return ""


async def fetch_json(transport: RawFetch, url: str, init: RequestInit) -> ApiResponse[Any]:
    """Call the raw transport and normalize its response, raising on non-2xx."""
    response = await transport(url, init)
    data = await read_response_data(response)

    result: ApiResponse[Any] = ApiResponse(
        headers=response.headers,
        url=_url_of(response),
        ok=200 <= response.status_code <= 299,
        status=response.status_code,
        status_text=response.reason_phrase,
        data=data,
    )

    if result.ok:
        return result

    logger.debug(f"Error response: {result.status} {result.status_text} for {result.url or url}")
    raise ApiError(
        headers=result.headers,
        url=result.url,
        status=result.status,
        status_text=result.status_text,
        data=result.data,
    )
