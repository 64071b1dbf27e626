"""
Request construction and dispatch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models import ApiResponse
from ..types import ContentType, Method, RequestInit
from .codec import encode_payload
from .headers import compose_headers
from .pipeline import Fetch

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Request:
    base_url: str
    path: str
    method: Method
    fetch: Fetch
    query_params: Sequence[str] = ()
    payload: Any = None
    init: RequestInit = field(default_factory=lambda: RequestInit())
    content_type: ContentType | None = None


def get_fetch_params(request: Request) -> tuple[str, RequestInit]:
    """Build the final URL and init for a request. The request payload is not modified."""
    encoded = encode_payload(
        request.path,
        request.method,
        request.content_type,
        request.query_params,
        request.payload,
    )
    headers = compose_headers(encoded.body, request.init.get("headers"), request.content_type)
    url = request.base_url + encoded.path + encoded.query

    init: RequestInit = {
        **request.init,
        "method": request.method.value.upper(),
        "headers": headers,
        "body": encoded.body,
    }
    return url, init


async def fetch_url(request: Request) -> ApiResponse[Any]:
    url, init = get_fetch_params(request)
    logger.debug(f"Request: {init['method']} {url}")
    return await request.fetch(url, init)
