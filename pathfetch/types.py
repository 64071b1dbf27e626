"""
Core type definitions shared across the request pipeline.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict

import httpx

HeadersInit = httpx.Headers | dict[str, str] | list[tuple[str, str]]


class Method(str, Enum):
    """HTTP methods an operation can be bound to."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"

    @property
    def sends_body(self) -> bool:
        return self in BODY_METHODS


BODY_METHODS = frozenset({Method.POST, Method.PUT, Method.PATCH, Method.DELETE})


class ContentType(str, Enum):
    """Supported request body encodings."""

    JSON = "application/json"
    MULTIPART = "multipart/form-data"
    FORM_URLENCODED = "application/x-www-form-urlencoded"


class RequestInit(TypedDict, total=False):
    """
    Per-request options handed to middlewares and the transport.

    `context` is never sent on the wire; middlewares use it to pass values
    to each other.
    """

    method: str
    headers: HeadersInit
    body: Any
    timeout: float | None
    follow_redirects: bool
    extensions: dict[str, Any]
    context: dict[str, Any]


DEFAULT_ACCEPT = ContentType.JSON.value
NO_CONTENT = 204
