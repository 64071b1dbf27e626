"""
Middleware chain primitives.

A request is modelled as a `(url, init)` pair so cross-cutting behavior can be
implemented as middleware wrapping the transport call.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, TypeAlias

from ..models import ApiResponse
from ..types import RequestInit

Fetch: TypeAlias = Callable[[str, RequestInit], Awaitable[ApiResponse[Any]]]


class Middleware(Protocol):
    async def __call__(self, url: str, init: RequestInit, next: Fetch) -> ApiResponse[Any]: ...


def compose(middlewares: Sequence[Middleware], terminal: Fetch) -> Fetch:
    """
    Wrap `terminal` in `middlewares`.

    The first middleware is the outermost: it runs first and its `next` invokes
    the second, and so on; the last middleware's `next` is `terminal`. With no
    middlewares, `terminal` is returned as is.
    """
    pipeline = terminal
    for middleware in reversed(middlewares):
        next_pipeline = pipeline

        async def _wrapped(
            url: str,
            init: RequestInit,
            *,
            _mw: Middleware = middleware,
            _n: Fetch = next_pipeline,
        ) -> ApiResponse[Any]:
            return await _mw(url, init, _n)

        pipeline = _wrapped
    return pipeline
