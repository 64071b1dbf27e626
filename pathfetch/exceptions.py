"""
Exceptions raised by pathfetch.

Transport failures (for example `httpx.TransportError`) are never wrapped and
reach the caller as raised by the transport.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from .clients.operations import OperationDescriptor
    from .models import ErrorPayload


class PathfetchError(Exception):
    """Base class for all errors raised by this package."""


class InvalidOperationError(PathfetchError, ValueError):
    """An operation descriptor names an unsupported method or content type."""


class ResponseDecodeError(PathfetchError):
    """A response declared as JSON could not be decoded."""

    def __init__(self, message: str, *, status: int, text: str) -> None:
        super().__init__(message)
        self.status = status
        self.text = text


class MethodNotAllowedError(PathfetchError):
    """A request was refused by `block_methods` before it was sent."""

    def __init__(self, message: str, *, method: str, url: str) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class ApiError(PathfetchError):
    """
    A response was received but its status is outside 200-299.

    Carries the same fields as `ApiResponse` minus `ok`.
    """

    def __init__(
        self,
        *,
        headers: httpx.Headers,
        url: str,
        status: int,
        status_text: str,
        data: Any = None,
    ) -> None:
        super().__init__(f"{status} {status_text}".strip() + (f" ({url})" if url else ""))
        self.headers = headers
        self.url = url
        self.status = status
        self.status_text = status_text
        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, url={self.url!r})"


class OperationError(ApiError):
    """
    An `ApiError` tagged with the operation that produced it.

    `operation` is the discriminant; `get_actual_type()` narrows `data` using the
    operation's documented error shapes.
    """

    def __init__(self, error: ApiError, *, operation: OperationDescriptor) -> None:
        super().__init__(
            headers=error.headers,
            url=error.url,
            status=error.status,
            status_text=error.status_text,
            data=error.data,
        )
        self.operation = operation

    def get_actual_type(self) -> ErrorPayload:
        return self.operation.narrow_error(self.status, self.data)

    def __repr__(self) -> str:
        op = self.operation
        return (
            f"OperationError(operation={op.method.value.upper()} {op.path!r}, "
            f"status={self.status!r}, url={self.url!r})"
        )
