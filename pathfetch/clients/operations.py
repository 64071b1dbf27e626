"""
Typed operations: a bound path + method + content type callable.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..exceptions import ApiError, InvalidOperationError, OperationError
from ..models import ApiResponse, ErrorPayload
from ..types import ContentType, Method, RequestInit

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorKey = int | str
Runner = Callable[["OperationDescriptor", Any, "RequestInit | None"], Awaitable[ApiResponse[Any]]]


def _coerce_method(method: Method | str) -> Method:
    try:
        return Method(method.lower() if isinstance(method, str) else method)
    except ValueError as e:
        allowed = ", ".join(m.value for m in Method)
        raise InvalidOperationError(f"Unsupported method {method!r}; expected one of: {allowed}") from e


def _coerce_content_type(content_type: ContentType | str | None) -> ContentType | None:
    if content_type is None:
        return None
    try:
        return ContentType(content_type)
    except ValueError as e:
        allowed = ", ".join(c.value for c in ContentType)
        raise InvalidOperationError(
            f"Unsupported content type {content_type!r}; expected one of: {allowed}"
        ) from e


def query_param_names(query_params: Iterable[str] | Mapping[str, Any] | None) -> tuple[str, ...]:
    """Accept a list of names or a `{name: True}` mapping, keeping declaration order."""
    if query_params is None:
        return ()
    if isinstance(query_params, str):
        return (query_params,)
    return tuple(query_params.keys() if isinstance(query_params, Mapping) else query_params)


@dataclass(frozen=True, slots=True)
class OperationDescriptor:
    """
    A single endpoint: method, path template, body content type and the names
    that are always sent in the query string.

    `error_types` maps a status code (or `"default"`) to the documented shape of
    the error body, used by `OperationError.get_actual_type()`.
    """

    method: Method
    path: str
    content_type: ContentType | None = None
    query_params: tuple[str, ...] = ()
    error_types: Mapping[ErrorKey, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", _coerce_method(self.method))
        object.__setattr__(self, "content_type", _coerce_content_type(self.content_type))
        object.__setattr__(self, "query_params", query_param_names(self.query_params))
        object.__setattr__(self, "error_types", MappingProxyType(dict(self.error_types)))

    def __hash__(self) -> int:
        return hash((self.method, self.path, self.content_type, self.query_params))

    def narrow_error(self, status: int, data: Any) -> ErrorPayload[Any]:
        """
        Validate `data` against the documented shape for `status`.

        Falls back to the `"default"` entry, then to the raw data.
        """
        shape = self.error_types.get(status, self.error_types.get("default"))
        if shape is None:
            return ErrorPayload(status=status, data=data)
        try:
            narrowed = TypeAdapter(shape).validate_python(data)
        except ValidationError as e:
            logger.debug(
                f"Error body for {self.method.value.upper()} {self.path} ({status}) "
                f"does not match documented shape: {e.error_count()} error(s)"
            )
            return ErrorPayload(status=status, data=data)
        return ErrorPayload(status=status, data=narrowed)


class TypedFetch(Generic[T]):
    """
    Callable bound to one operation.

    Calling it encodes the payload, runs the middleware chain and transport and
    returns the normalized response. Error responses are raised as an
    `OperationError` tagged with this operation.

    Example:
        ```python
        get_item = fetcher.path("/items/{id}").method("get").create()
        try:
            response = await get_item({"id": 5})
        except OperationError as e:
            if not get_item.owns(e):
                raise
            print(e.get_actual_type())
        ```
    """

    def __init__(self, descriptor: OperationDescriptor, run: Runner) -> None:
        self._descriptor = descriptor
        self._run = run

    @property
    def descriptor(self) -> OperationDescriptor:
        return self._descriptor

    async def __call__(
        self,
        payload: Any = None,
        init: RequestInit | None = None,
    ) -> ApiResponse[T]:
        try:
            return await self._run(self._descriptor, payload, init)
        except ApiError as e:
            raise self.Error(e) from e

    def Error(self, error: ApiError) -> OperationError:  # noqa: N802
        """Tag a base `ApiError` as belonging to this operation."""
        return OperationError(error, operation=self._descriptor)

    def owns(self, error: BaseException) -> bool:
        """
        Whether `error` is an `OperationError` raised for this operation.

        Operations built separately from equal descriptors do not own each
        other's errors.
        """
        return isinstance(error, OperationError) and error.operation is self._descriptor

    def __repr__(self) -> str:
        d = self._descriptor
        return f"TypedFetch({d.method.value.upper()} {d.path!r})"
