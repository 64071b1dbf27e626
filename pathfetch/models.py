"""
Value types flowing through the request pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ApiResponse(Generic[T]):
    """
    A normalized response.

    `data` holds decoded JSON, plain text, or None for a 204 response.
    """

    headers: httpx.Headers
    url: str
    ok: bool
    status: int
    status_text: str
    data: T | None = None


@dataclass(frozen=True, slots=True)
class ErrorPayload(Generic[T]):
    """Status and data of an error response, narrowed to its documented shape."""

    status: int
    data: T


class ArrayPayload(list):  # type: ignore[type-arg]
    """
    An array-shaped request body carrying named parameters alongside the items.

    The items become the JSON body; `params` feed path placeholders and query
    parameters.

    Example:
        ```python
        payload = ArrayPayload(["a", "b"], params={"list_id": 7})
        await add_items(payload)  # POST /lists/7/items  body: ["a","b"]
        ```
    """

    def __init__(self, items: Iterable[Any] = (), *, params: Mapping[str, Any] | None = None):
        super().__init__(items)
        self.params: dict[str, Any] = dict(params or {})

    def copy(self) -> ArrayPayload:
        return ArrayPayload(self, params=self.params)

    def __repr__(self) -> str:
        return f"ArrayPayload({list.__repr__(self)}, params={self.params!r})"


class FormData:
    """
    Ordered multipart form container.

    Values may be strings, bytes, binary file objects, or httpx-style
    `(filename, content[, content_type])` tuples.
    """

    def __init__(self, fields: Iterable[tuple[str, Any]] = ()) -> None:
        self._fields: list[tuple[str, Any]] = list(fields)

    def append(self, name: str, value: Any) -> None:
        self._fields.append((name, value))

    def get_all(self, name: str) -> list[Any]:
        return [value for key, value in self._fields if key == name]

    def keys(self) -> list[str]:
        return [key for key, _ in self._fields]

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormData):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"FormData({self._fields!r})"
