"""
pathfetch: typed HTTP operations over a composable middleware pipeline.

Example:
    ```python
    from pathfetch import Fetcher

    fetcher = Fetcher(base_url="https://api.example.com")
    get_item = fetcher.path("/items/{id}").method("get").create()
    response = await get_item({"id": 5, "tags": ["a", "b"]})
    # GET https://api.example.com/items/5?tags=a&tags=b
    ```
"""

from __future__ import annotations

from .client import FetchConfig, Fetcher, OperationBuilder, PathSelector
from .clients.operations import OperationDescriptor, TypedFetch
from .clients.pipeline import Fetch, Middleware
from .clients.transport import HttpxTransport
from .exceptions import (
    ApiError,
    InvalidOperationError,
    MethodNotAllowedError,
    OperationError,
    PathfetchError,
    ResponseDecodeError,
)
from .models import ApiResponse, ArrayPayload, ErrorPayload, FormData
from .types import ContentType, Method, RequestInit

__version__ = "0.1.0"

__all__ = [
    # Client
    "Fetcher",
    "FetchConfig",
    "PathSelector",
    "OperationBuilder",
    "OperationDescriptor",
    "TypedFetch",
    "HttpxTransport",
    # Pipeline
    "Fetch",
    "Middleware",
    # Models
    "ApiResponse",
    "ArrayPayload",
    "ErrorPayload",
    "FormData",
    "RequestInit",
    "Method",
    "ContentType",
    # Exceptions
    "PathfetchError",
    "ApiError",
    "OperationError",
    "InvalidOperationError",
    "ResponseDecodeError",
    "MethodNotAllowedError",
]
