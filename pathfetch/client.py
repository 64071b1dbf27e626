"""
Main pathfetch client.

`Fetcher` holds the per-client configuration (base URL, default request init,
middlewares) and hands out typed operations via a fluent path/method selector.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .clients.dispatch import Request, fetch_url
from .clients.headers import merge_request_init
from .clients.operations import OperationDescriptor, TypedFetch, query_param_names
from .clients.pipeline import Middleware, compose
from .clients.response import RawFetch, fetch_json
from .clients.transport import HttpxTransport
from .models import ApiResponse
from .types import ContentType, Method, RequestInit


@dataclass(frozen=True, slots=True)
class FetchConfig:
    """Configuration swapped in as a whole by `Fetcher.configure()`."""

    base_url: str = ""
    init: RequestInit = field(default_factory=lambda: RequestInit())
    use: tuple[Middleware, ...] = ()


class Fetcher:
    """
    Client builder.

    Example:
        ```python
        from pathfetch import Fetcher
        from pathfetch.middleware import bearer_auth

        fetcher = Fetcher(base_url="https://petstore.example/api")
        fetcher.use(bearer_auth("secret"))

        find_pets = fetcher.path("/pets").method("get").create()
        add_pet = fetcher.path("/pets").method("post", "application/json").create()

        async with fetcher:
            pets = await find_pets({"tags": ["dog", "cat"], "limit": 10})
            created = await add_pet({"name": "Rex"})
        ```

    Operations read the configuration when called, so `configure()` and `use()`
    affect operations created before them. Mutating configuration while
    requests are in flight is not supported.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        init: RequestInit | None = None,
        use: Iterable[Middleware] | None = None,
        transport: RawFetch | None = None,
    ) -> None:
        self._base_url = ""
        self._init: RequestInit = {}
        self._middlewares: list[Middleware] = []
        self._owned_transport: HttpxTransport | None = None
        self._transport = transport
        self.configure(base_url=base_url, init=init, use=use)

    @classmethod
    def for_paths(cls, **kwargs: Any) -> Fetcher:
        """Create a fetcher; mirrors the `Fetcher.for<Paths>()` entry point of generated clients."""
        return cls(**kwargs)

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def config(self) -> FetchConfig:
        return FetchConfig(base_url=self._base_url, init=self._init, use=tuple(self._middlewares))

    def configure(
        self,
        config: FetchConfig | None = None,
        *,
        base_url: str | None = None,
        init: RequestInit | None = None,
        use: Iterable[Middleware] | None = None,
    ) -> None:
        """
        Replace base URL, default init and the whole middleware list.

        Values not given are reset to their defaults.
        """
        if config is not None:
            if base_url is not None or init is not None or use is not None:
                raise ValueError("Pass either a FetchConfig or keyword options, not both")
            base_url, init, use = config.base_url, config.init, config.use
        self._base_url = base_url or ""
        self._init = dict(init or {})  # type: ignore[assignment]
        self._middlewares[:] = list(use or [])

    def use(self, middleware: Middleware) -> None:
        """Append a middleware; it runs after all middlewares registered before it."""
        self._middlewares.append(middleware)

    @property
    def middlewares(self) -> Sequence[Middleware]:
        return tuple(self._middlewares)

    # =========================================================================
    # Operations
    # =========================================================================

    def path(self, path: str) -> PathSelector:
        return PathSelector(self, path)

    def operation(self, descriptor: OperationDescriptor) -> TypedFetch[Any]:
        """Bind a descriptor produced elsewhere (for example by code generation)."""
        return TypedFetch(descriptor, self._run)

    async def _run(
        self,
        descriptor: OperationDescriptor,
        payload: Any,
        init: RequestInit | None,
    ) -> ApiResponse[Any]:
        request = Request(
            base_url=self._base_url,
            path=descriptor.path,
            method=descriptor.method,
            query_params=descriptor.query_params,
            payload=payload,
            init=merge_request_init(self._init, init),
            content_type=descriptor.content_type,
            fetch=compose(list(self._middlewares), self._terminal),
        )
        return await fetch_url(request)

    async def _terminal(self, url: str, init: RequestInit) -> ApiResponse[Any]:
        return await fetch_json(self._get_transport(), url, init)

    def _get_transport(self) -> RawFetch:
        if self._transport is not None:
            return self._transport
        if self._owned_transport is None:
            self._owned_transport = HttpxTransport()
        return self._owned_transport

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def __aenter__(self) -> Fetcher:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the default transport if this fetcher created one."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()
            self._owned_transport = None


class PathSelector:
    def __init__(self, fetcher: Fetcher, path: str) -> None:
        self._fetcher = fetcher
        self._path = path

    def method(
        self,
        method: Method | str,
        content_type: ContentType | str | None = None,
    ) -> OperationBuilder:
        return OperationBuilder(self._fetcher, self._path, method, content_type)


class OperationBuilder:
    def __init__(
        self,
        fetcher: Fetcher,
        path: str,
        method: Method | str,
        content_type: ContentType | str | None,
    ) -> None:
        self._fetcher = fetcher
        self._path = path
        self._method = method
        self._content_type = content_type

    def create(
        self,
        query_params: Iterable[str] | Mapping[str, Any] | None = None,
        *,
        errors: Mapping[int | str, Any] | None = None,
    ) -> TypedFetch[Any]:
        """
        Build the operation.

        Args:
            query_params: Names always sent in the query string, even for
                body-sending methods. A list of names or a `{name: True}` mapping.
            errors: Documented error body shapes keyed by status code or
                `"default"`, used to narrow `OperationError.get_actual_type()`.
        """
        descriptor = OperationDescriptor(
            method=self._method,  # type: ignore[arg-type]
            path=self._path,
            content_type=self._content_type,  # type: ignore[arg-type]
            query_params=query_param_names(query_params),
            error_types=errors or {},
        )
        return self._fetcher.operation(descriptor)
