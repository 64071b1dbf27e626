from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from pydantic import BaseModel

from pathfetch import (
    ApiResponse,
    ArrayPayload,
    Fetch,
    FetchConfig,
    Fetcher,
    HttpxTransport,
    InvalidOperationError,
    OperationError,
    RequestInit,
)


class NotFoundBody(BaseModel):
    message: str


def _mock_transport(handler: Any) -> HttpxTransport:
    return HttpxTransport(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_with_path_and_query_params() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": 5, "name": "widget"}, request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(base_url="https://api.example/v1", transport=transport)
    try:
        get_item = fetcher.path("/items/{id}").method("get").create()
        response = await get_item({"id": 5, "tags": ["a", "b"]})
    finally:
        await transport.aclose()

    assert response.ok is True
    assert response.status == 200
    assert response.data == {"id": 5, "name": "widget"}
    assert response.url == "https://api.example/v1/items/5?tags=a&tags=b"
    sent = requests[0]
    assert sent.method == "GET"
    assert sent.url.path == "/v1/items/5"
    assert sent.url.params.get_list("tags") == ["a", "b"]
    assert sent.headers["accept"] == "application/json"
    assert sent.content == b""


@pytest.mark.asyncio
async def test_post_json_body_and_allowlisted_query() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json={"id": 10}, request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(base_url="https://api.example", transport=transport)
    try:
        create_item = fetcher.path("/lists/{list_id}/items").method("post", "application/json").create(
            {"notify": True}
        )
        response = await create_item({"list_id": 3, "notify": False, "name": "widget"})
    finally:
        await transport.aclose()

    assert response.status == 201
    sent = requests[0]
    assert str(sent.url) == "https://api.example/lists/3/items?notify=false"
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == {"name": "widget"}


@pytest.mark.asyncio
async def test_array_body() -> None:
    bodies: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.content)
        return httpx.Response(200, json=[], request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(base_url="https://api.example", transport=transport)
    try:
        add_tags = fetcher.path("/items/{id}/tags").method("put").create()
        await add_tags(ArrayPayload(["x", "y"], params={"id": 1}))
    finally:
        await transport.aclose()

    assert bodies == [b'["x","y"]']


@pytest.mark.asyncio
async def test_delete_with_empty_payload_sends_no_body() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204, request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(base_url="https://api.example", transport=transport)
    try:
        delete_item = fetcher.path("/items/{id}").method("delete").create()
        response = await delete_item({"id": 7})
    finally:
        await transport.aclose()

    assert response.data is None
    assert requests[0].method == "DELETE"
    assert requests[0].content == b""
    assert "content-type" not in requests[0].headers


@pytest.mark.asyncio
async def test_multipart_upload_lets_transport_set_boundary() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="stored", request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(base_url="https://api.example", transport=transport)
    try:
        upload = fetcher.path("/pets/{id}/photo").method("post", "multipart/form-data").create()
        response = await upload({"id": 1, "title": "portrait", "file": ("pet.png", b"PNGDATA", "image/png")})
    finally:
        await transport.aclose()

    assert response.data == "stored"
    sent = requests[0]
    assert sent.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert b'name="title"' in sent.content
    assert b"portrait" in sent.content
    assert b'filename="pet.png"' in sent.content
    assert b"PNGDATA" in sent.content


@pytest.mark.asyncio
async def test_error_response_raises_operation_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "no such item"}, request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(base_url="https://api.example", transport=transport)
    try:
        get_item = fetcher.path("/items/{id}").method("get").create(errors={404: NotFoundBody})
        other = fetcher.path("/items").method("get").create()
        with pytest.raises(OperationError) as exc_info:
            await get_item({"id": 99})
    finally:
        await transport.aclose()

    error = exc_info.value
    assert error.status == 404
    assert get_item.owns(error)
    assert not other.owns(error)
    actual = error.get_actual_type()
    assert actual.status == 404
    assert actual.data == NotFoundBody(message="no such item")


@pytest.mark.asyncio
async def test_default_init_and_per_call_init_are_merged() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={}, request=request)

    transport = _mock_transport(handler)
    fetcher = Fetcher(
        base_url="https://api.example",
        init={"headers": {"X-Client": "pathfetch", "X-Env": "dev"}},
        transport=transport,
    )
    try:
        ping = fetcher.path("/ping").method("get").create()
        await ping(None, {"headers": {"X-Env": "prod", "Accept": "text/plain"}})
    finally:
        await transport.aclose()

    headers = requests[0].headers
    assert headers["x-client"] == "pathfetch"
    assert headers["x-env"] == "prod"
    assert headers["accept"] == "text/plain"


@pytest.mark.asyncio
async def test_middlewares_registered_later_apply_to_existing_operations() -> None:
    calls: list[str] = []

    async def transport(url: str, init: RequestInit) -> httpx.Response:
        calls.append("transport")
        return httpx.Response(200, json={}, request=httpx.Request(init["method"], url))

    def recorder(name: str) -> Any:
        async def _mw(url: str, init: RequestInit, next: Fetch) -> ApiResponse[Any]:
            calls.append(name)
            return await next(url, init)

        return _mw

    fetcher = Fetcher(transport=transport, use=[recorder("log")])
    ping = fetcher.path("https://api.example/ping").method("get").create()
    fetcher.use(recorder("auth"))

    await ping()
    assert calls == ["log", "auth", "transport"]


@pytest.mark.asyncio
async def test_configure_replaces_everything() -> None:
    urls: list[str] = []

    async def transport(url: str, init: RequestInit) -> httpx.Response:
        urls.append(url)
        return httpx.Response(200, json={}, request=httpx.Request(init["method"], url))

    async def blocked(url: str, init: RequestInit, next: Fetch) -> ApiResponse[Any]:
        raise AssertionError("replaced middleware must not run")

    fetcher = Fetcher(base_url="https://old.example", init={"timeout": 1.0}, use=[blocked], transport=transport)
    fetcher.configure(base_url="https://new.example")

    assert fetcher.config == FetchConfig(base_url="https://new.example")
    assert fetcher.middlewares == ()

    await fetcher.path("/ping").method("get").create()()
    assert urls == ["https://new.example/ping"]

    fetcher.configure(FetchConfig(base_url="https://cfg.example", use=(blocked,)))
    assert fetcher.middlewares == (blocked,)
    with pytest.raises(ValueError):
        fetcher.configure(FetchConfig(), base_url="x")


def test_create_rejects_unknown_method() -> None:
    fetcher = Fetcher()
    with pytest.raises(InvalidOperationError):
        fetcher.path("/x").method("fetch").create()


@pytest.mark.asyncio
async def test_default_transport_is_httpx(respx_mock: Any) -> None:
    route = respx_mock.get(host="api.example", path="/items/5").mock(
        return_value=httpx.Response(200, json={"id": 5})
    )

    async with Fetcher.for_paths(base_url="https://api.example") as fetcher:
        get_item = fetcher.path("/items/{id}").method("get").create()
        response = await get_item({"id": 5, "tags": ["a", "b"]})

    assert response.data == {"id": 5}
    assert route.called
    assert route.calls.last.request.url.params.get_list("tags") == ["a", "b"]


@pytest.mark.asyncio
async def test_operations_created_twice_for_same_endpoint_keep_their_own_errors() -> None:
    async def transport(url: str, init: RequestInit) -> httpx.Response:
        return httpx.Response(404, json={}, request=httpx.Request(init["method"], url))

    fetcher = Fetcher(base_url="https://api.example", transport=transport)
    first = fetcher.path("/items/{id}").method("get").create()
    second = fetcher.path("/items/{id}").method("get").create()

    with pytest.raises(OperationError) as exc_info:
        await first({"id": 1})

    assert first.owns(exc_info.value)
    assert not second.owns(exc_info.value)
