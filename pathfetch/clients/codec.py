"""
Payload encoding: path substitution, query string and request body.

`encode_payload` is pure with respect to the caller: it clones the payload and
only ever consumes keys from its private copy.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from ..models import ArrayPayload, FormData
from ..types import ContentType, Method

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"

_EMPTY_BODY = "{}"


@dataclass(frozen=True, slots=True)
class EncodedPayload:
    path: str
    query: str
    body: str | FormData | None


def encode_component(value: Any) -> str:
    return quote(stringify(value), safe=_URI_COMPONENT_SAFE)


def stringify(value: Any) -> str:
    """Render a value the way it should appear in a URL."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, (list, tuple)):
        # Arrays join their items with commas; null items render empty.
        return ",".join("" if item is None else stringify(item) for item in value)
    return str(value)


def clone_payload(payload: Any) -> dict[str, Any] | ArrayPayload:
    """
    Return a private, mutable copy of a payload.

    Array payloads stay arrays so named params attached to them survive.
    """
    if payload is None:
        return {}
    if isinstance(payload, ArrayPayload):
        return payload.copy()
    if isinstance(payload, Mapping):
        return dict(payload)
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes, bytearray)):
        return ArrayPayload(payload)
    raise TypeError(f"Payload must be a mapping or a sequence, not {type(payload).__name__}")


def _named(payload: dict[str, Any] | ArrayPayload) -> dict[str, Any]:
    return payload.params if isinstance(payload, ArrayPayload) else payload


def resolve_path(path: str, payload: dict[str, Any] | ArrayPayload) -> str:
    """
    Substitute `{name}` placeholders, consuming each key from `payload`.

    A name repeated in the template gets the same value everywhere.
    Placeholders without a value are left in place.
    """
    named = _named(payload)
    resolved = {
        key: encode_component(named.pop(key))
        for key in dict.fromkeys(_PLACEHOLDER.findall(path))
        if key in named
    }

    def _replace(match: re.Match[str]) -> str:
        return resolved.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(_replace, path)


def resolve_query(
    method: Method,
    payload: dict[str, Any] | ArrayPayload,
    query_params: Sequence[str],
) -> str:
    named = _named(payload)
    if method.sends_body:
        params = {key: named.pop(key, None) for key in query_params}
    elif isinstance(payload, ArrayPayload):
        params = {str(index): item for index, item in enumerate(payload)}
        params.update(named)
    else:
        params = dict(named)
    return query_string(params)


def query_string(params: Mapping[str, Any]) -> str:
    pairs: list[str] = []

    def _encode(key: str, value: Any) -> str:
        return f"{encode_component(key)}={encode_component(value)}"

    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend(_encode(key, item) for item in value if item is not None)
        else:
            pairs.append(_encode(key, value))

    if pairs:
        return "?" + "&".join(pairs)
    return ""


def resolve_body(
    method: Method,
    payload: dict[str, Any] | ArrayPayload,
    content_type: ContentType | None,
) -> str | FormData | None:
    if not method.sends_body:
        return None

    body: str | FormData
    if content_type is ContentType.MULTIPART:
        form = FormData()
        for key, value in _named(payload).items():
            if isinstance(value, list):
                for item in value:
                    form.append(key, item)
            else:
                form.append(key, value)
        body = form
    elif isinstance(payload, ArrayPayload):
        body = json.dumps(list(payload), separators=(",", ":"), default=str)
    else:
        body = json.dumps(payload, separators=(",", ":"), default=str)

    if method is Method.DELETE and body == _EMPTY_BODY:
        return None
    return body


def encode_payload(
    path: str,
    method: Method,
    content_type: ContentType | None,
    query_params: Sequence[str],
    payload: Any,
) -> EncodedPayload:
    """
    Split a payload into resolved path, query string and body.

    Keys consumed by the path are gone before the query is built, and keys
    consumed by the query are gone before the body is built. Under a
    body-sending method every leftover key lands in the body.
    """
    working = clone_payload(payload)
    resolved_path = resolve_path(path, working)
    query = resolve_query(method, working, query_params)
    body = resolve_body(method, working, content_type)
    return EncodedPayload(path=resolved_path, query=query, body=body)
