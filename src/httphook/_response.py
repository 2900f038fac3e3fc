"""Response model — what a handler hands back to the dispatcher.

A handler returns either a ``Response`` (terminal) or the ``PassThrough``
sentinel (keep scanning, possibly down to the real network). The body of
a ``Response`` is a tagged union with one case per representation:

| Body case | Rendered as                       |
|-----------|-----------------------------------|
| Empty     | no bytes                          |
| Text      | UTF-8 encoded string              |
| Bytes     | the bytes as-is                   |
| Stream    | each chunk, in order, as produced |
"""

from __future__ import annotations

import json as _json
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

# ═══════════════════════════════════════════════════════════════════════════════
# Body variants
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Empty:
    """No body."""


@dataclass(frozen=True, slots=True)
class Text:
    """String body, sent as UTF-8."""

    value: str


@dataclass(frozen=True, slots=True)
class Bytes:
    """Binary body, sent unchanged."""

    value: bytes


@dataclass(frozen=True, slots=True)
class Stream:
    """Lazily produced body, relayed chunk by chunk.

    The chunk source may be an async iterable or a plain iterable of bytes.
    It is consumed once.
    """

    chunks: AsyncIterable[bytes] | Iterable[bytes]


type Body = Empty | Text | Bytes | Stream


# ═══════════════════════════════════════════════════════════════════════════════
# Response / PassThrough
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Response:
    """A terminal synthetic response."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Body = field(default_factory=Empty)
    reason_phrase: str | None = None

    @property
    def reason(self) -> str:
        """The explicit reason phrase, else the standard one for the status."""
        if self.reason_phrase is not None:
            return self.reason_phrase
        return default_reason_phrase(self.status_code)


@dataclass(frozen=True, slots=True)
class PassThrough:
    """Sentinel: ignore this rule's answer and keep scanning.

    Carries no status, headers, or body.
    """


PASS_THROUGH = PassThrough()

type HandlerResult = Response | PassThrough


def default_reason_phrase(status_code: int) -> str:
    """Standard reason phrase for a status code, or "Unknown"."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


async def render_body(body: Body) -> AsyncIterator[bytes]:
    """Render a body to byte chunks.

    Total over the Body union: every case has exactly one rendering.
    Empty chunks from a stream are dropped.
    """
    match body:
        case Empty():
            return
        case Text(value=text):
            if text:
                yield text.encode("utf-8")
        case Bytes(value=data):
            if data:
                yield bytes(data)
        case Stream(chunks=chunks):
            if isinstance(chunks, AsyncIterable):
                async for chunk in chunks:
                    if chunk:
                        yield bytes(chunk)
            else:
                for chunk in chunks:
                    if chunk:
                        yield bytes(chunk)


def _as_body(body: str | bytes | bytearray | Body | None) -> Body:
    match body:
        case None:
            return Empty()
        case str():
            return Text(body) if body else Empty()
        case bytes() | bytearray():
            return Bytes(bytes(body))
        case Empty() | Text() | Bytes() | Stream():
            return body
    msg = f"unsupported body type: {type(body).__name__}"
    raise TypeError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Builders
# ═══════════════════════════════════════════════════════════════════════════════


def pass_through() -> PassThrough:
    """Defer to the next matching rule, or the real network."""
    return PASS_THROUGH


def ok(
    body: str | bytes | bytearray | Body | None = "",
    *,
    headers: dict[str, str] | None = None,
) -> Response:
    """200 OK with a text, binary, or prebuilt body."""
    return Response(status_code=200, headers=dict(headers or {}), body=_as_body(body))


def json(
    data: Any,
    *,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> Response:
    """JSON-encoded body.

    Sets ``content-type: application/json; charset=utf-8``; caller headers
    are merged on top and win on conflict.
    """
    merged = {"content-type": JSON_CONTENT_TYPE, **(headers or {})}
    return Response(
        status_code=status_code,
        headers=merged,
        body=Text(_json.dumps(data, separators=(",", ":"), ensure_ascii=False)),
    )


def binary(
    data: bytes | bytearray,
    *,
    content_type: str = "application/octet-stream",
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> Response:
    """Binary body with an explicit content type."""
    merged = {"content-type": content_type, **(headers or {})}
    return Response(status_code=status_code, headers=merged, body=Bytes(bytes(data)))


def stream(
    chunks: AsyncIterable[bytes] | Iterable[bytes],
    *,
    content_type: str = "text/plain",
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> Response:
    """Streamed body, relayed chunk by chunk."""
    merged = {"content-type": content_type, **(headers or {})}
    return Response(status_code=status_code, headers=merged, body=Stream(chunks))


def _error(status: HTTPStatus, body: str | None) -> Response:
    return Response(
        status_code=status.value,
        body=_as_body(status.phrase if body is None else body),
        reason_phrase=status.phrase,
    )


def bad_request(body: str | None = None) -> Response:
    """400 Bad Request."""
    return _error(HTTPStatus.BAD_REQUEST, body)


def unauthorized(body: str | None = None) -> Response:
    """401 Unauthorized."""
    return _error(HTTPStatus.UNAUTHORIZED, body)


def forbidden(body: str | None = None) -> Response:
    """403 Forbidden."""
    return _error(HTTPStatus.FORBIDDEN, body)


def not_found(body: str | None = None) -> Response:
    """404 Not Found."""
    return _error(HTTPStatus.NOT_FOUND, body)


def internal_server_error(body: str | None = None) -> Response:
    """500 Internal Server Error."""
    return _error(HTTPStatus.INTERNAL_SERVER_ERROR, body)
