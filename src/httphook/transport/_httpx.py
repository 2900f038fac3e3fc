"""httpx collaborator — request snapshotting and response synthesis.

Only async transports are covered: dispatch awaits handlers, so the hook
sits where httpx already awaits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from httphook._errors import HookError, UnknownMethodError
from httphook._method import HttpMethod
from httphook._request import URL, HookRequest
from httphook._response import render_body

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from httphook._hook import HttpHook
    from httphook._response import Response

logger = logging.getLogger(__name__)

# Request extension naming the hook that already scanned the request.
DISPATCHED_EXTENSION = "httphook.dispatched"

type _SendFn = Callable[[httpx.AsyncHTTPTransport, httpx.Request], Awaitable[httpx.Response]]


def to_hook_request(request: httpx.Request) -> HookRequest | None:
    """Snapshot an httpx request.

    Returns None for methods outside HttpMethod; no rule can name them,
    so such requests always go to the network.
    """
    try:
        method = HttpMethod.from_string(request.method)
    except UnknownMethodError:
        logger.debug("method %s cannot be intercepted", request.method)
        return None
    headers = {
        name: ", ".join(request.headers.get_list(name)) for name in request.headers.keys()
    }
    return HookRequest(url=URL.parse(str(request.url)), method=method, headers=headers)


class _BodyStream(httpx.AsyncByteStream):
    def __init__(self, chunks: AsyncIterator[bytes]) -> None:
        self._chunks = chunks

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._chunks:
            yield chunk

    async def aclose(self) -> None:
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is not None:
            await aclose()


def to_httpx_response(response: Response, request: httpx.Request) -> httpx.Response:
    """Build the client-visible response for a terminal hook Response."""
    return httpx.Response(
        status_code=response.status_code,
        headers=list(response.headers.items()),
        stream=_BodyStream(render_body(response.body)),
        request=request,
        extensions={"reason_phrase": response.reason.encode("ascii", "replace")},
    )


async def _intercept(
    hook: HttpHook, request: httpx.Request
) -> httpx.Response | None:
    if request.extensions.get(DISPATCHED_EXTENSION) is hook:
        return None
    hook_request = to_hook_request(request)
    if hook_request is None:
        return None
    response = await hook.dispatch(hook_request)
    if response is None:
        return None
    return to_httpx_response(response, request)


# ═══════════════════════════════════════════════════════════════════════════════
# Transport wrapper
# ═══════════════════════════════════════════════════════════════════════════════


class HookTransport(httpx.AsyncBaseTransport):
    """Async transport that asks the hook first, then the wrapped transport.

    Use it explicitly when patching is unwanted::

        client = httpx.AsyncClient(transport=HookTransport(hook))
    """

    def __init__(
        self,
        hook: HttpHook,
        wrapped: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._hook = hook
        self._wrapped = wrapped if wrapped is not None else httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        response = await _intercept(self._hook, request)
        if response is not None:
            return response
        # the wrapped transport may be patched by an interceptor for the same hook
        request.extensions[DISPATCHED_EXTENSION] = self._hook
        try:
            return await self._wrapped.handle_async_request(request)
        finally:
            request.extensions.pop(DISPATCHED_EXTENSION, None)

    async def aclose(self) -> None:
        await self._wrapped.aclose()


# ═══════════════════════════════════════════════════════════════════════════════
# Global interceptor
# ═══════════════════════════════════════════════════════════════════════════════


class HttpxInterceptor:
    """Collaborator that patches ``httpx.AsyncHTTPTransport``.

    While installed, every request sent through the default async
    transport is offered to the hook first; unanswered requests continue
    to the original implementation unmodified.

    Raises:
        HookError: On install while another hook holds the patch.
    """

    _active: HttpxInterceptor | None = None

    def __init__(self) -> None:
        self._original: _SendFn | None = None

    @property
    def installed(self) -> bool:
        return self._original is not None

    def install(self, hook: HttpHook, /) -> None:
        if HttpxInterceptor._active is not None:
            msg = "an httpx interceptor is already installed"
            raise HookError(msg)

        original: _SendFn = httpx.AsyncHTTPTransport.handle_async_request

        async def handle_async_request(
            transport: httpx.AsyncHTTPTransport, request: httpx.Request
        ) -> httpx.Response:
            response = await _intercept(hook, request)
            if response is not None:
                return response
            return await original(transport, request)

        httpx.AsyncHTTPTransport.handle_async_request = handle_async_request  # type: ignore[method-assign]
        self._original = original
        HttpxInterceptor._active = self
        logger.debug("patched httpx.AsyncHTTPTransport")

    def uninstall(self) -> None:
        if self._original is None:
            return
        httpx.AsyncHTTPTransport.handle_async_request = self._original  # type: ignore[method-assign]
        self._original = None
        HttpxInterceptor._active = None
        logger.debug("restored httpx.AsyncHTTPTransport")
