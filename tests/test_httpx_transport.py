"""Tests for the httpx collaborator: HookTransport and HttpxInterceptor."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import httpx
import pytest

from httphook import (
    HookError,
    HookRequest,
    HttpHook,
    MatchOutcome,
    Response,
    json,
    ok,
    pass_through,
    stream,
)
from httphook.testing import RecordingHandler, respond_with
from httphook.transport import HookTransport, HttpxInterceptor, to_hook_request
from httphook.transport._httpx import DISPATCHED_EXTENSION


def network(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=f"network {request.method} {request.url.path}")


def boom(_request: HookRequest, _match: MatchOutcome) -> Response:
    msg = "handler failed"
    raise RuntimeError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Request snapshot
# ═══════════════════════════════════════════════════════════════════════════════


class TestToHookRequest:
    def test_snapshot(self) -> None:
        request = httpx.Request(
            "post",
            "https://api.example.com:8443/users?page=2",
            headers=[("X-A", "1"), ("x-a", "2"), ("Accept", "text/plain")],
        )
        snapshot = to_hook_request(request)
        assert snapshot is not None
        assert snapshot.method == "POST"
        assert snapshot.url.host == "api.example.com"
        assert snapshot.url.port == 8443
        assert snapshot.path == "/users"
        assert snapshot.query_param("page") == "2"
        assert snapshot.header("x-a") == "1, 2"
        assert snapshot.header("ACCEPT") == "text/plain"

    def test_unknown_method(self) -> None:
        assert to_hook_request(httpx.Request("BREW", "http://x/a")) is None


# ═══════════════════════════════════════════════════════════════════════════════
# HookTransport
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def client(hook: HttpHook) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=HookTransport(hook, httpx.MockTransport(network)))


class TestHookTransport:
    @pytest.mark.asyncio
    async def test_rule_answers(self, hook: HttpHook, client: httpx.AsyncClient) -> None:
        hook.register("http://x/a", "GET", respond_with(json({"id": 1}, headers={"x-k": "v"})))
        async with client:
            response = await client.get("http://x/a")
        assert response.status_code == 200
        assert response.reason_phrase == "OK"
        assert response.headers["x-k"] == "v"
        assert response.headers["content-type"] == "application/json; charset=utf-8"
        assert response.json() == {"id": 1}

    @pytest.mark.asyncio
    async def test_custom_reason_phrase(self, hook: HttpHook, client: httpx.AsyncClient) -> None:
        hook.register_regex(
            None,
            "^/teapot$",
            "GET",
            respond_with(Response(status_code=418, reason_phrase="Short And Stout")),
        )
        async with client:
            response = await client.get("http://x/teapot")
        assert response.status_code == 418
        assert response.reason_phrase == "Short And Stout"
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_no_match_goes_to_network(
        self, hook: HttpHook, client: httpx.AsyncClient
    ) -> None:
        hook.register("http://x/a", "GET", respond_with(ok("hooked")))
        async with client:
            response = await client.post("http://x/a")
        assert response.text == "network POST /a"

    @pytest.mark.asyncio
    async def test_pass_through_goes_to_network(
        self, hook: HttpHook, client: httpx.AsyncClient
    ) -> None:
        handler = RecordingHandler(pass_through())
        hook.register_template(None, "/a", "GET", handler)
        async with client:
            response = await client.get("http://x/a")
        assert handler.call_count == 1
        assert response.text == "network GET /a"

    @pytest.mark.asyncio
    async def test_streamed_body(self, hook: HttpHook, client: httpx.AsyncClient) -> None:
        async def chunks() -> AsyncIterator[bytes]:
            yield b"one,"
            yield b""
            yield b"two"

        hook.register("http://x/s", "GET", lambda _req, _m: stream(chunks()))
        async with client:
            async with client.stream("GET", "http://x/s") as response:
                received = [chunk async for chunk in response.aiter_raw()]
        assert b"".join(received) == b"one,two"
        assert b"" not in received

    @pytest.mark.asyncio
    async def test_handler_fault_propagates(
        self, hook: HttpHook, client: httpx.AsyncClient
    ) -> None:
        hook.register("http://x/a", "GET", boom)
        async with client:
            with pytest.raises(RuntimeError, match="handler failed"):
                await client.get("http://x/a")

    @pytest.mark.asyncio
    async def test_stopped_hook_never_intercepts(self) -> None:
        hook = HttpHook()
        hook.register("http://x/a", "GET", respond_with(ok("hooked")))
        transport = HookTransport(hook, httpx.MockTransport(network))
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.get("http://x/a")
        assert response.text == "network GET /a"


# ═══════════════════════════════════════════════════════════════════════════════
# HttpxInterceptor
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fake_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace the real async transport with an in-memory one."""

    async def handle_async_request(
        _transport: httpx.AsyncHTTPTransport, request: httpx.Request
    ) -> httpx.Response:
        return network(request)

    monkeypatch.setattr(httpx.AsyncHTTPTransport, "handle_async_request", handle_async_request)


@pytest.fixture
def intercepted(fake_network: None) -> Iterator[HttpHook]:
    hook = HttpHook(HttpxInterceptor())
    hook.start()
    yield hook
    hook.teardown()


class TestHttpxInterceptor:
    @pytest.mark.asyncio
    async def test_intercepts_default_client(self, intercepted: HttpHook) -> None:
        intercepted.register_template(
            "api.example.com",
            "/user/:id",
            "GET",
            lambda _req, m: json({"id": m.param("id")}),
        )
        async with httpx.AsyncClient() as client:
            hooked = await client.get("https://api.example.com/user/42")
            other_host = await client.get("https://other.example.com/user/42")
        assert hooked.json() == {"id": "42"}
        assert other_host.text == "network GET /user/42"

    @pytest.mark.asyncio
    async def test_unknown_method_goes_to_network(self, intercepted: HttpHook) -> None:
        intercepted.register_regex(None, ".*", "GET", respond_with(ok("hooked")))
        async with httpx.AsyncClient() as client:
            response = await client.request("BREW", "http://x/pot")
        assert response.text == "network BREW /pot"

    @pytest.mark.asyncio
    async def test_handler_fault_propagates(self, intercepted: HttpHook) -> None:
        intercepted.register("http://x/a", "GET", boom)
        async with httpx.AsyncClient() as client:
            with pytest.raises(RuntimeError, match="handler failed"):
                await client.get("http://x/a")

    @pytest.mark.asyncio
    async def test_teardown_restores_transport(self, fake_network: None) -> None:
        patched = httpx.AsyncHTTPTransport.handle_async_request
        interceptor = HttpxInterceptor()
        hook = HttpHook(interceptor)
        hook.start()
        assert interceptor.installed
        assert httpx.AsyncHTTPTransport.handle_async_request is not patched
        hook.teardown()
        assert not interceptor.installed
        assert httpx.AsyncHTTPTransport.handle_async_request is patched

    def test_second_install_rejected(self, intercepted: HttpHook) -> None:
        other = HttpHook(HttpxInterceptor())
        with pytest.raises(HookError, match="already installed"):
            other.start()
        assert not other.is_active

    def test_reinstall_after_teardown(self, fake_network: None) -> None:
        interceptor = HttpxInterceptor()
        hook = HttpHook(interceptor)
        hook.start()
        hook.teardown()
        hook.start()
        assert interceptor.installed
        hook.teardown()

    @pytest.mark.asyncio
    async def test_hook_transport_over_patched_transport_scans_once(
        self, intercepted: HttpHook
    ) -> None:
        handler = RecordingHandler(pass_through())
        intercepted.register("http://x/a", "GET", handler)
        async with httpx.AsyncClient(transport=HookTransport(intercepted)) as client:
            response = await client.get("http://x/a")
        assert handler.call_count == 1
        assert response.text == "network GET /a"

    @pytest.mark.asyncio
    async def test_resent_request_is_scanned_again(self, intercepted: HttpHook) -> None:
        handler = RecordingHandler(pass_through())
        intercepted.register("http://x/a", "GET", handler)
        async with httpx.AsyncClient(transport=HookTransport(intercepted)) as client:
            request = client.build_request("GET", "http://x/a")
            await client.send(request)
            await client.send(request)
        assert handler.call_count == 2
        assert DISPATCHED_EXTENSION not in request.extensions
