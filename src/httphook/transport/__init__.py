"""httphook.transport — collaborators that divert real client traffic.

Provides an httpx transport that consults an HttpHook before touching the
network, and an interceptor that patches httpx's default async transport
so every ``httpx.AsyncClient`` is covered.
"""

from httphook.transport._httpx import (
    HookTransport,
    HttpxInterceptor,
    to_hook_request,
    to_httpx_response,
)

__all__ = [
    "HookTransport",
    "HttpxInterceptor",
    "to_hook_request",
    "to_httpx_response",
]
