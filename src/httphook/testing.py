"""Test utilities for httphook.

Small handler helpers that cut boilerplate in tests and examples. They
are ordinary handlers; nothing here is special-cased by the dispatcher.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httphook._outcome import MatchOutcome
    from httphook._registry import Handler
    from httphook._request import HookRequest
    from httphook._response import HandlerResult


def respond_with(result: HandlerResult, *, delay: float = 0.0) -> Handler:
    """Handler that always returns ``result``.

    With ``delay`` the handler is async and sleeps first, which is handy
    for simulating latency.

    >>> from httphook import ok
    >>> handler = respond_with(ok("pong"))
    """
    if delay <= 0:

        def handler(_request: HookRequest, _match: MatchOutcome) -> HandlerResult:
            return result

        return handler

    async def slow_handler(_request: HookRequest, _match: MatchOutcome) -> HandlerResult:
        await asyncio.sleep(delay)
        return result

    return slow_handler


@dataclass
class RecordingHandler:
    """Handler that records every call before delegating.

    ``answer`` is either a fixed result or another handler.
    """

    answer: HandlerResult | Handler
    calls: list[tuple[HookRequest, MatchOutcome]] = field(default_factory=list)

    async def __call__(self, request: HookRequest, match: MatchOutcome) -> HandlerResult:
        self.calls.append((request, match))
        if not callable(self.answer):
            return self.answer
        result = self.answer(request, match)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_request(self) -> HookRequest | None:
        return self.calls[-1][0] if self.calls else None
