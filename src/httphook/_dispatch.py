"""Dispatcher — first-terminal-response-wins over the rule registry.

Evaluation semantics:
- Rules are scanned in registration order (the precedence order).
- A rule whose method differs from the request's is skipped.
- A rule whose matcher rejects the URL is skipped.
- A matching rule's handler is called and awaited before anything else
  happens; handlers for one request never overlap.
- A PassThrough result means "as if this rule had not matched".
- The first Response ends the scan.
- Handler exceptions propagate unchanged.
- An exhausted scan returns None: the caller goes to the network.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

from httphook._response import PassThrough, Response

if TYPE_CHECKING:
    from httphook._outcome import MatchOutcome
    from httphook._registry import Rule, RuleRegistry
    from httphook._request import HookRequest
    from httphook._response import HandlerResult

logger = logging.getLogger(__name__)


class Dispatcher:
    """Resolves a request to a terminal Response, or None for "no mock"."""

    def __init__(self, registry: RuleRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    async def dispatch(self, request: HookRequest) -> Response | None:
        """Run the scan for one request.

        Returns the first terminal Response, or None when no rule answers.
        Whatever a handler raises is re-raised as-is.
        """
        for rule in self._registry.rules():
            if rule.method != request.method:
                continue

            outcome = rule.matcher.match(request.url)
            if outcome is None:
                continue

            logger.debug("%s %s matched rule %s", request.method, request.url, rule.key)
            result = await _call_handler(rule, request, outcome)

            match result:
                case PassThrough():
                    logger.debug("rule %s passed through", rule.key)
                    continue
                case Response():
                    return result
                case _:
                    msg = (
                        f"handler for rule {rule.key} returned "
                        f"{type(result).__name__}, expected Response or PassThrough"
                    )
                    raise TypeError(msg)

        logger.debug("no rule answered %s %s", request.method, request.url)
        return None


async def _call_handler(
    rule: Rule, request: HookRequest, outcome: MatchOutcome
) -> HandlerResult:
    """Invoke a handler, awaiting its result if it is awaitable."""
    result = rule.handler(request, outcome)
    if inspect.isawaitable(result):
        result = await result
    return result
