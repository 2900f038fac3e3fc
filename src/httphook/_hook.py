"""HttpHook — registration surface and lifecycle.

One HttpHook owns one RuleRegistry and one Dispatcher. It is meant to be
constructed per test (or per test run) and passed to whatever needs it;
there is no module-level instance.

Lifecycle:

    Stopped --start()--> Started --teardown()--> Stopped

Interception is active only while Started. ``teardown()`` always clears
the rules; a dispatch issued afterwards returns None.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Self
from urllib.parse import urlsplit

from httphook._dispatch import Dispatcher
from httphook._errors import InvalidPatternError
from httphook._matchers import ExactMatcher, RegexMatcher, TemplateMatcher
from httphook._method import HttpMethod
from httphook._registry import Rule, RuleKey, RuleRegistry

if TYPE_CHECKING:
    from types import TracebackType

    from httphook._registry import Handler
    from httphook._request import HookRequest
    from httphook._response import Response
    from httphook._types import Collaborator

logger = logging.getLogger(__name__)


class HookState(StrEnum):
    STOPPED = "stopped"
    STARTED = "started"


def normalize_host(host: str | None) -> str:
    """Reduce a host argument to the bare, lowercased host name.

    None and "" mean "any host". A full URL ("https://api.x:8443/v1") is
    reduced to its host, as is a "host:port" pair.

    Raises:
        InvalidPatternError: If ``host`` cannot be parsed as a host.
    """
    if not host:
        return ""
    target = host if "://" in host else f"//{host}"
    try:
        return urlsplit(target).hostname or ""
    except ValueError as e:
        raise InvalidPatternError(host, str(e)) from e


class HttpHook:
    """Registers interception rules and answers dispatch requests.

    Every registration call takes a mandatory method; strings are
    converted with ``HttpMethod.from_string`` and fail immediately if
    unknown.

    Example::

        hook = HttpHook(HttpxInterceptor())
        hook.start()
        hook.register("http://x/a", "GET", lambda req, m: json({"id": 1}))
        ...
        hook.teardown()
    """

    def __init__(
        self,
        collaborator: Collaborator | None = None,
        *,
        registry: RuleRegistry | None = None,
    ) -> None:
        self._collaborator = collaborator
        self._registry = registry if registry is not None else RuleRegistry()
        self._dispatcher = Dispatcher(self._registry)
        self._state = HookState.STOPPED

    # ── Lifecycle ──────────────────────────────────────────────────────────

    @property
    def state(self) -> HookState:
        return self._state

    @property
    def is_active(self) -> bool:
        """True while Started."""
        return self._state is HookState.STARTED

    def start(self) -> None:
        """Begin intercepting. No-op if already Started."""
        if self._state is HookState.STARTED:
            return
        if self._collaborator is not None:
            self._collaborator.install(self)
        self._state = HookState.STARTED
        logger.info("http hook started")

    def teardown(self) -> None:
        """Clear all rules and stop intercepting. Safe to call repeatedly."""
        self._registry.clear()
        if self._state is HookState.STOPPED:
            return
        self._state = HookState.STOPPED
        if self._collaborator is not None:
            self._collaborator.uninstall()
        logger.info("http hook stopped")

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.teardown()

    # ── Registration ───────────────────────────────────────────────────────

    def register(self, url: str, method: HttpMethod | str, handler: Handler) -> RuleKey:
        """Intercept requests matching ``url`` component-wise."""
        key = RuleKey.exact(url)
        self._add(key, ExactMatcher(url), method, handler)
        return key

    def register_template(
        self,
        host: str | None,
        template: str,
        method: HttpMethod | str,
        handler: Handler,
    ) -> RuleKey:
        """Intercept requests whose path fits ``template`` (``/user/:id``).

        ``host`` None or "" matches any host.
        """
        bare = normalize_host(host)
        key = RuleKey.template(bare, template)
        self._add(key, TemplateMatcher(bare, template), method, handler)
        return key

    def register_regex(
        self,
        host: str | None,
        regex: str,
        method: HttpMethod | str,
        handler: Handler,
    ) -> RuleKey:
        """Intercept requests whose path contains a match for ``regex``.

        Raises:
            InvalidPatternError: If ``regex`` is not valid RE2 syntax.
        """
        bare = normalize_host(host)
        key = RuleKey.regex(bare, regex)
        self._add(key, RegexMatcher(bare, regex), method, handler)
        return key

    def unregister(self, url: str) -> None:
        """Remove the exact rule for ``url``, if present."""
        self._registry.unregister_exact(url)

    def unregister_template(self, host: str | None, template: str) -> int:
        """Remove template rules on exactly this host (or the wildcard)."""
        return self._registry.unregister_template(normalize_host(host), template)

    def unregister_regex(self, host: str | None, regex: str) -> int:
        """Remove regex rules on exactly this host (or the wildcard)."""
        return self._registry.unregister_regex(normalize_host(host), regex)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    # ── Dispatch ───────────────────────────────────────────────────────────

    async def dispatch(self, request: HookRequest) -> Response | None:
        """Resolve a request; None means "let the real network handle it"."""
        if self._state is not HookState.STARTED:
            return None
        return await self._dispatcher.dispatch(request)

    def _add(
        self,
        key: RuleKey,
        matcher: ExactMatcher | TemplateMatcher | RegexMatcher,
        method: HttpMethod | str,
        handler: Handler,
    ) -> None:
        rule = Rule(
            key=key,
            matcher=matcher,
            method=HttpMethod.from_string(method),
            handler=handler,
        )
        self._registry.register(rule)
