"""Rule storage — ordered, keyed, last-write-wins.

Rules are stored under a discriminated RuleKey ``(kind, host, pattern)``.
The store is an insertion-ordered dict, and that order is the dispatch
precedence order. Re-registering under an equal key replaces the rule in
its original slot; precedence does not move to the back.

Key interop form (``RuleKey.legacy``):

| Kind     | Legacy key                   |
|----------|------------------------------|
| EXACT    | the URL                      |
| TEMPLATE | ``host + template``          |
| REGEX    | ``host + "|||" + regex``     |

An empty host means "any host".
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httphook._matchers import RuleMatcher
    from httphook._method import HttpMethod
    from httphook._outcome import MatchOutcome
    from httphook._request import HookRequest
    from httphook._response import HandlerResult

logger = logging.getLogger(__name__)

REGEX_KEY_SEPARATOR = "|||"

type Handler = Callable[
    [HookRequest, MatchOutcome], HandlerResult | Awaitable[HandlerResult]
]


class RuleKind(StrEnum):
    """Which matching strategy a rule uses."""

    EXACT = "exact"
    TEMPLATE = "template"
    REGEX = "regex"


@dataclass(frozen=True, slots=True)
class RuleKey:
    """Storage identity of a rule.

    Keys of different kinds never compare equal, even when their legacy
    string forms would collide.
    """

    kind: RuleKind
    host: str
    pattern: str

    @classmethod
    def exact(cls, url: str) -> RuleKey:
        return cls(RuleKind.EXACT, "", url)

    @classmethod
    def template(cls, host: str, template: str) -> RuleKey:
        return cls(RuleKind.TEMPLATE, host, template)

    @classmethod
    def regex(cls, host: str, regex: str) -> RuleKey:
        return cls(RuleKind.REGEX, host, regex)

    @property
    def legacy(self) -> str:
        """Flat string form of this key."""
        match self.kind:
            case RuleKind.EXACT:
                return self.pattern
            case RuleKind.TEMPLATE:
                return f"{self.host}{self.pattern}"
            case RuleKind.REGEX:
                return f"{self.host}{REGEX_KEY_SEPARATOR}{self.pattern}"

    def __str__(self) -> str:
        return f"{self.kind}:{self.legacy}"


@dataclass(frozen=True, slots=True)
class Rule:
    """One registered interception directive."""

    key: RuleKey
    matcher: RuleMatcher
    method: HttpMethod
    handler: Handler

    @property
    def kind(self) -> RuleKind:
        return self.key.kind


class RuleRegistry:
    """Holds the active rules in precedence order.

    Not thread-safe; meant to be driven from a single event loop.
    Mutations are visible to any scan step that has not run yet.
    """

    def __init__(self) -> None:
        self._rules: dict[RuleKey, Rule] = {}
        self._version = 0

    def register(self, rule: Rule) -> None:
        """Store a rule, replacing any rule under the same key in place."""
        if rule.key in self._rules:
            logger.debug("replacing rule %s (%s)", rule.key, rule.method)
        # dict assignment to an existing key keeps its position
        self._rules[rule.key] = rule
        self._version += 1

    def unregister_exact(self, url: str) -> None:
        """Remove the exact rule for ``url``, if any."""
        if self._rules.pop(RuleKey.exact(url), None) is not None:
            self._version += 1

    def unregister_template(self, host: str, template: str) -> int:
        """Remove template rules on ``host`` whose template starts with ``template``.

        The host is compared literally: removing a wildcard ("") rule never
        touches host-specific rules and vice versa. Returns the number of
        rules removed.
        """
        return self._remove_prefixed(RuleKind.TEMPLATE, host, template)

    def unregister_regex(self, host: str, regex: str) -> int:
        """Remove regex rules on ``host`` whose source starts with ``regex``."""
        return self._remove_prefixed(RuleKind.REGEX, host, regex)

    def rules(self) -> Iterator[Rule]:
        """Yield the current rules in precedence order.

        Each call starts a fresh pass. The pass follows live state: a rule
        removed or replaced before it is reached is skipped or seen in its
        new form, and rules added mid-pass are yielded at the end.
        """
        seen: set[RuleKey] = set()
        version = -1
        pending: list[Rule] = []
        index = 0
        while True:
            if version != self._version:
                version = self._version
                pending = [r for k, r in self._rules.items() if k not in seen]
                index = 0
            if index >= len(pending):
                return
            rule = pending[index]
            index += 1
            seen.add(rule.key)
            yield rule

    def get(self, key: RuleKey) -> Rule | None:
        return self._rules.get(key)

    def clear(self) -> None:
        """Remove every rule."""
        self._rules.clear()
        self._version += 1

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def _remove_prefixed(self, kind: RuleKind, host: str, prefix: str) -> int:
        doomed = [
            key
            for key in self._rules
            if key.kind is kind and key.host == host and key.pattern.startswith(prefix)
        ]
        for key in doomed:
            del self._rules[key]
        if doomed:
            self._version += 1
            logger.debug("removed %d %s rule(s) for %r", len(doomed), kind, f"{host}{prefix}")
        return len(doomed)
