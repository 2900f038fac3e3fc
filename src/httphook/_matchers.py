"""URL matching strategies.

Each matcher is a frozen dataclass holding one pattern, compiled at
construction. ``match(url)`` returns a MatchOutcome on success and None
otherwise; it never raises. A pattern that turns out to be unusable at
match time is a silent no-match for that rule only.

Regex rules are compiled with ``google-re2``, so a hostile path cannot make
a scan slow. Patterns RE2 cannot express, such as ``(a)\\1`` or
``(?=x)``, fail at registration with InvalidPatternError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import re2

from httphook._errors import InvalidPatternError
from httphook._outcome import MatchOutcome
from httphook._request import URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExactMatcher:
    """Component-wise URL equality.

    Scheme, host, and port are compared only when the pattern specifies
    them (port only when spelled out); the path is always compared.
    """

    url: str
    _parsed: URL | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            parsed: URL | None = URL.parse(self.url)
        except ValueError:
            parsed = None
        object.__setattr__(self, "_parsed", parsed)

    def match(self, url: URL, /) -> MatchOutcome | None:
        pattern = self._parsed
        if pattern is None:
            logger.debug("exact pattern %r is malformed, skipping", self.url)
            return None
        if pattern.scheme and pattern.scheme != url.scheme:
            return None
        if pattern.host and pattern.host != url.host:
            return None
        if pattern.explicit_port is not None and pattern.explicit_port != url.port:
            return None
        if pattern.path != url.path:
            return None
        return MatchOutcome.EMPTY


@dataclass(frozen=True, slots=True)
class TemplateMatcher:
    """Path template with ``:name`` parameter segments.

    An empty host matches any host. Segment counts must agree; there is
    no trailing wildcard.
    """

    host: str
    template: str
    _segments: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_segments", tuple(self.template.split("/")))

    def match(self, url: URL, /) -> MatchOutcome | None:
        if not self.template.startswith("/"):
            logger.debug("template %r does not start with '/', skipping", self.template)
            return None
        if self.host and self.host != url.host:
            return None

        parts = url.path.split("/")
        if len(parts) != len(self._segments):
            return None

        params: dict[str, str] = {}
        for expected, actual in zip(self._segments, parts, strict=True):
            if expected.startswith(":"):
                params[expected[1:]] = actual
            elif expected != actual:
                return None
        return MatchOutcome.from_params(params)


@dataclass(frozen=True, slots=True)
class RegexMatcher:
    """Regular expression searched against the request path.

    Uses search (not fullmatch), so the first match anywhere in the path
    wins unless the pattern anchors itself. The query string is never
    part of the subject. An empty host matches any host.

    Raises:
        InvalidPatternError: If the pattern is not valid RE2 syntax.
    """

    host: str
    pattern: str
    _compiled: re2.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            compiled = re2.compile(self.pattern)
        except re2.error as e:
            raise InvalidPatternError(self.pattern, str(e)) from e
        object.__setattr__(self, "_compiled", compiled)

    def match(self, url: URL, /) -> MatchOutcome | None:
        if self.host and self.host != url.host:
            return None
        found = self._compiled.search(url.path)
        if found is None:
            return None
        return MatchOutcome(regex_match=found)


type RuleMatcher = ExactMatcher | TemplateMatcher | RegexMatcher
