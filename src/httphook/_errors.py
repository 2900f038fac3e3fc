"""Exception hierarchy for httphook.

Only caller-facing construction problems raise. Anything that goes wrong
while matching is absorbed into "this rule does not match" so dispatch
stays total; handler exceptions are never wrapped.
"""

from __future__ import annotations


class HookError(Exception):
    """Base class for all httphook errors."""


class UnknownMethodError(HookError, ValueError):
    """A method string does not name a supported HTTP method."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"unknown HTTP method: {method!r}")


class InvalidPatternError(HookError):
    """A rule pattern was rejected at registration time."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f'invalid pattern "{pattern}": {reason}')
