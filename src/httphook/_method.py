"""HttpMethod — the fixed set of methods a rule can be bound to."""

from __future__ import annotations

from enum import StrEnum

from httphook._errors import UnknownMethodError


class HttpMethod(StrEnum):
    """Supported HTTP methods.

    Rules always name exactly one method; there is no wildcard member.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def from_string(cls, method: str | HttpMethod) -> HttpMethod:
        """Convert a method name (any case) to an HttpMethod.

        Raises:
            UnknownMethodError: If the name is not one of the members.
        """
        if isinstance(method, HttpMethod):
            return method
        try:
            return cls(method.upper())
        except ValueError:
            raise UnknownMethodError(method) from None
