"""HookRequest — Immutable snapshot of an intercepted request.

Holds the parsed URL, the method, and headers (case-insensitive lookup).
The request body is deliberately not captured.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlsplit

if TYPE_CHECKING:
    from httphook._method import HttpMethod

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


@dataclass(frozen=True, slots=True)
class URL:
    """Parsed URL components used for matching.

    ``port`` is the effective port (explicit, else the scheme default);
    ``explicit_port`` is only set when the URL spelled one out. A URL
    with an authority but no path gets ``/`` as its path, so
    ``http://x`` and ``http://x/`` compare equal.
    """

    scheme: str = ""
    host: str = ""
    explicit_port: int | None = None
    path: str = ""
    query: str = ""

    @classmethod
    def parse(cls, raw: str) -> URL:
        """Parse a URL string.

        Raises:
            ValueError: If the port is not a valid integer in range.
        """
        parts = urlsplit(raw)
        path = parts.path
        if not path and parts.netloc:
            path = "/"
        return cls(
            scheme=parts.scheme.lower(),
            host=parts.hostname or "",
            explicit_port=parts.port,
            path=path,
            query=parts.query,
        )

    @property
    def port(self) -> int | None:
        """Effective port: explicit, or the scheme's default."""
        if self.explicit_port is not None:
            return self.explicit_port
        return _DEFAULT_PORTS.get(self.scheme)

    def __str__(self) -> str:
        netloc = self.host
        if self.explicit_port is not None:
            netloc = f"{netloc}:{self.explicit_port}"
        out = f"{self.scheme}://{netloc}" if self.scheme else netloc
        out += self.path
        if self.query:
            out += f"?{self.query}"
        return out


@dataclass(frozen=True, slots=True)
class HookRequest:
    """Request snapshot handed to handlers.

    Headers keep their original names and order; lookups through
    ``header()`` are case-insensitive.
    """

    url: URL
    method: HttpMethod
    headers: dict[str, str] = field(default_factory=dict)

    # Computed fields
    _lower_headers: dict[str, str] = field(init=False, repr=False)
    _query_params: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_lower_headers",
            {k.lower(): v for k, v in self.headers.items()},
        )
        object.__setattr__(
            self,
            "_query_params",
            dict(parse_qsl(self.url.query, keep_blank_values=True)),
        )

    @classmethod
    def build(
        cls,
        method: HttpMethod,
        url: str | URL,
        headers: dict[str, str] | None = None,
    ) -> HookRequest:
        """Build a request from a URL string (or already-parsed URL)."""
        parsed = URL.parse(url) if isinstance(url, str) else url
        return cls(url=parsed, method=method, headers=dict(headers or {}))

    @property
    def path(self) -> str:
        """Path without query string."""
        return self.url.path

    @property
    def query_params(self) -> dict[str, str]:
        """Parsed query parameters (last value wins for repeated keys)."""
        return self._query_params

    def header(self, name: str) -> str | None:
        """Get a header value by name (case-insensitive)."""
        return self._lower_headers.get(name.lower())

    def query_param(self, name: str) -> str | None:
        """Get a query parameter by name."""
        return self._query_params.get(name)
