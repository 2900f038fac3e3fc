"""MatchOutcome — data extracted by a successful match."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar


@dataclass(frozen=True, slots=True)
class MatchOutcome:
    """Result of a successful match.

    ``path_params`` is set only for template matches, ``regex_match`` only
    for regex matches. Exact matches share the ``EMPTY`` singleton.
    """

    path_params: Mapping[str, str] | None = None
    regex_match: Any | None = None

    EMPTY: ClassVar[MatchOutcome]

    @classmethod
    def from_params(cls, params: dict[str, str]) -> MatchOutcome:
        return cls(path_params=MappingProxyType(dict(params)))

    def param(self, name: str) -> str | None:
        """Get a path parameter by name, or None."""
        if self.path_params is None:
            return None
        return self.path_params.get(name)

    def group(self, index: int | str = 0) -> str | None:
        """Get a regex capture group (by number or name), or None.

        Group 0 is the whole match. Returns None when this outcome did
        not come from a regex match or the group did not participate.
        """
        if self.regex_match is None:
            return None
        return self.regex_match.group(index)

    def groups(self) -> tuple[str | None, ...]:
        """All numbered capture groups (empty for non-regex outcomes)."""
        if self.regex_match is None:
            return ()
        return tuple(self.regex_match.groups())


MatchOutcome.EMPTY = MatchOutcome()
