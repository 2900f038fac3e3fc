"""Core protocols for httphook.

The hook itself never touches a network client. Whatever physically
diverts outgoing requests (a transport patch, a client wrapper) is a
Collaborator: the hook installs it on start and removes it on teardown,
and the collaborator calls back into ``HttpHook.dispatch``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from httphook._hook import HttpHook


@runtime_checkable
class Collaborator(Protocol):
    """Installs and removes the transport override for a hook.

    ``install`` is called once per Stopped -> Started transition and
    ``uninstall`` once per Started -> Stopped transition.
    """

    def install(self, hook: HttpHook, /) -> None: ...

    def uninstall(self) -> None: ...
