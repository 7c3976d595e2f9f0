from abc import abstractmethod
from typing import Protocol

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.shared.port import Port


class SessionBinding(Port, Protocol):
    """Reads and writes the identity held by a request's session.

    The session store itself is owned elsewhere; this interface never
    assumes exclusive access to it.
    """

    @abstractmethod
    def current(self, request: Request) -> Identity | None:
        """Return the session's identity, or None if it holds no valid one."""
        ...

    @abstractmethod
    async def bind(self, request: Request, identity: Identity) -> None:
        """Associate the identity with the request's session."""
        ...
