from abc import abstractmethod
from typing import Protocol

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.shared.port import Port


class AuditHook(Port, Protocol):
    @abstractmethod
    def acting(self, request: Request, identity: Identity) -> None:
        """Record that this identity is acting on the request."""
        ...

    @abstractmethod
    def login(self, request: Request, identity: Identity) -> None:
        """Record a fresh login, before the session is bound."""
        ...
