from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.shared.port import Port


@dataclass(frozen=True)
class Verification:
    """Result of a credential strategy: ``(error, identity_or_false, info)``.

    Improper credentials produce a falsy identity, not an error. An error
    means the machinery itself failed. Strategies are not consistent in
    what they put in ``info``: sometimes an object with a ``message``,
    sometimes a bare value.
    """

    error: BaseException | None = None
    identity: Identity | Literal[False] | None = None
    info: Any = None


class CredentialStrategy(Port, Protocol):
    """Produces an identity from the credentials carried by a single request."""

    name: str

    @abstractmethod
    async def authenticate(self, request: Request) -> Verification: ...
