from abc import abstractmethod
from typing import Any, Protocol

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.resource.model.value import ResourceId
from kilroy.domain.shared.port import Port


class DelegatedWriteHandler(Port, Protocol):
    """Business-logic writes that have no corresponding GET.

    The payloads are opaque here; interpreting them belongs to the handler.
    """

    @abstractmethod
    async def update_user(self, resource: ResourceId, data: Any, actor: Identity) -> None: ...

    @abstractmethod
    async def upload_refs(self, resource: ResourceId, data: Any, actor: Identity) -> None: ...
