import json
import logging
from typing import Any

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.resource.model.value import ResourceId
from kilroy.domain.resource.port.delegated import DelegatedWriteHandler
from kilroy.domain.resource.service.resource import ResourceService

logger = logging.getLogger(__name__)


class StoringWriteHandler(DelegatedWriteHandler):
    """Default delegated handler: keeps each payload as a mutable JSON resource."""

    def __init__(self, resources: ResourceService) -> None:
        self._resources = resources

    async def update_user(self, resource: ResourceId, data: Any, actor: Identity) -> None:
        await self._store(resource, data, actor)

    async def upload_refs(self, resource: ResourceId, data: Any, actor: Identity) -> None:
        await self._store(resource, data, actor)

    async def _store(self, resource: ResourceId, data: Any, actor: Identity) -> None:
        logger.info("%s updating %s", actor.idtag, resource)
        await self._resources.write(resource, json.dumps(data).encode("utf-8"))
