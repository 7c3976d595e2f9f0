"""Resource service: reads, writes and deletes resources by identifier.

Resource URLs mirror the storage layout: ``/thing/123.json`` lives at
``db/immutable/thing/123.json``.
"""

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from kilroy.domain.resource.model.value import ResourceId
from kilroy.domain.resource.port.storage import ResourceStoragePort
from kilroy.domain.shared.error import ConflictError, ValidationError
from kilroy.domain.shared.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceRead:
    """A resource ready to be streamed, with the headers its collection demands."""

    resource: ResourceId
    body: AsyncIterator[bytes]

    @property
    def media_type(self) -> str:
        return self.resource.media_type

    @property
    def headers(self) -> dict[str, str]:
        return {"Cache-Control": self.resource.collection.cache_control}


@dataclass(frozen=True)
class ResourceWritten:
    resource: ResourceId
    size: int
    created: bool


@dataclass(frozen=True)
class ResourceDeleted:
    resource: ResourceId
    existed: bool


class ResourceService(Service):
    """Maps resource identifiers onto storage."""

    _storage: ResourceStoragePort

    async def read(self, resource: ResourceId) -> ResourceRead:
        """Open the resource for streaming. Raises FileNotFoundError if absent."""
        body = await self._storage.open_stream(resource.relative_path)
        return ResourceRead(resource=resource, body=body)

    async def write(self, resource: ResourceId, content: bytes) -> ResourceWritten:
        """Persist content, fully replacing what a mutable resource held before.

        Content at an immutable identifier never changes once written:
        re-sending identical bytes succeeds, anything else is a conflict.
        """
        collection = resource.collection
        if not collection.accepts(resource.extension):
            raise ValidationError(
                f"{collection.name} does not accept .{resource.extension} resources",
                field="extension",
            )
        if resource.extension == "json":
            _check_json(content)

        path = resource.relative_path
        existed = await self._storage.exists(path)
        if existed and collection.is_immutable:
            if await self._storage.load(path) == content:
                logger.debug("Unchanged immutable resource %s", resource)
                return ResourceWritten(resource=resource, size=len(content), created=False)
            raise ConflictError(f"Immutable resource {resource} already exists")

        await self._storage.save(path, content)
        logger.info("Wrote %s (%d bytes)", resource, len(content))
        return ResourceWritten(resource=resource, size=len(content), created=not existed)

    async def delete(self, resource: ResourceId) -> ResourceDeleted:
        """Remove the resource. Deleting something absent is not an error."""
        existed = await self._storage.delete(resource.relative_path)
        if existed:
            logger.info("Deleted %s", resource)
        return ResourceDeleted(resource=resource, existed=existed)


def _check_json(content: bytes) -> None:
    try:
        json.loads(content)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Body is not valid JSON: {e}", field="body") from e
