"""DI provider for the resource domain."""

from dishka import provide

from kilroy.config import Config
from kilroy.domain.resource.port.delegated import DelegatedWriteHandler
from kilroy.domain.resource.port.storage import ResourceStoragePort
from kilroy.domain.resource.service.delegated import StoringWriteHandler
from kilroy.domain.resource.service.resource import ResourceService
from kilroy.infrastructure.storage.local import LocalResourceStorage
from kilroy.util.di.base import Provider


class ResourceProvider(Provider):
    """DI provider for resource storage and services."""

    @provide
    def get_delegated(self, resources: ResourceService) -> DelegatedWriteHandler:
        return StoringWriteHandler(resources)

    @provide
    def get_storage(self, config: Config) -> ResourceStoragePort:
        return LocalResourceStorage(
            base_path=config.storage.db_dir,
            chunk_size=config.storage.chunk_size,
        )

    @provide
    def get_resource_service(self, storage: ResourceStoragePort) -> ResourceService:
        return ResourceService(_storage=storage)
