from dishka import AsyncContainer, make_async_container

from kilroy.config import Config, Secrets
from kilroy.domain.auth.util.di import AuthProvider
from kilroy.domain.resource.util.di import ResourceProvider
from kilroy.infrastructure.shared.di import ConfigProvider
from kilroy.util.di.scope import Scope


def create_container(config: Config, secrets: Secrets) -> AsyncContainer:
    return make_async_container(
        ConfigProvider(),
        AuthProvider(),
        ResourceProvider(),
        context={Config: config, Secrets: secrets},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
