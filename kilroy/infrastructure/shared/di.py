from dishka import from_context

from kilroy.config import Config, Secrets
from kilroy.util.di.base import Provider
from kilroy.util.di.scope import Scope


class ConfigProvider(Provider):
    """Exposes the startup Config and Secrets handed to the container as context."""

    config = from_context(provides=Config, scope=Scope.APP)
    secrets = from_context(provides=Secrets, scope=Scope.APP)
