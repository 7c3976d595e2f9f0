from dishka import Provider as DishkaProvider

from kilroy.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for Kilroy DI providers. Defaults to application scope."""

    scope = Scope.APP
