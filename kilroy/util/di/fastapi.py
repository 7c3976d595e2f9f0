"""Per-request DI container for the Kilroy HTTP app."""

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from kilroy.util.di.scope import Scope as KilroyScope


class ContainerMiddleware:
    """Opens a Scope.UOW container around each HTTP request.

    The request goes into the container's context, so the authorization
    gate can read the session the session middleware has already decoded.
    Kilroy serves no websockets; other ASGI traffic passes straight through.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=KilroyScope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Attach the application container and the per-request middleware.

    Add this before SessionMiddleware so that the session is decoded by
    the time a request container is opened.
    """
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
