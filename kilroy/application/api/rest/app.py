import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from kilroy.application.api.access_log import AccessLogMiddleware
from kilroy.application.api.errors import ErrorPipeline
from kilroy.application.api.rest.routes import channel, health, resources
from kilroy.application.di import create_container
from kilroy.config import Config, Secrets, configure_logging, load_config
from kilroy.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    yield
    await container.close()


def create_app(config: Config | None = None, secrets: Secrets | None = None) -> FastAPI:
    """Create FastAPI application.

    Secrets are resolved here, so a missing COOKIE_SIGNER or TEST_USER_AUTH
    stops startup with a ConfigurationError.
    """
    if config is None:
        config = load_config()
    if secrets is None:
        secrets = Secrets.from_env()

    # Configure logging early
    configure_logging(config.logging)
    logger.info(
        "Starting %s server v%s (%s), db at %s",
        config.server.name,
        config.server.version,
        config.environment,
        config.storage.db_dir,
    )

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_fastapi(app_instance)

    # Middleware added last runs first: access log -> session -> DI container
    container = create_container(config, secrets)
    setup_dishka(container, app_instance)
    app_instance.add_middleware(
        SessionMiddleware,
        secret_key=secrets.cookie_signer,
        session_cookie=config.session.cookie_name,
        max_age=config.session.max_age,
        https_only=config.session.https_only,
    )
    app_instance.add_middleware(AccessLogMiddleware, combined=not config.is_dev)

    app_instance.include_router(health.router)
    app_instance.include_router(channel.router)
    app_instance.include_router(resources.router)

    ErrorPipeline(is_dev=config.is_dev).install(app_instance)

    return app_instance
