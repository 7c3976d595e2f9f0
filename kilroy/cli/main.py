"""Main CLI application using Cyclopts."""

import sys

import cyclopts
import logfire
import uvicorn

from kilroy.config import Secrets, load_config
from kilroy.domain.shared.error import ConfigurationError

app = cyclopts.App(
    name="kilroy",
    help="Ki1r0y scene sharing server",
)


@app.command
def serve(host: str = "0.0.0.0", port: int = 3000, reload: bool = False) -> None:
    """Run the HTTP server in the foreground.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    try:
        config = load_config()
        Secrets.from_env()
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    # Must happen before the app instruments itself.
    logfire.configure(
        service_name=config.server.name.lower(),
        send_to_logfire="if-token-present",
        console=False,
    )
    uvicorn.run(
        "kilroy.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        access_log=False,
    )


@app.command
def config() -> None:
    """Print the resolved configuration, without secrets."""
    try:
        resolved = load_config()
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)
    print(resolved.model_dump_json(indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
