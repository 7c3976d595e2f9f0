"""Terminal error handling for the API.

Classifies any failure that reaches the app into a status and renders an
error view ``{message, error}``. Internal detail only reaches the client
in development.
"""

import html
import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response

from kilroy.domain.shared.error import AuthenticationError, KilroyError
from kilroy.infrastructure.auth.basic import challenge

logger = logging.getLogger(__name__)

# Expected failures that do not deserve a stack trace in development logs.
BENIGN_STATUSES = frozenset({401, 404})

# A path that only matches a route under another verb has no route for this
# one. Answer it like any unmatched route.
UNMATCHED_METHOD = 405


def classify(exc: BaseException) -> int:
    """Explicit status first, then storage "does not exist", then 500."""
    if isinstance(exc, StarletteHTTPException):
        if exc.status_code == UNMATCHED_METHOD:
            return 404
        return exc.status_code
    if isinstance(exc, RequestValidationError):
        return 400
    status = getattr(exc, "status", None)
    if isinstance(status, int) and 400 <= status < 600:
        return status
    if isinstance(exc, FileNotFoundError):
        return 404
    return 500


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def error_message(exc: BaseException, status: int, expose: bool) -> str:
    if isinstance(exc, KilroyError):
        return exc.message
    if isinstance(exc, StarletteHTTPException) and exc.status_code == status:
        if isinstance(exc.detail, str):
            return exc.detail
    if expose and status >= 500:
        return str(exc) or _reason(status)
    return _reason(status)


def error_detail(exc: BaseException) -> dict[str, Any]:
    detail: dict[str, Any] = {"type": type(exc).__name__, "detail": str(exc)}
    if isinstance(exc, KilroyError):
        detail["code"] = exc.code
    if isinstance(exc, RequestValidationError):
        detail["errors"] = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return detail


def _wants_html(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "text/html" in accept and "application/json" not in accept


def render_error(
    request: Request,
    status: int,
    message: str,
    error: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> Response:
    if _wants_html(request):
        body = f"<h1>{html.escape(message)}</h1><h2>{status}</h2>"
        if error:
            body += f"<pre>{html.escape(error.get('detail', ''))}</pre>"
        return HTMLResponse(body, status_code=status, headers=headers)
    return JSONResponse(
        {"message": message, "error": error}, status_code=status, headers=headers
    )


class ErrorPipeline:
    """Maps failures to rendered error responses and logs them once."""

    def __init__(self, is_dev: bool) -> None:
        self.is_dev = is_dev

    def log(self, request: Request, exc: BaseException, status: int) -> None:
        if self.is_dev:
            if status not in BENIGN_STATUSES:
                logger.error(
                    "Unhandled %s on %s %s",
                    type(exc).__name__,
                    request.method,
                    request.url.path,
                    exc_info=exc,
                )
        else:
            logger.warning(
                "%s %s -> %d %s", request.method, request.url.path, status, type(exc).__name__
            )

    async def handle(self, request: Request, exc: Exception) -> Response:
        status = classify(exc)
        self.log(request, exc, status)

        headers: dict[str, str] = {}
        if isinstance(exc, StarletteHTTPException) and exc.status_code == status and exc.headers:
            headers.update(exc.headers)
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = challenge()

        return render_error(
            request,
            status,
            error_message(exc, status, expose=self.is_dev),
            error_detail(exc) if self.is_dev else {},
            headers=headers or None,
        )

    def install(self, app: FastAPI) -> None:
        # Unmatched routes arrive as Starlette's 404 or 405 HTTPException.
        app.add_exception_handler(StarletteHTTPException, self.handle)
        app.add_exception_handler(RequestValidationError, self.handle)
        app.add_exception_handler(KilroyError, self.handle)
        app.add_exception_handler(FileNotFoundError, self.handle)
        app.add_exception_handler(Exception, self.handle)
