"""One log line per request, naming the authenticated user when there is one."""

import logging
import time
from datetime import datetime, timezone

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("kilroy.access")


class AccessLogMiddleware:
    """ASGI middleware writing combined-style lines, or compact ones in development."""

    def __init__(self, app: ASGIApp, combined: bool = True) -> None:
        self.app = app
        self.combined = combined

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        scope.setdefault("state", {})
        started = time.perf_counter()
        status = 500
        length = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status, length
            if message["type"] == "http.response.start":
                status = message["status"]
            elif message["type"] == "http.response.body":
                length += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self._log(scope, status, length, elapsed_ms)

    def _log(self, scope: Scope, status: int, length: int, elapsed_ms: float) -> None:
        path = scope.get("path", "")
        if scope.get("query_string"):
            path = f"{path}?{scope['query_string'].decode('latin-1')}"
        user = scope.get("state", {}).get("user") or "-"

        if not self.combined:
            logger.info("%s %s %d %.3f ms - %d", scope["method"], path, status, elapsed_ms, length)
            return

        headers = {k.decode("latin-1"): v.decode("latin-1") for k, v in scope.get("headers", [])}
        client = scope.get("client")
        remote = client[0] if client else "-"
        now = datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S +0000")
        logger.info(
            '%s - %s [%s] "%s %s HTTP/%s" %d %d "%s" "%s"',
            remote,
            user,
            now,
            scope["method"],
            path,
            scope.get("http_version", "1.1"),
            status,
            length,
            headers.get("referer", "-"),
            headers.get("user-agent", "-"),
        )
