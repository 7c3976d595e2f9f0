import logging

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.auth.port.audit import AuditHook

logger = logging.getLogger(__name__)


class LoggingAuditHook(AuditHook):
    """Names the acting user in the access log and records logins."""

    def acting(self, request: Request, identity: Identity) -> None:
        request.state.user = identity.idtag
        logger.info("%s %s acting as %s", request.method, request.url.path, identity.idtag)

    def login(self, request: Request, identity: Identity) -> None:
        logger.info("/loginScope?username=%s idtag=%s", identity.username, identity.idtag)
