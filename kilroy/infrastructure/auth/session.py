"""Session binding on top of Starlette's signed cookie session."""

import logging

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.auth.port.session import SessionBinding

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"


class CookieSessionBinding(SessionBinding):
    """Pickles the identity into ``request.session`` (SessionMiddleware signs it)."""

    def current(self, request: Request) -> Identity | None:
        if "session" not in request.scope:
            return None
        pickled = request.session.get(SESSION_USER_KEY)
        if pickled is None:
            return None
        identity = Identity.unpickle(pickled)
        if identity is None:
            logger.warning("Discarding unreadable session record")
        return identity

    async def bind(self, request: Request, identity: Identity) -> None:
        request.session[SESSION_USER_KEY] = identity.pickle()
