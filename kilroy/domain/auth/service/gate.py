"""AuthorizationGate: one decision per request, from session or credentials.

States: Anonymous -> Resuming (session holds an identity) or Challenging
(run the credential strategy). Both end in Authenticated, Rejected or
Failed, which are terminal for the request.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.auth.model.outcome import (
    Authenticated,
    AuthorizationOutcome,
    Failed,
    Rejected,
)
from kilroy.domain.auth.port.audit import AuditHook
from kilroy.domain.auth.port.credential_strategy import CredentialStrategy, Verification
from kilroy.domain.auth.port.session import SessionBinding
from kilroy.domain.shared.error import AuthenticationError
from kilroy.domain.shared.service import Service

logger = logging.getLogger(__name__)

# Marks a verification that came from the session rather than a strategy.
SKIP_LOGIN = "skipLogin"

UNAUTHORIZED = "Unauthorized"


def rejection_message(info: Any) -> str:
    """Message for a rejected request.

    Strategies aren't consistent in their use of info: use its message
    when there is one, otherwise show info itself, otherwise say
    Unauthorized.
    """
    if info is None:
        return UNAUTHORIZED
    message = getattr(info, "message", None)
    if message is None and isinstance(info, Mapping):
        message = info.get("message")
    if message:
        return str(message)
    return f"{UNAUTHORIZED}: {info}"


def _status_of(error: BaseException) -> int:
    status = getattr(error, "status", None)
    return status if isinstance(status, int) else 500


class AuthorizationGate(Service):
    """Decides whether a request proceeds as a user, is rejected, or fails."""

    _strategy: CredentialStrategy
    _sessions: SessionBinding
    _audit: AuditHook

    async def authorize(self, request: Request) -> AuthorizationOutcome:
        identity = self._sessions.current(request)
        if identity is not None:
            # Resuming: yield once like a strategy would, but never re-challenge.
            await asyncio.sleep(0)
            return await self.verify(
                request, Verification(identity=identity, info=SKIP_LOGIN)
            )

        try:
            verification = await self._strategy.authenticate(request)
        except Exception as e:
            verification = Verification(error=e)
        return await self.verify(request, verification)

    async def verify(self, request: Request, verification: Verification) -> AuthorizationOutcome:
        """Turn a strategy's ``(error, identity, info)`` into exactly one outcome."""
        if verification.error is not None:
            logger.warning(
                "Credential strategy %s failed: %r", self._strategy.name, verification.error
            )
            return Failed(error=verification.error, status=_status_of(verification.error))

        identity = verification.identity
        if identity:
            # Audit runs before bind; a failed bind is still audited.
            self._audit.acting(request, identity)
            if verification.info == SKIP_LOGIN:
                return Authenticated(identity=identity, resumed=True)
            self._audit.login(request, identity)
            try:
                await self._sessions.bind(request, identity)
            except Exception as e:
                logger.error("Session bind failed for %s: %r", identity.idtag, e)
                return Failed(error=e, status=_status_of(e))
            return Authenticated(identity=identity, resumed=False)

        return Rejected(reason=rejection_message(verification.info))


def identity_or_raise(outcome: AuthorizationOutcome) -> Identity:
    """Let an authenticated request continue, or end it with a status."""
    if isinstance(outcome, Authenticated):
        return outcome.identity
    if isinstance(outcome, Rejected):
        raise AuthenticationError(outcome.reason, code="unauthorized")
    raise outcome.error
