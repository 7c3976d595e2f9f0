"""DI provider for the auth domain."""

from dishka import from_context, provide
from starlette.requests import Request

from kilroy.config import Secrets
from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.auth.port.audit import AuditHook
from kilroy.domain.auth.port.credential_strategy import CredentialStrategy
from kilroy.domain.auth.port.session import SessionBinding
from kilroy.domain.auth.service.gate import AuthorizationGate, identity_or_raise
from kilroy.infrastructure.auth.audit import LoggingAuditHook
from kilroy.infrastructure.auth.basic import BasicCredentialStrategy
from kilroy.infrastructure.auth.session import CookieSessionBinding
from kilroy.util.di.base import Provider
from kilroy.util.di.scope import Scope


class AuthProvider(Provider):
    """DI provider for the authorization gate and its collaborators."""

    request = from_context(provides=Request, scope=Scope.UOW)

    @provide
    def get_sessions(self) -> SessionBinding:
        return CookieSessionBinding()

    @provide
    def get_audit(self) -> AuditHook:
        return LoggingAuditHook()

    @provide
    def get_strategy(self, secrets: Secrets) -> CredentialStrategy:
        return BasicCredentialStrategy(test_user_auth=secrets.test_user_auth)

    @provide
    def get_gate(
        self,
        strategy: CredentialStrategy,
        sessions: SessionBinding,
        audit: AuditHook,
    ) -> AuthorizationGate:
        return AuthorizationGate(_strategy=strategy, _sessions=sessions, _audit=audit)

    @provide(scope=Scope.UOW)
    async def get_identity(self, request: Request, gate: AuthorizationGate) -> Identity:
        """Run the gate for this request. Only routes that ask for an Identity are gated.

        Raises:
            AuthenticationError: If the request carries no valid session or credentials
        """
        outcome = await gate.authorize(request)
        identity = identity_or_raise(outcome)
        request.state.identity = identity
        return identity
