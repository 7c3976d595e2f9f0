from kilroy.domain.auth.port.audit import AuditHook
from kilroy.domain.auth.port.credential_strategy import CredentialStrategy, Verification
from kilroy.domain.auth.port.session import SessionBinding

__all__ = [
    "AuditHook",
    "CredentialStrategy",
    "SessionBinding",
    "Verification",
]
