from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.auth.model.outcome import (
    Authenticated,
    AuthorizationOutcome,
    Failed,
    Rejected,
)

__all__ = [
    "Authenticated",
    "AuthorizationOutcome",
    "Failed",
    "Identity",
    "Rejected",
]
