"""Authorization outcomes: exactly one is produced for every gated request."""

from dataclasses import dataclass
from typing import Union

from kilroy.domain.auth.model.identity import Identity


@dataclass(frozen=True)
class Authenticated:
    """Proceed as this identity. ``resumed`` is True when it came from the session."""

    identity: Identity
    resumed: bool


@dataclass(frozen=True)
class Rejected:
    """Missing or bad credentials."""

    reason: str
    status: int = 401


@dataclass(frozen=True)
class Failed:
    """The credential machinery itself failed. The error is propagated unchanged."""

    error: BaseException
    status: int = 500


AuthorizationOutcome = Union[Authenticated, Rejected, Failed]
