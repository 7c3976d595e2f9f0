"""Identity: the authenticated principal attached to a request."""

import json
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Identity:
    """A stable identifier plus display name.

    Built only from a successful credential check or from a session record,
    and always with both fields present.
    """

    idtag: str
    username: str

    def __post_init__(self) -> None:
        if not isinstance(self.idtag, str) or not self.idtag:
            raise ValueError("Identity requires a non-empty idtag")
        if not isinstance(self.username, str) or not self.username:
            raise ValueError("Identity requires a non-empty username")

    def pickle(self) -> str:
        """Serialize for storage in a session record."""
        return json.dumps(asdict(self))

    @classmethod
    def unpickle(cls, pickled: object) -> "Identity | None":
        """Rebuild an Identity from a session record.

        Anything that does not hold both fields yields None rather than a
        partially populated identity.
        """
        if not isinstance(pickled, str):
            return None
        try:
            data = json.loads(pickled)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        try:
            return cls(idtag=data.get("idtag"), username=data.get("username"))
        except ValueError:
            return None
