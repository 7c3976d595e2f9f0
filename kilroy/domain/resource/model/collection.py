"""Resource collections and their cache policy."""

from dataclasses import dataclass
from enum import StrEnum

from kilroy.config import ONE_YEAR_SECONDS
from kilroy.domain.shared.error import NotFoundError


class Mutability(StrEnum):
    """Storage class of a collection. Also the name of its root directory."""

    MUTABLE = "mutable"
    IMMUTABLE = "immutable"


MUTABLE_CACHE_CONTROL = "public, max-age=0"
IMMUTABLE_CACHE_CONTROL = f"public, max-age={ONE_YEAR_SECONDS}"


@dataclass(frozen=True)
class Collection:
    """A named bucket of resources.

    Mutability is fixed for the collection's lifetime and decides the cache
    headers of everything in it.
    """

    name: str
    mutability: Mutability
    write_extensions: frozenset[str] | None = None  # None accepts any extension

    @property
    def cache_control(self) -> str:
        if self.mutability is Mutability.IMMUTABLE:
            return IMMUTABLE_CACHE_CONTROL
        return MUTABLE_CACHE_CONTROL

    @property
    def is_immutable(self) -> bool:
        return self.mutability is Mutability.IMMUTABLE

    def accepts(self, extension: str) -> bool:
        return self.write_extensions is None or extension in self.write_extensions


# Singular names are internal resource transfers.
PLACE = Collection("place", Mutability.MUTABLE, frozenset({"json"}))
THING = Collection("thing", Mutability.IMMUTABLE, frozenset({"json"}))
THUMB = Collection("thumb", Mutability.IMMUTABLE, frozenset({"png"}))
MEDIA = Collection("media", Mutability.IMMUTABLE)
FBUSR = Collection("fbusr", Mutability.MUTABLE, frozenset({"json"}))
REFS = Collection("refs", Mutability.MUTABLE, frozenset({"json"}))

COLLECTIONS: dict[str, Collection] = {
    c.name: c for c in (PLACE, THING, THUMB, MEDIA, FBUSR, REFS)
}


def get_collection(name: str) -> Collection:
    collection = COLLECTIONS.get(name)
    if collection is None:
        raise NotFoundError(f"No such collection: {name}")
    return collection
