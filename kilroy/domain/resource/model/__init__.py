from kilroy.domain.resource.model.collection import (
    COLLECTIONS,
    Collection,
    Mutability,
    get_collection,
)
from kilroy.domain.resource.model.value import ResourceId

__all__ = [
    "COLLECTIONS",
    "Collection",
    "Mutability",
    "ResourceId",
    "get_collection",
]
