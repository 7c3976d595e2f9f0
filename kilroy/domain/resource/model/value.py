"""Value objects for resources."""

import mimetypes
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from kilroy.domain.resource.model.collection import Collection, get_collection
from kilroy.domain.shared.error import ValidationError

# The id may carry dots of its own (media ids keep their file ending), but
# no separators, no leading dot and no empty segments, so never "..".
_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*")
_EXTENSION_PATTERN = re.compile(r"[A-Za-z0-9]+")


@dataclass(frozen=True)
class ResourceId:
    """``(collection, id, extension)`` taken verbatim from a URL.

    The extension is explicit and mandatory; it is never inferred from
    content.
    """

    collection: Collection
    id: str
    extension: str

    def __post_init__(self) -> None:
        if not _ID_PATTERN.fullmatch(self.id):
            raise ValidationError(f"Invalid resource id: {self.id!r}", field="id")
        if not _EXTENSION_PATTERN.fullmatch(self.extension):
            raise ValidationError(
                f"Invalid resource extension: {self.extension!r}", field="extension"
            )

    @classmethod
    def parse(cls, collection: str | Collection, filename: str) -> "ResourceId":
        """Split ``id.ext`` from the last URL segment of a resource path."""
        if isinstance(collection, str):
            collection = get_collection(collection)
        resource_id, dot, extension = filename.rpartition(".")
        if not dot or not resource_id:
            raise ValidationError(
                f"Resource {filename!r} must carry an explicit extension", field="extension"
            )
        return cls(collection=collection, id=resource_id, extension=extension)

    @property
    def filename(self) -> str:
        return f"{self.id}.{self.extension}"

    @property
    def relative_path(self) -> PurePosixPath:
        """``class / collection / id.ext``, relative to the db directory."""
        return PurePosixPath(
            self.collection.mutability.value, self.collection.name, self.filename
        )

    @property
    def media_type(self) -> str:
        media_type, _ = mimetypes.guess_type(self.filename)
        return media_type or "application/octet-stream"

    def __str__(self) -> str:
        return f"/{self.collection.name}/{self.filename}"
