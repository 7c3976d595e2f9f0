from abc import abstractmethod
from collections.abc import AsyncIterator
from pathlib import PurePosixPath
from typing import Protocol

from kilroy.domain.shared.port import Port


class ResourceStoragePort(Port, Protocol):
    """Byte storage addressed by paths relative to the db directory.

    Missing entries raise FileNotFoundError. Paths that would leave the
    storage root raise ValidationError without touching storage.
    """

    @abstractmethod
    async def exists(self, path: PurePosixPath) -> bool: ...

    @abstractmethod
    async def load(self, path: PurePosixPath) -> bytes:
        """Read the whole entry."""
        ...

    @abstractmethod
    async def open_stream(self, path: PurePosixPath) -> AsyncIterator[bytes]:
        """Stream the entry in chunks. Raises before returning if it is missing."""
        ...

    @abstractmethod
    async def save(self, path: PurePosixPath, content: bytes) -> None:
        """Replace the entry with content, all at once."""
        ...

    @abstractmethod
    async def delete(self, path: PurePosixPath) -> bool:
        """Remove the entry. Returns whether it existed."""
        ...
