import asyncio
import errno
import logging
import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path, PurePosixPath

from kilroy.domain.resource.port.storage import ResourceStoragePort
from kilroy.domain.shared.error import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LocalResourceStorage(ResourceStoragePort):
    """Local filesystem implementation of ResourceStoragePort."""

    def __init__(self, base_path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.chunk_size = chunk_size

    def _safe_path(self, path: PurePosixPath) -> Path:
        """Resolve path within base_path, rejecting path traversal attempts."""
        if path.is_absolute() or ".." in path.parts:
            raise ValidationError(f"Invalid resource path: {path}")
        target = self.base_path.joinpath(*path.parts)
        if not target.resolve().is_relative_to(self.base_path.resolve()):
            raise ValidationError(f"Invalid resource path: {path}")
        return target

    async def exists(self, path: PurePosixPath) -> bool:
        target = self._safe_path(path)
        return await asyncio.to_thread(target.is_file)

    async def load(self, path: PurePosixPath) -> bytes:
        target = self._safe_path(path)
        return await asyncio.to_thread(target.read_bytes)

    async def open_stream(self, path: PurePosixPath) -> AsyncIterator[bytes]:
        target = self._safe_path(path)
        # FileNotFoundError surfaces before any bytes are sent. The file is
        # opened lazily: a body that is never iterated holds no handle.
        if not await asyncio.to_thread(target.is_file):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(target))

        async def _stream() -> AsyncIterator[bytes]:
            f = await asyncio.to_thread(open, target, "rb")
            try:
                while chunk := await asyncio.to_thread(f.read, self.chunk_size):
                    yield chunk
            finally:
                f.close()

        return _stream()

    async def save(self, path: PurePosixPath, content: bytes) -> None:
        target = self._safe_path(path)
        await asyncio.to_thread(self._write_atomic, target, content)
        logger.debug("Saved %s (%d bytes)", path, len(content))

    @staticmethod
    def _write_atomic(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        # Readers see the old file or the new one, never a partial write.
        fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
        try:
            with open(fd, "wb") as f:
                f.write(content)
            Path(tmp_path).replace(target)
        except Exception:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    async def delete(self, path: PurePosixPath) -> bool:
        target = self._safe_path(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return False
        logger.debug("Deleted %s", path)
        return True
