"""Storage adapters used to probe, read and create media files."""

from __future__ import annotations

import asyncio
import enum
import logging
from pathlib import Path, PurePosixPath
from typing import Protocol

logger = logging.getLogger("mdx_localize")


class WriteResult(enum.Enum):
    """Outcome of an exclusive file creation."""

    WRITTEN = "written"
    ALREADY_EXISTS = "already_exists"


class StorageAdapter(Protocol):
    """Minimal file access needed by the name resolver.

    Paths are POSIX-style and relative to the adapter's root.
    """

    async def exists(self, path: str) -> bool: ...

    async def read_binary(self, path: str) -> bytes: ...

    async def create_binary(self, path: str, data: bytes) -> WriteResult: ...


class FileSystemAdapter:
    """Storage adapter backed by a directory on the local filesystem."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def resolve(self, path: str) -> Path:
        """Map a relative storage path onto the filesystem, refusing escapes."""
        relative = PurePosixPath(path.replace("\\", "/"))
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Storage path must stay inside {self.root}: {path}")
        return self.root.joinpath(*relative.parts)

    async def exists(self, path: str) -> bool:
        target = self.resolve(path)
        return await asyncio.to_thread(target.exists)

    async def read_binary(self, path: str) -> bytes:
        target = self.resolve(path)
        return await asyncio.to_thread(target.read_bytes)

    async def create_binary(self, path: str, data: bytes) -> WriteResult:
        target = self.resolve(path)
        return await asyncio.to_thread(self._create_exclusive, target, data)

    @staticmethod
    def _create_exclusive(target: Path, data: bytes) -> WriteResult:
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            handle = target.open("xb")
        except FileExistsError:
            return WriteResult.ALREADY_EXISTS
        with handle:
            handle.write(data)
        logger.debug("Wrote %d bytes to %s", len(data), target)
        return WriteResult.WRITTEN
