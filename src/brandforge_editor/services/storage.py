"""Blob store implementations keyed by opaque asset ids."""

from pathlib import Path
from typing import Iterable, Protocol

import aiofiles
import aiofiles.os
from loguru import logger

from brandforge_editor.core.exceptions import StorageError


class BlobStore(Protocol):
    """Content store mapping an asset id to binary media data."""

    async def put(self, asset_id: str, data: bytes) -> None: ...

    async def get(self, asset_id: str) -> bytes | None: ...

    async def delete_many(self, asset_ids: Iterable[str]) -> None: ...


class MemoryBlobStore:
    """Dict-backed blob store."""

    def __init__(self):
        self._blobs: dict[str, bytes] = {}

    async def put(self, asset_id: str, data: bytes) -> None:
        self._blobs[asset_id] = bytes(data)

    async def get(self, asset_id: str) -> bytes | None:
        return self._blobs.get(asset_id)

    async def delete_many(self, asset_ids: Iterable[str]) -> None:
        for asset_id in asset_ids:
            self._blobs.pop(asset_id, None)

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)


class FileBlobStore:
    """Blob store keeping one file per asset under a root directory."""

    def __init__(self, root: Path):
        """
        Initialize file blob store.

        Args:
            root: Directory holding the blobs, created if missing
        """
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, asset_id: str) -> Path:
        if not asset_id or asset_id in (".", "..") or "/" in asset_id or "\\" in asset_id:
            raise StorageError(f"Invalid asset id: {asset_id!r}")
        return self.root / asset_id

    async def put(self, asset_id: str, data: bytes) -> None:
        path = self._path(asset_id)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(f"Failed to store {asset_id}: {e}") from e
        logger.debug(f"Stored blob {asset_id} ({len(data)} bytes)")

    async def get(self, asset_id: str) -> bytes | None:
        path = self._path(asset_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {asset_id}: {e}") from e

    async def delete_many(self, asset_ids: Iterable[str]) -> None:
        """Delete blobs in order. Stops at the first failure."""
        for asset_id in asset_ids:
            path = self._path(asset_id)
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Failed to delete {asset_id}: {e}") from e
            logger.debug(f"Deleted blob {asset_id}")
