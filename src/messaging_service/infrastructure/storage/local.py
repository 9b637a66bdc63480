"""Filesystem object storage for local development."""
from __future__ import annotations

import asyncio
from pathlib import Path

from messaging_service.application.dto.message import AttachmentUpload
from messaging_service.application.exceptions import StorageError
from messaging_service.application.ports.storage import StoredObject
from messaging_service.infrastructure.storage.s3 import build_object_key


class LocalObjectStorage:
    """Implements application.ports.storage.ObjectStorage on a directory tree."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise StorageError(f"Invalid storage key: {key}")
        return path

    async def upload(self, file: AttachmentUpload, namespace: str) -> StoredObject:
        key = build_object_key(namespace, file.filename)
        path = self._path_for(key)
        try:
            await asyncio.to_thread(_write, path, file.data)
        except OSError as exc:
            raise StorageError("Failed to upload file") from exc
        return StoredObject(key=key)

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}") from exc

    def close(self) -> None:
        pass


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
