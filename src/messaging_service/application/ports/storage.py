from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from messaging_service.application.dto.message import AttachmentUpload


@dataclass(frozen=True, slots=True)
class StoredObject:
    key: str


class ObjectStorage(Protocol):
    async def upload(self, file: AttachmentUpload, namespace: str) -> StoredObject: ...

    async def delete(self, key: str) -> None: ...

    def close(self) -> None: ...
