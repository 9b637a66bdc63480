from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_service.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_page(
        self,
        conversation_id: UUID,
        *,
        after: Message | None = None,
        limit: int = 20,
    ) -> list[Message]:
        """Newest-first page. ``after`` is the last message of the previous page."""
        ...

    async def latest_for(self, conversation_ids: list[UUID]) -> dict[UUID, Message]: ...

    async def count_unread(
        self, conversation_ids: list[UUID], receiver_id: UUID,
    ) -> dict[UUID, int]: ...

    async def attachment_keys(self, conversation_id: UUID) -> list[str]: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def mark_read(self, conversation_id: UUID, receiver_id: UUID) -> int:
        """Flag unread messages addressed to receiver as read. Returns rows changed."""
        ...

    async def delete(self, message_id: UUID) -> None: ...

    async def delete_for_conversation(self, conversation_id: UUID) -> int: ...
