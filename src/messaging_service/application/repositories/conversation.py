from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from messaging_service.domain.entities.conversation import (
    Conversation,
    DirectConversation,
    GroupConversation,
)


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_direct_between(
        self, user_a: UUID, user_b: UUID,
    ) -> DirectConversation | None:
        """Find the direct conversation for the unordered pair {user_a, user_b}."""
        ...

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        search: str | None = None,
        cursor: str | None = None,
        limit: int = 10,
    ) -> tuple[list[Conversation], str | None]:
        """Conversations the user takes part in, newest activity first.

        Returns the page and an opaque cursor positioned after its last row
        (None for an empty page).
        """
        ...


class ConversationWriter(Protocol):
    async def create_direct_if_not_exists(
        self, conversation: DirectConversation,
    ) -> tuple[DirectConversation, bool]:
        """Insert a direct conversation. If the pair already exists → return existing, False."""
        ...

    async def create_group(self, conversation: GroupConversation) -> GroupConversation:
        """Insert the group together with its initial memberships."""
        ...

    async def update_group(
        self,
        conversation_id: UUID,
        *,
        name: str | None = None,
        avatar: str | None = None,
    ) -> None: ...

    async def touch_last_activity(self, conversation_id: UUID, ts: datetime) -> None: ...

    async def delete(self, conversation_id: UUID) -> None: ...
