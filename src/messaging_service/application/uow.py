from __future__ import annotations

from typing import Protocol

from messaging_service.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from messaging_service.application.repositories.membership import MembershipWriter
from messaging_service.application.repositories.message import MessageReader, MessageWriter
from messaging_service.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    conversations: ConversationReader
    conversations_w: ConversationWriter
    memberships_w: MembershipWriter
    messages: MessageReader
    messages_w: MessageWriter
    users: UserReader

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
