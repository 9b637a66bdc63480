from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.message import Message
from messaging_service.domain.entities.user import User
from messaging_service.domain.value_objects.enums import ContentType


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    content_type: ContentType = ContentType.TEXT
    body: str = ""


@dataclass(frozen=True, slots=True)
class AttachmentUpload:
    """A file received from the client, held in memory until stored."""

    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class DirectMessageResult:
    conversation_id: UUID
    message: Message
    created: bool


@dataclass(frozen=True, slots=True)
class MessagePage:
    conversation: Conversation
    messages: list[Message]
    next_cursor: UUID | None
    has_more: bool
    other_user: User | None = None
