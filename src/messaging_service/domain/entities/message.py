from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from messaging_service.domain.value_objects.enums import ContentType


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    receiver_id: UUID | None
    content_type: str
    body: str
    attachment_key: str | None
    sent_at: datetime
    is_read: bool = False

    @property
    def has_attachment(self) -> bool:
        return self.content_type == ContentType.IMAGE and bool(self.attachment_key)
