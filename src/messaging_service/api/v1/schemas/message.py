from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from messaging_service.domain.value_objects.enums import ContentType


class InitiateMessageRequest(BaseModel):
    receiver_id: UUID = Field(alias="receiverId")
    message: str = Field(min_length=1)

    model_config = {"populate_by_name": True}


class SendMessageRequest(BaseModel):
    type: ContentType = ContentType.TEXT
    message: str = ""


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    receiver_id: UUID | None
    content_type: ContentType
    body: str
    attachment_key: str | None
    sent_at: datetime
    is_read: bool

    model_config = {"from_attributes": True}


class InitiateMessageResponse(BaseModel):
    conversation_id: UUID
    created: bool
    message: MessageResponse
