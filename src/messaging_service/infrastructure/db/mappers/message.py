from __future__ import annotations

from messaging_service.domain.entities.message import Message
from messaging_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        content_type=model.content_type,
        body=model.body,
        attachment_key=model.attachment_key,
        sent_at=model.sent_at,
        is_read=model.is_read,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        content_type=entity.content_type,
        body=entity.body,
        attachment_key=entity.attachment_key,
        sent_at=entity.sent_at,
        is_read=entity.is_read,
    )
