from __future__ import annotations

import logging
import uuid

from messaging_service.application.exceptions import ForbiddenError, NotFoundError
from messaging_service.application.ports.storage import ObjectStorage
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.message import Message
from messaging_service.services.message_service import delete_attachment_quietly

logger = logging.getLogger(__name__)


async def delete_message(
    message_id: uuid.UUID,
    caller_id: uuid.UUID,
    uow: UnitOfWork,
    storage: ObjectStorage,
) -> Message:
    message = await uow.messages.get_by_id(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    if message.sender_id != caller_id:
        raise ForbiddenError("You are not authorized to delete this message.")

    if message.has_attachment:
        await delete_attachment_quietly(message.attachment_key, storage)

    await uow.messages_w.delete(message.id)
    await uow.commit()
    return message


async def delete_conversation(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    uow: UnitOfWork,
    storage: ObjectStorage,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Message room not found")
    if not conversation.can_delete(caller_id):
        raise ForbiddenError("You are not authorized to delete this conversation.")

    await purge_conversation(conversation, uow, storage)
    await uow.commit()

    logger.info("Conversation %s deleted by %s", conversation.id, caller_id)
    return conversation


async def purge_conversation(
    conversation: Conversation,
    uow: UnitOfWork,
    storage: ObjectStorage,
) -> None:
    """Remove attachments, messages and the conversation itself. Caller commits."""
    for key in await uow.messages.attachment_keys(conversation.id):
        await delete_attachment_quietly(key, storage)

    removed = await uow.messages_w.delete_for_conversation(conversation.id)
    await uow.conversations_w.delete(conversation.id)
    logger.debug("Purged conversation %s (%d messages)", conversation.id, removed)
