from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from messaging_service.application.dto.message import (
    AttachmentUpload,
    MessagePage,
    SendMessageDTO,
)
from messaging_service.application.exceptions import BadRequestError, StorageError
from messaging_service.application.policies.permissions import assert_conversation_access
from messaging_service.application.ports.storage import ObjectStorage
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import DirectConversation
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.enums import ContentType

logger = logging.getLogger(__name__)

ATTACHMENT_NAMESPACE = "messages"


async def send_message(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    payload: SendMessageDTO,
    attachments: list[AttachmentUpload],
    uow: UnitOfWork,
    storage: ObjectStorage,
    *,
    max_attachments: int = 5,
    max_attachment_bytes: int | None = None,
) -> Message | list[Message]:
    """Append a message to a conversation.

    A non-empty TEXT payload produces one message. Anything else is treated as
    a media send: every attachment is uploaded and stored as its own IMAGE
    message, and the list of created messages is returned.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    conversation = assert_conversation_access(caller_id, conversation)

    receiver_id = (
        conversation.other_participant(caller_id)
        if isinstance(conversation, DirectConversation)
        else None
    )
    now = datetime.now(timezone.utc)

    if payload.content_type == ContentType.TEXT and payload.body:
        msg = await uow.messages_w.create(
            Message(
                id=uuid.uuid4(),
                conversation_id=conversation.id,
                sender_id=caller_id,
                receiver_id=receiver_id,
                content_type=ContentType.TEXT,
                body=payload.body,
                attachment_key=None,
                sent_at=now,
            )
        )
        await uow.conversations_w.touch_last_activity(conversation.id, now)
        await uow.commit()
        return msg

    if not attachments:
        raise BadRequestError("At least one media file is required.")
    if len(attachments) > max_attachments:
        raise BadRequestError(f"At most {max_attachments} media files are allowed.")
    if max_attachment_bytes is not None:
        for file in attachments:
            if file.size > max_attachment_bytes:
                raise BadRequestError(f"File {file.filename} exceeds the size limit.")

    keys = await _upload_all(attachments, storage)

    # One microsecond apart so listing order matches upload order
    created: list[Message] = []
    for i, key in enumerate(keys):
        msg = await uow.messages_w.create(
            Message(
                id=uuid.uuid4(),
                conversation_id=conversation.id,
                sender_id=caller_id,
                receiver_id=receiver_id,
                content_type=ContentType.IMAGE,
                body="",
                attachment_key=key,
                sent_at=now + timedelta(microseconds=i),
            )
        )
        created.append(msg)

    await uow.conversations_w.touch_last_activity(conversation.id, created[-1].sent_at)
    await uow.commit()
    return created


async def _upload_all(
    attachments: list[AttachmentUpload],
    storage: ObjectStorage,
) -> list[str]:
    """Upload every file or none: on failure, already stored blobs are removed."""
    keys: list[str] = []
    try:
        for file in attachments:
            stored = await storage.upload(file, ATTACHMENT_NAMESPACE)
            keys.append(stored.key)
    except StorageError:
        for key in keys:
            await delete_attachment_quietly(key, storage)
        raise
    return keys


async def delete_attachment_quietly(key: str, storage: ObjectStorage) -> bool:
    """Best-effort blob removal. Failures are logged, never raised."""
    try:
        await storage.delete(key)
    except StorageError:
        logger.warning("Failed to delete attachment: %s", key, exc_info=True)
        return False
    return True


async def list_messages(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    cursor: uuid.UUID | None,
    limit: int,
    uow: UnitOfWork,
) -> MessagePage:
    conversation = await uow.conversations.get_by_id(conversation_id)
    conversation = assert_conversation_access(caller_id, conversation)

    anchor: Message | None = None
    if cursor is not None:
        anchor = await uow.messages.get_by_id(cursor)
        if anchor is None or anchor.conversation_id != conversation.id:
            raise BadRequestError("Invalid cursor")

    messages = await uow.messages.list_page(conversation.id, after=anchor, limit=limit)

    other_user = None
    if isinstance(conversation, DirectConversation):
        other_user = await uow.users.get_by_id(conversation.other_participant(caller_id))

    return MessagePage(
        conversation=conversation,
        messages=messages,
        next_cursor=messages[-1].id if messages else None,
        has_more=len(messages) == limit,
        other_user=other_user,
    )
