from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_service.application.dto.message import DirectMessageResult
from messaging_service.application.exceptions import BadRequestError, NotFoundError
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import (
    DirectConversation,
    GroupConversation,
)
from messaging_service.domain.entities.membership import Membership
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.enums import ContentType

logger = logging.getLogger(__name__)


async def initiate_direct(
    caller_id: uuid.UUID,
    receiver_id: uuid.UUID,
    text: str,
    uow: UnitOfWork,
) -> DirectMessageResult:
    """Send ``text`` to ``receiver_id``, creating the direct conversation on first contact.

    Both directions of a pair resolve to the same conversation. When two
    callers race to create it, the storage constraint on the pair lets exactly
    one insert win; the other appends its message to the winner.
    """
    if receiver_id == caller_id:
        raise BadRequestError("You cannot message yourself")
    if not text or not text.strip():
        raise BadRequestError("Message is required")

    receiver = await uow.users.get_by_id(receiver_id)
    if receiver is None:
        raise NotFoundError("Receiver not found")

    now = datetime.now(timezone.utc)
    conversation = await uow.conversations.get_direct_between(caller_id, receiver_id)
    created = False
    if conversation is None:
        conversation, created = await uow.conversations_w.create_direct_if_not_exists(
            DirectConversation.between(uuid.uuid4(), caller_id, receiver_id, now),
        )

    msg = await uow.messages_w.create(
        Message(
            id=uuid.uuid4(),
            conversation_id=conversation.id,
            sender_id=caller_id,
            receiver_id=receiver_id,
            content_type=ContentType.TEXT,
            body=text,
            attachment_key=None,
            sent_at=now,
        )
    )
    await uow.conversations_w.touch_last_activity(conversation.id, msg.sent_at)
    await uow.commit()

    if created:
        logger.info("Direct conversation %s created by %s", conversation.id, caller_id)
    return DirectMessageResult(conversation_id=conversation.id, message=msg, created=created)


async def create_group(
    caller_id: uuid.UUID,
    name: str,
    member_ids: list[uuid.UUID],
    uow: UnitOfWork,
) -> GroupConversation:
    """Create a group owned by the caller, who becomes its first admin."""
    if not name or not name.strip():
        raise BadRequestError("Group name is required")

    unique_ids = list(dict.fromkeys(m for m in member_ids if m != caller_id))
    if unique_ids:
        found = await uow.users.get_many(unique_ids)
        missing = [str(m) for m in unique_ids if m not in found]
        if missing:
            raise NotFoundError(f"Users not found: {', '.join(missing)}")

    now = datetime.now(timezone.utc)
    conversation_id = uuid.uuid4()
    members = (
        Membership(conversation_id=conversation_id, user_id=caller_id, is_admin=True, joined_at=now),
        *(
            Membership(conversation_id=conversation_id, user_id=m, is_admin=False, joined_at=now)
            for m in unique_ids
        ),
    )
    group = await uow.conversations_w.create_group(
        GroupConversation(
            id=conversation_id,
            name=name.strip(),
            avatar=None,
            creator_id=caller_id,
            created_at=now,
            last_activity_at=now,
            members=members,
        )
    )
    await uow.commit()

    logger.info("Group %s created by %s with %d members", group.id, caller_id, len(members))
    return group
