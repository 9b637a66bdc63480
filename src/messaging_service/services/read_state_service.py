from __future__ import annotations

import logging
import uuid

from messaging_service.application.policies.permissions import assert_conversation_access
from messaging_service.application.uow import UnitOfWork

logger = logging.getLogger(__name__)


async def mark_read(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    uow: UnitOfWork,
) -> int:
    """Mark every unread message addressed to the caller as read.

    Group messages carry no receiver, so for groups this is an authorized
    no-op: group read-state is not tracked.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(caller_id, conversation)

    updated = await uow.messages_w.mark_read(conversation_id, caller_id)
    await uow.commit()

    logger.info(
        "Messages in room %s marked as read for user %s (%d updated)",
        conversation_id, caller_id, updated,
    )
    return updated
