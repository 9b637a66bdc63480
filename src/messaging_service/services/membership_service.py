from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_service.application.dto.conversation import GroupPatchDTO, MemberRemoval
from messaging_service.application.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
)
from messaging_service.application.policies.permissions import (
    assert_group,
    assert_group_admin,
)
from messaging_service.application.ports.storage import ObjectStorage
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import GroupConversation
from messaging_service.domain.entities.membership import Membership
from messaging_service.services.deletion_service import purge_conversation

logger = logging.getLogger(__name__)


async def add_members(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    member_ids: list[uuid.UUID],
    uow: UnitOfWork,
) -> int:
    """Add non-admin members to a group. Returns how many were new."""
    group = assert_group(await uow.conversations.get_by_id(conversation_id))
    assert_group_admin(caller_id, group, "Only admins can add members")

    existing = set(group.member_ids)
    new_ids = list(dict.fromkeys(m for m in member_ids if m not in existing))
    if not new_ids:
        return 0

    found = await uow.users.get_many(new_ids)
    missing = [str(m) for m in new_ids if m not in found]
    if missing:
        raise NotFoundError(f"Users not found: {', '.join(missing)}")

    now = datetime.now(timezone.utc)
    await uow.memberships_w.add_many(
        [
            Membership(conversation_id=group.id, user_id=m, is_admin=False, joined_at=now)
            for m in new_ids
        ]
    )
    await uow.commit()

    logger.info("Added %d members to group %s", len(new_ids), group.id)
    return len(new_ids)


async def remove_member(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    target_id: uuid.UUID,
    uow: UnitOfWork,
    storage: ObjectStorage,
) -> MemberRemoval:
    """Remove ``target_id`` from a group, or leave it when target is the caller.

    The creator can remove anyone; other admins can remove anyone but the
    creator; plain members can only leave. A group cannot outlive its creator's
    membership, so the creator leaving dissolves the group.
    """
    group = assert_group(await uow.conversations.get_by_id(conversation_id))

    if group.member(target_id) is None:
        raise NotFoundError("Member not found in group")

    is_self = target_id == caller_id
    if not is_self:
        is_creator = caller_id == group.creator_id
        if not group.is_admin(caller_id):
            raise ForbiddenError("You do not have permission to remove members")
        if not is_creator and target_id == group.creator_id:
            raise ForbiddenError("Admins cannot remove the group creator")

    if target_id == group.creator_id:
        await purge_conversation(group, uow, storage)
        await uow.commit()
        logger.info("Group %s dissolved: creator %s left", group.id, caller_id)
        return MemberRemoval(target_id=target_id, left=True, dissolved=True)

    await uow.memberships_w.remove(group.id, target_id)
    await uow.commit()

    logger.info("User %s removed from group %s by %s", target_id, group.id, caller_id)
    return MemberRemoval(target_id=target_id, left=is_self)


async def update_group(
    conversation_id: uuid.UUID,
    caller_id: uuid.UUID,
    patch: GroupPatchDTO,
    uow: UnitOfWork,
) -> GroupConversation:
    group = assert_group(await uow.conversations.get_by_id(conversation_id))
    assert_group_admin(caller_id, group, "Only admins can update group details")

    name = patch.name
    if name is not None:
        name = name.strip()
        if not name:
            raise BadRequestError("Group name cannot be empty")

    if name is None and patch.avatar is None:
        return group

    await uow.conversations_w.update_group(group.id, name=name, avatar=patch.avatar)
    await uow.commit()
    return assert_group(await uow.conversations.get_by_id(group.id))
