from __future__ import annotations

from enum import StrEnum
from uuid import UUID

from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import ForbiddenError, NotFoundError
from messaging_service.domain.entities.conversation import Conversation, GroupConversation


class MessagePermission(StrEnum):
    """Permission names granted by the identity subsystem."""

    INITIATE = "message.initiate"
    SEND = "message.send"
    READ = "message.read"
    DELETE = "message.delete"


def assert_permission(principal: Principal, permission: MessagePermission) -> None:
    if not principal.has_permission(permission):
        raise ForbiddenError(f"Missing permission: {permission}")


def assert_conversation_access(
    user_id: UUID,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or the user does not take part in it."""
    if conversation is None:
        raise NotFoundError("Message room not found")

    if not conversation.is_participant(user_id):
        raise ForbiddenError("You are not a participant in this conversation")

    return conversation


def assert_group(conversation: Conversation | None) -> GroupConversation:
    if not isinstance(conversation, GroupConversation):
        raise NotFoundError("Group not found")
    return conversation


def assert_group_admin(
    user_id: UUID,
    group: GroupConversation,
    detail: str = "Only admins can manage this group",
) -> None:
    if not group.is_admin(user_id):
        raise ForbiddenError(detail)
