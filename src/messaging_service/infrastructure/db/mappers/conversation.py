from __future__ import annotations

from messaging_service.domain.entities.conversation import (
    Conversation,
    DirectConversation,
    GroupConversation,
)
from messaging_service.domain.entities.membership import Membership
from messaging_service.domain.value_objects.enums import ConversationKind
from messaging_service.infrastructure.db.models.conversation import ConversationModel
from messaging_service.infrastructure.db.models.membership import MembershipModel


def membership_to_entity(model: MembershipModel) -> Membership:
    return Membership(
        conversation_id=model.conversation_id,
        user_id=model.user_id,
        is_admin=model.is_admin,
        joined_at=model.joined_at,
    )


def membership_to_model(entity: Membership) -> MembershipModel:
    return MembershipModel(
        conversation_id=entity.conversation_id,
        user_id=entity.user_id,
        is_admin=entity.is_admin,
        joined_at=entity.joined_at,
    )


def model_to_entity(model: ConversationModel) -> Conversation:
    if model.kind == ConversationKind.DIRECT:
        return direct_to_entity(model)
    return GroupConversation(
        id=model.id,
        name=model.name or "",
        avatar=model.avatar,
        creator_id=model.creator_id,
        created_at=model.created_at,
        last_activity_at=model.last_activity_at,
        members=tuple(
            membership_to_entity(m)
            for m in sorted(model.memberships, key=lambda m: m.joined_at)
        ),
    )


def direct_to_entity(model: ConversationModel) -> DirectConversation:
    return DirectConversation(
        id=model.id,
        participant_a=model.direct_user_low,
        participant_b=model.direct_user_high,
        created_at=model.created_at,
        last_activity_at=model.last_activity_at,
    )


def group_to_model(entity: GroupConversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        kind=ConversationKind.GROUP.value,
        name=entity.name,
        avatar=entity.avatar,
        creator_id=entity.creator_id,
        created_at=entity.created_at,
        last_activity_at=entity.last_activity_at,
        memberships=[membership_to_model(m) for m in entity.members],
    )
