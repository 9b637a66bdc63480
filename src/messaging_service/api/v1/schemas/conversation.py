from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from messaging_service.api.v1.schemas.message import MessageResponse
from messaging_service.api.v1.schemas.user import UserSummaryResponse
from messaging_service.application.dto.conversation import SidebarEntry, SidebarPage
from messaging_service.application.dto.message import MessagePage
from messaging_service.domain.entities.conversation import (
    Conversation,
    DirectConversation,
)
from messaging_service.domain.value_objects.enums import ConversationKind


class MemberResponse(BaseModel):
    user_id: UUID
    is_admin: bool
    joined_at: datetime

    model_config = {"from_attributes": True}


class ConversationResponse(BaseModel):
    id: UUID
    kind: ConversationKind
    name: str | None = None
    avatar: str | None = None
    creator_id: UUID | None = None
    participant_ids: list[UUID] = []
    members: list[MemberResponse] = []
    created_at: datetime
    last_activity_at: datetime

    @classmethod
    def from_entity(cls, conversation: Conversation) -> ConversationResponse:
        if isinstance(conversation, DirectConversation):
            return cls(
                id=conversation.id,
                kind=ConversationKind.DIRECT,
                participant_ids=[conversation.participant_a, conversation.participant_b],
                created_at=conversation.created_at,
                last_activity_at=conversation.last_activity_at,
            )
        return cls(
            id=conversation.id,
            kind=ConversationKind.GROUP,
            name=conversation.name,
            avatar=conversation.avatar,
            creator_id=conversation.creator_id,
            participant_ids=conversation.member_ids,
            members=[MemberResponse.model_validate(m) for m in conversation.members],
            created_at=conversation.created_at,
            last_activity_at=conversation.last_activity_at,
        )


class MessagePageResponse(BaseModel):
    conversation: ConversationResponse
    other_user: UserSummaryResponse | None
    messages: list[MessageResponse]
    next_cursor: UUID | None
    has_more: bool

    @classmethod
    def from_page(cls, page: MessagePage) -> MessagePageResponse:
        return cls(
            conversation=ConversationResponse.from_entity(page.conversation),
            other_user=(
                UserSummaryResponse.model_validate(page.other_user)
                if page.other_user
                else None
            ),
            messages=[MessageResponse.model_validate(m) for m in page.messages],
            next_cursor=page.next_cursor,
            has_more=page.has_more,
        )


class SidebarItemResponse(ConversationResponse):
    other_user: UserSummaryResponse | None = None
    last_message: MessageResponse | None = None
    unread_count: int = 0

    @classmethod
    def from_sidebar_entry(cls, entry: SidebarEntry) -> SidebarItemResponse:
        base = ConversationResponse.from_entity(entry.conversation)
        return cls(
            **base.model_dump(),
            other_user=(
                UserSummaryResponse.model_validate(entry.other_user)
                if entry.other_user
                else None
            ),
            last_message=(
                MessageResponse.model_validate(entry.last_message)
                if entry.last_message
                else None
            ),
            unread_count=entry.unread_count,
        )


class SidebarResponse(BaseModel):
    conversations: list[SidebarItemResponse]
    next_cursor: str | None
    has_more: bool

    @classmethod
    def from_page(cls, page: SidebarPage) -> SidebarResponse:
        return cls(
            conversations=[SidebarItemResponse.from_sidebar_entry(e) for e in page.conversations],
            next_cursor=page.next_cursor,
            has_more=page.has_more,
        )
