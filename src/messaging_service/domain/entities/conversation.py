"""Conversation variants.

A conversation is either a ``DirectConversation`` between exactly two users or
a ``GroupConversation`` with dynamic membership. Code that needs to know who
may read or write a conversation asks the variant via ``is_participant``
instead of branching on the kind.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias
from uuid import UUID

from messaging_service.domain.entities.membership import Membership
from messaging_service.domain.value_objects.enums import ConversationKind


def normalize_pair(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    """Return the unordered pair ``{a, b}`` in its canonical storage order."""
    return (a, b) if a < b else (b, a)


@dataclass(frozen=True, slots=True)
class DirectConversation:
    id: UUID
    participant_a: UUID
    participant_b: UUID
    created_at: datetime
    last_activity_at: datetime

    kind = ConversationKind.DIRECT

    @classmethod
    def between(
        cls, conversation_id: UUID, a: UUID, b: UUID, ts: datetime,
    ) -> DirectConversation:
        low, high = normalize_pair(a, b)
        return cls(
            id=conversation_id,
            participant_a=low,
            participant_b=high,
            created_at=ts,
            last_activity_at=ts,
        )

    def is_participant(self, user_id: UUID) -> bool:
        return user_id in (self.participant_a, self.participant_b)

    def can_delete(self, user_id: UUID) -> bool:
        return self.is_participant(user_id)

    def other_participant(self, user_id: UUID) -> UUID:
        return self.participant_b if user_id == self.participant_a else self.participant_a


@dataclass(frozen=True, slots=True)
class GroupConversation:
    id: UUID
    name: str
    avatar: str | None
    creator_id: UUID
    created_at: datetime
    last_activity_at: datetime
    members: tuple[Membership, ...] = field(default_factory=tuple)

    kind = ConversationKind.GROUP

    def member(self, user_id: UUID) -> Membership | None:
        for m in self.members:
            if m.user_id == user_id:
                return m
        return None

    def is_participant(self, user_id: UUID) -> bool:
        return self.member(user_id) is not None

    def is_admin(self, user_id: UUID) -> bool:
        """Creator or a member carrying the admin flag."""
        if user_id == self.creator_id:
            return True
        m = self.member(user_id)
        return m is not None and m.is_admin

    def can_delete(self, user_id: UUID) -> bool:
        return self.is_admin(user_id)

    @property
    def member_ids(self) -> list[UUID]:
        return [m.user_id for m in self.members]


Conversation: TypeAlias = DirectConversation | GroupConversation
