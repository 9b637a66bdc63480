from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.message import Message
from messaging_service.domain.entities.user import User


@dataclass(frozen=True, slots=True)
class SidebarQueryDTO:
    search: str | None = None
    cursor: str | None = None
    limit: int = 10


@dataclass(frozen=True, slots=True)
class SidebarEntry:
    conversation: Conversation
    last_message: Message | None
    unread_count: int
    other_user: User | None = None


@dataclass(frozen=True, slots=True)
class SidebarPage:
    conversations: list[SidebarEntry]
    next_cursor: str | None
    has_more: bool


@dataclass(frozen=True, slots=True)
class UserDirectoryPage:
    users: list[User]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass(frozen=True, slots=True)
class GroupPatchDTO:
    name: str | None = None
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class MemberRemoval:
    target_id: UUID
    left: bool
    dissolved: bool = False

    @property
    def detail(self) -> str:
        if self.dissolved:
            return "You left the group. The group was dissolved."
        if self.left:
            return "You left the group."
        return "Member removed successfully."
