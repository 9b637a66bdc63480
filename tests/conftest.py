"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from messaging_service.application.dto.message import AttachmentUpload
from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import StorageError
from messaging_service.application.policies.permissions import MessagePermission
from messaging_service.application.ports.storage import StoredObject
from messaging_service.domain.entities.conversation import (
    Conversation,
    DirectConversation,
    GroupConversation,
    normalize_pair,
)
from messaging_service.domain.entities.membership import Membership
from messaging_service.domain.entities.message import Message
from messaging_service.domain.entities.user import User
from messaging_service.domain.value_objects.enums import ContentType
from messaging_service.infrastructure.db.repositories._cursor import (
    decode_cursor,
    encode_cursor,
)

ALL_PERMISSIONS = frozenset(p.value for p in MessagePermission)


@pytest.fixture
def alice() -> User:
    return make_user("Alice")


@pytest.fixture
def bob() -> User:
    return make_user("Bob")


@pytest.fixture
def carol() -> User:
    return make_user("Carol")


@pytest.fixture
def user_principal(alice: User) -> Principal:
    return Principal(user_id=alice.id, permissions=ALL_PERMISSIONS)


def make_user(name: str = "User", *, user_id: UUID | None = None) -> User:
    return User(
        id=user_id or uuid.uuid4(),
        name=name,
        email=f"{name.lower()}@example.com",
        avatar=None,
    )


def make_direct(
    a: UUID,
    b: UUID,
    *,
    conversation_id: UUID | None = None,
    last_activity_at: datetime | None = None,
) -> DirectConversation:
    now = datetime.now(timezone.utc)
    conv = DirectConversation.between(conversation_id or uuid.uuid4(), a, b, now)
    if last_activity_at is not None:
        conv = replace(conv, last_activity_at=last_activity_at)
    return conv


def make_group(
    creator_id: UUID,
    member_ids: list[UUID] = (),
    *,
    admin_ids: list[UUID] = (),
    name: str = "Team",
    conversation_id: UUID | None = None,
    last_activity_at: datetime | None = None,
) -> GroupConversation:
    now = datetime.now(timezone.utc)
    cid = conversation_id or uuid.uuid4()
    members = [Membership(conversation_id=cid, user_id=creator_id, is_admin=True, joined_at=now)]
    for m in member_ids:
        members.append(
            Membership(conversation_id=cid, user_id=m, is_admin=m in admin_ids, joined_at=now)
        )
    return GroupConversation(
        id=cid,
        name=name,
        avatar=None,
        creator_id=creator_id,
        created_at=now,
        last_activity_at=last_activity_at or now,
        members=tuple(members),
    )


def make_message(
    *,
    conversation_id: UUID,
    sender_id: UUID,
    receiver_id: UUID | None = None,
    body: str = "hello",
    attachment_key: str | None = None,
    sent_at: datetime | None = None,
    is_read: bool = False,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content_type=ContentType.IMAGE if attachment_key else ContentType.TEXT,
        body="" if attachment_key else body,
        attachment_key=attachment_key,
        sent_at=sent_at or datetime.now(timezone.utc),
        is_read=is_read,
    )


def make_upload(name: str = "photo.png", data: bytes = b"\x89PNG") -> AttachmentUpload:
    return AttachmentUpload(filename=name, content_type="image/png", data=data)


def minutes_ago(n: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=n)


@dataclass
class FakeUserReader:
    _users: dict[UUID, User] = field(default_factory=dict)

    def add(self, *users: User) -> None:
        for u in users:
            self._users[u.id] = u

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    async def get_many(self, user_ids: list[UUID]) -> dict[UUID, User]:
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}

    async def list_messageable(
        self,
        exclude_id: UUID,
        *,
        search: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[User], int]:
        users = [u for u in self._users.values() if u.id != exclude_id]
        if search:
            needle = search.lower()
            users = [
                u for u in users
                if needle in u.name.lower() or needle in (u.email or "").lower()
            ]
        users.sort(key=lambda u: u.name)
        return users[offset:offset + limit], len(users)


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)
    _users: FakeUserReader = field(default_factory=FakeUserReader)

    def add(self, *conversations: Conversation) -> None:
        for c in conversations:
            self._store[c.id] = c

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_direct_between(self, user_a: UUID, user_b: UUID) -> DirectConversation | None:
        return self.find_pair(user_a, user_b)

    def find_pair(self, user_a: UUID, user_b: UUID) -> DirectConversation | None:
        low, high = normalize_pair(user_a, user_b)
        for c in self._store.values():
            if (
                isinstance(c, DirectConversation)
                and c.participant_a == low
                and c.participant_b == high
            ):
                return c
        return None

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        search: str | None = None,
        cursor: str | None = None,
        limit: int = 10,
    ) -> tuple[list[Conversation], str | None]:
        rows = [c for c in self._store.values() if c.is_participant(user_id)]
        if search:
            rows = [c for c in rows if self._matches(c, user_id, search.lower())]
        rows.sort(key=lambda c: (c.last_activity_at, c.id), reverse=True)
        if cursor:
            ts, cid = decode_cursor(cursor)
            rows = [c for c in rows if (c.last_activity_at, c.id) < (ts, cid)]
        page = rows[:limit]
        next_cursor = encode_cursor(page[-1].last_activity_at, page[-1].id) if page else None
        return page, next_cursor

    def _matches(self, conv: Conversation, user_id: UUID, needle: str) -> bool:
        if isinstance(conv, GroupConversation):
            return needle in conv.name.lower()
        other = self._users._users.get(conv.other_participant(user_id))
        return other is not None and needle in other.name.lower()


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    create_calls: int = 0

    async def create_direct_if_not_exists(
        self, conversation: DirectConversation,
    ) -> tuple[DirectConversation, bool]:
        self.create_calls += 1
        existing = self._reader.find_pair(conversation.participant_a, conversation.participant_b)
        if existing is not None:
            return existing, False
        self._reader._store[conversation.id] = conversation
        return conversation, True

    async def create_group(self, conversation: GroupConversation) -> GroupConversation:
        self._reader._store[conversation.id] = conversation
        return conversation

    async def update_group(
        self,
        conversation_id: UUID,
        *,
        name: str | None = None,
        avatar: str | None = None,
    ) -> None:
        group = self._reader._store[conversation_id]
        changes = {}
        if name is not None:
            changes["name"] = name
        if avatar is not None:
            changes["avatar"] = avatar
        self._reader._store[conversation_id] = replace(group, **changes)

    async def touch_last_activity(self, conversation_id: UUID, ts: datetime) -> None:
        conv = self._reader._store.get(conversation_id)
        if conv is not None and ts > conv.last_activity_at:
            self._reader._store[conversation_id] = replace(conv, last_activity_at=ts)

    async def delete(self, conversation_id: UUID) -> None:
        self._reader._store.pop(conversation_id, None)


@dataclass
class FakeMembershipWriter:
    _conversations: FakeConversationReader

    async def add_many(self, memberships: list[Membership]) -> None:
        for m in memberships:
            group = self._conversations._store[m.conversation_id]
            if group.member(m.user_id) is None:
                self._conversations._store[group.id] = replace(
                    group, members=(*group.members, m),
                )

    async def remove(self, conversation_id: UUID, user_id: UUID) -> None:
        group = self._conversations._store[conversation_id]
        self._conversations._store[conversation_id] = replace(
            group, members=tuple(m for m in group.members if m.user_id != user_id),
        )


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    def add(self, *messages: Message) -> None:
        self._messages.extend(messages)

    def for_conversation(self, conversation_id: UUID) -> list[Message]:
        return [m for m in self._messages if m.conversation_id == conversation_id]

    async def get_by_id(self, message_id: UUID) -> Message | None:
        for m in self._messages:
            if m.id == message_id:
                return m
        return None

    async def list_page(
        self,
        conversation_id: UUID,
        *,
        after: Message | None = None,
        limit: int = 20,
    ) -> list[Message]:
        rows = sorted(
            self.for_conversation(conversation_id),
            key=lambda m: (m.sent_at, m.id),
            reverse=True,
        )
        if after is not None:
            rows = [m for m in rows if (m.sent_at, m.id) < (after.sent_at, after.id)]
        return rows[:limit]

    async def latest_for(self, conversation_ids: list[UUID]) -> dict[UUID, Message]:
        latest: dict[UUID, Message] = {}
        for m in self._messages:
            if m.conversation_id not in conversation_ids:
                continue
            current = latest.get(m.conversation_id)
            if current is None or (m.sent_at, m.id) > (current.sent_at, current.id):
                latest[m.conversation_id] = m
        return latest

    async def count_unread(
        self, conversation_ids: list[UUID], receiver_id: UUID,
    ) -> dict[UUID, int]:
        counts: dict[UUID, int] = {}
        for m in self._messages:
            if m.conversation_id in conversation_ids and m.receiver_id == receiver_id and not m.is_read:
                counts[m.conversation_id] = counts.get(m.conversation_id, 0) + 1
        return counts

    async def attachment_keys(self, conversation_id: UUID) -> list[str]:
        return [m.attachment_key for m in self.for_conversation(conversation_id) if m.attachment_key]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message) -> Message:
        self._reader._messages.append(message)
        return message

    async def mark_read(self, conversation_id: UUID, receiver_id: UUID) -> int:
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if m.conversation_id == conversation_id and m.receiver_id == receiver_id and not m.is_read:
                self._reader._messages[i] = replace(m, is_read=True)
                updated += 1
        return updated

    async def delete(self, message_id: UUID) -> None:
        self._reader._messages = [m for m in self._reader._messages if m.id != message_id]

    async def delete_for_conversation(self, conversation_id: UUID) -> int:
        before = len(self._reader._messages)
        self._reader._messages = [
            m for m in self._reader._messages if m.conversation_id != conversation_id
        ]
        return before - len(self._reader._messages)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    conversations: FakeConversationReader | None = None
    conversations_w: FakeConversationWriter | None = None
    memberships_w: FakeMembershipWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False
    commits: int = 0

    def __post_init__(self) -> None:
        if self.conversations is None:
            self.conversations = FakeConversationReader(_users=self.users)
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.memberships_w is None:
            self.memberships_w = FakeMembershipWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True
        self.commits += 1

    async def rollback(self) -> None:
        pass


@dataclass
class FakeStorage:
    """Records uploads and deletes. ``fail_upload_after`` makes the N+1th upload fail."""
    uploaded: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    fail_upload_after: int | None = None
    fail_delete: bool = False

    async def upload(self, file: AttachmentUpload, namespace: str) -> StoredObject:
        if self.fail_upload_after is not None and len(self.uploaded) >= self.fail_upload_after:
            raise StorageError("Failed to upload file")
        key = f"{namespace}/{uuid.uuid4().hex}-{file.filename}"
        self.uploaded.append(key)
        return StoredObject(key=key)

    async def delete(self, key: str) -> None:
        if self.fail_delete:
            raise StorageError(f"Failed to delete {key}")
        self.deleted.append(key)

    def close(self) -> None:
        pass
