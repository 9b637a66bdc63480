from __future__ import annotations

import pytest

from messaging_service.application.dto.conversation import SidebarQueryDTO
from messaging_service.application.exceptions import BadRequestError
from messaging_service.services import sidebar_service
from tests.conftest import FakeUoW, make_direct, make_group, make_message, make_user, minutes_ago


@pytest.mark.asyncio
async def test_sidebar_orders_by_last_activity(alice, bob, carol):
    uow = FakeUoW()
    uow.users.add(alice, bob, carol)
    old = make_direct(alice.id, bob.id, last_activity_at=minutes_ago(30))
    new = make_group(alice.id, [carol.id], name="Fresh", last_activity_at=minutes_ago(1))
    mid = make_direct(alice.id, carol.id, last_activity_at=minutes_ago(10))
    uow.conversations.add(old, new, mid)

    page = await sidebar_service.list_conversations(alice.id, SidebarQueryDTO(), uow)

    assert [e.conversation.id for e in page.conversations] == [new.id, mid.id, old.id]
    assert page.has_more is False


@pytest.mark.asyncio
async def test_sidebar_attaches_preview_unread_and_other_user(alice, bob):
    uow = FakeUoW()
    uow.users.add(alice, bob)
    conv = make_direct(alice.id, bob.id)
    uow.conversations.add(conv)
    uow.messages.add(
        make_message(conversation_id=conv.id, sender_id=bob.id, receiver_id=alice.id, body="1", sent_at=minutes_ago(3)),
        make_message(conversation_id=conv.id, sender_id=bob.id, receiver_id=alice.id, body="2", sent_at=minutes_ago(2)),
        make_message(conversation_id=conv.id, sender_id=alice.id, receiver_id=bob.id, body="3", sent_at=minutes_ago(1)),
    )

    page = await sidebar_service.list_conversations(alice.id, SidebarQueryDTO(), uow)

    (entry,) = page.conversations
    assert entry.last_message.body == "3"
    assert entry.unread_count == 2
    assert entry.other_user == bob


@pytest.mark.asyncio
async def test_sidebar_cursor_pages_without_overlap(alice):
    uow = FakeUoW()
    others = [make_user(f"U{i}") for i in range(5)]
    uow.users.add(alice, *others)
    convs = [make_direct(alice.id, u.id, last_activity_at=minutes_ago(i)) for i, u in enumerate(others)]
    uow.conversations.add(*convs)

    first = await sidebar_service.list_conversations(alice.id, SidebarQueryDTO(limit=2), uow)
    second = await sidebar_service.list_conversations(
        alice.id, SidebarQueryDTO(limit=2, cursor=first.next_cursor), uow,
    )
    third = await sidebar_service.list_conversations(
        alice.id, SidebarQueryDTO(limit=2, cursor=second.next_cursor), uow,
    )

    ids = [e.conversation.id for p in (first, second, third) for e in p.conversations]
    assert ids == [c.id for c in convs]
    assert first.has_more is True
    assert third.has_more is False


@pytest.mark.asyncio
async def test_sidebar_search_matches_group_name_and_other_user(alice, bob, carol):
    uow = FakeUoW()
    uow.users.add(alice, bob, carol)
    direct = make_direct(alice.id, bob.id)
    group = make_group(alice.id, [carol.id], name="Bobsled club")
    unrelated = make_direct(alice.id, carol.id)
    uow.conversations.add(direct, group, unrelated)

    page = await sidebar_service.list_conversations(alice.id, SidebarQueryDTO(search="bob"), uow)

    assert {e.conversation.id for e in page.conversations} == {direct.id, group.id}


@pytest.mark.asyncio
async def test_sidebar_excludes_conversations_of_others(alice, bob, carol):
    uow = FakeUoW()
    uow.conversations.add(make_direct(bob.id, carol.id))

    page = await sidebar_service.list_conversations(alice.id, SidebarQueryDTO(), uow)

    assert page.conversations == []
    assert page.next_cursor is None


@pytest.mark.asyncio
async def test_sidebar_invalid_cursor(alice):
    uow = FakeUoW()

    with pytest.raises(BadRequestError):
        await sidebar_service.list_conversations(
            alice.id, SidebarQueryDTO(cursor="%%%not-a-cursor"), uow,
        )


@pytest.mark.asyncio
async def test_messageable_users_excludes_caller_and_paginates(alice, bob, carol):
    uow = FakeUoW()
    uow.users.add(alice, bob, carol)

    page = await sidebar_service.list_messageable_users(alice.id, None, 1, 1, uow)

    assert [u.name for u in page.users] == ["Bob"]
    assert page.total == 2
    assert page.total_pages == 2


@pytest.mark.asyncio
async def test_messageable_users_search(alice, bob, carol):
    uow = FakeUoW()
    uow.users.add(alice, bob, carol)

    page = await sidebar_service.list_messageable_users(alice.id, "  car ", 1, 20, uow)

    assert [u.id for u in page.users] == [carol.id]
