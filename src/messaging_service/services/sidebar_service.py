"""Read model for the conversation sidebar and the contact directory."""
from __future__ import annotations

import uuid

from messaging_service.application.dto.conversation import (
    SidebarEntry,
    SidebarPage,
    SidebarQueryDTO,
    UserDirectoryPage,
)
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import DirectConversation


async def list_conversations(
    caller_id: uuid.UUID,
    query: SidebarQueryDTO,
    uow: UnitOfWork,
) -> SidebarPage:
    """Page through the caller's conversations, most recent activity first.

    Ordering comes from storage (``last_activity_at`` desc, id desc); previews,
    unread counts and counterpart users are attached afterwards without
    reordering the page.
    """
    search = query.search.strip() if query.search else None
    conversations, next_cursor = await uow.conversations.list_for_user(
        caller_id, search=search or None, cursor=query.cursor, limit=query.limit,
    )
    ids = [c.id for c in conversations]

    latest = await uow.messages.latest_for(ids) if ids else {}
    unread = await uow.messages.count_unread(ids, caller_id) if ids else {}

    other_ids = [
        c.other_participant(caller_id)
        for c in conversations
        if isinstance(c, DirectConversation)
    ]
    others = await uow.users.get_many(other_ids) if other_ids else {}

    entries = [
        SidebarEntry(
            conversation=c,
            last_message=latest.get(c.id),
            unread_count=unread.get(c.id, 0),
            other_user=(
                others.get(c.other_participant(caller_id))
                if isinstance(c, DirectConversation)
                else None
            ),
        )
        for c in conversations
    ]

    return SidebarPage(
        conversations=entries,
        next_cursor=next_cursor,
        has_more=len(conversations) == query.limit,
    )


async def list_messageable_users(
    caller_id: uuid.UUID,
    search: str | None,
    page: int,
    limit: int,
    uow: UnitOfWork,
) -> UserDirectoryPage:
    search = search.strip() if search else None
    users, total = await uow.users.list_messageable(
        caller_id, search=search or None, offset=(page - 1) * limit, limit=limit,
    )
    return UserDirectoryPage(users=users, page=page, limit=limit, total=total)
