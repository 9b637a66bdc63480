"""Statement-level checks for the SQLAlchemy repositories, compiled for PostgreSQL."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import pytest
from sqlalchemy.dialects import postgresql

from messaging_service.domain.entities.conversation import DirectConversation
from messaging_service.infrastructure.db.models import ConversationModel
from messaging_service.infrastructure.db.repositories._cursor import encode_cursor
from messaging_service.infrastructure.db.repositories.conversation import (
    ConversationReaderRepo,
    ConversationWriterRepo,
)
from messaging_service.infrastructure.db.repositories.message import MessageReaderRepo


class _Result:
    def __init__(self, row: Any = None) -> None:
        self._row = row
        self.rowcount = 0

    def scalar_one_or_none(self) -> Any:
        return self._row

    def scalars(self) -> _Result:
        return self

    def all(self) -> list[Any]:
        return [self._row] if self._row is not None else []


class RecordingSession:
    """Stands in for AsyncSession: records statements, replays queued rows."""

    def __init__(self, *rows: Any) -> None:
        self.statements: list[Any] = []
        self._rows = list(rows)

    async def execute(self, stmt: Any) -> _Result:
        self.statements.append(stmt)
        return _Result(self._rows.pop(0) if self._rows else None)

    def sql(self, index: int = -1) -> str:
        return str(self.statements[index].compile(dialect=postgresql.dialect()))


def _direct_model(conv: DirectConversation) -> ConversationModel:
    return ConversationModel(
        id=conv.id,
        kind="direct",
        direct_user_low=conv.participant_a,
        direct_user_high=conv.participant_b,
        created_at=conv.created_at,
        last_activity_at=conv.last_activity_at,
    )


@pytest.mark.asyncio
async def test_touch_last_activity_never_moves_backwards():
    session = RecordingSession()

    await ConversationWriterRepo(session).touch_last_activity(
        uuid.uuid4(), datetime(2020, 1, 1, tzinfo=timezone.utc),
    )

    assert "greatest(conversations.last_activity_at" in session.sql()


@pytest.mark.asyncio
async def test_create_direct_inserts_on_pair_constraint():
    conv = DirectConversation.between(uuid.uuid4(), uuid.uuid4(), uuid.uuid4(), datetime.now(timezone.utc))
    session = RecordingSession(_direct_model(conv))

    stored, created = await ConversationWriterRepo(session).create_direct_if_not_exists(conv)

    assert created is True
    assert stored == conv
    sql = session.sql()
    assert "ON CONFLICT ON CONSTRAINT uq_conversations_direct_pair DO NOTHING" in sql
    assert "RETURNING" in sql


@pytest.mark.asyncio
async def test_create_direct_conflict_returns_existing_pair():
    winner = DirectConversation.between(uuid.uuid4(), uuid.uuid4(), uuid.uuid4(), datetime.now(timezone.utc))
    loser = DirectConversation.between(
        uuid.uuid4(), winner.participant_b, winner.participant_a, datetime.now(timezone.utc),
    )
    # insert yields no row, the follow-up lookup yields the winner
    session = RecordingSession(None, _direct_model(winner))

    stored, created = await ConversationWriterRepo(session).create_direct_if_not_exists(loser)

    assert created is False
    assert stored.id == winner.id
    assert len(session.statements) == 2
    assert "conversations.direct_user_low" in session.sql(1)


@pytest.mark.asyncio
async def test_sidebar_query_orders_and_searches_in_sql():
    session = RecordingSession()
    cursor = encode_cursor(datetime.now(timezone.utc), uuid.uuid4())

    page, next_cursor = await ConversationReaderRepo(session).list_for_user(
        uuid.uuid4(), search="bo", cursor=cursor, limit=5,
    )

    assert page == [] and next_cursor is None
    sql = session.sql()
    assert "ORDER BY conversations.last_activity_at DESC, conversations.id DESC" in sql
    assert "LEFT OUTER JOIN users" in sql
    assert "conversation_members" in sql


@pytest.mark.asyncio
async def test_latest_preview_uses_distinct_on():
    session = RecordingSession()

    await MessageReaderRepo(session).latest_for([uuid.uuid4()])

    assert "DISTINCT ON (messages.conversation_id)" in session.sql()
