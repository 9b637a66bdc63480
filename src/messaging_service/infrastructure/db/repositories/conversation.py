from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.conversation import (
    Conversation,
    DirectConversation,
    GroupConversation,
    normalize_pair,
)
from messaging_service.domain.value_objects.enums import ConversationKind
from messaging_service.infrastructure.db.mappers import conversation as mapper
from messaging_service.infrastructure.db.models.conversation import ConversationModel
from messaging_service.infrastructure.db.models.membership import MembershipModel
from messaging_service.infrastructure.db.models.user import UserModel
from messaging_service.infrastructure.db.repositories._cursor import decode_cursor, encode_cursor


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def get_direct_between(
        self, user_a: UUID, user_b: UUID,
    ) -> DirectConversation | None:
        low, high = normalize_pair(user_a, user_b)
        stmt = select(ConversationModel).where(
            ConversationModel.kind == ConversationKind.DIRECT.value,
            ConversationModel.direct_user_low == low,
            ConversationModel.direct_user_high == high,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.direct_to_entity(model) if model else None

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        search: str | None = None,
        cursor: str | None = None,
        limit: int = 10,
    ) -> tuple[list[Conversation], str | None]:
        member_of = select(MembershipModel.conversation_id).where(
            MembershipModel.user_id == user_id
        )
        stmt = (
            select(ConversationModel)
            .where(
                or_(
                    ConversationModel.direct_user_low == user_id,
                    ConversationModel.direct_user_high == user_id,
                    ConversationModel.id.in_(member_of),
                )
            )
            .order_by(ConversationModel.last_activity_at.desc(), ConversationModel.id.desc())
            .limit(limit)
        )
        if search:
            other_id = case(
                (ConversationModel.direct_user_low == user_id, ConversationModel.direct_user_high),
                else_=ConversationModel.direct_user_low,
            )
            stmt = stmt.outerjoin(
                UserModel,
                and_(
                    ConversationModel.kind == ConversationKind.DIRECT.value,
                    UserModel.id == other_id,
                ),
            ).where(
                or_(
                    and_(
                        ConversationModel.kind == ConversationKind.GROUP.value,
                        ConversationModel.name.icontains(search, autoescape=True),
                    ),
                    UserModel.name.icontains(search, autoescape=True),
                )
            )
        if cursor:
            ts, cid = decode_cursor(cursor)
            stmt = stmt.where(
                (ConversationModel.last_activity_at < ts)
                | (
                    (ConversationModel.last_activity_at == ts)
                    & (ConversationModel.id < cid)
                )
            )
        result = await self._session.execute(stmt)
        models = result.scalars().all()
        next_cursor = (
            encode_cursor(models[-1].last_activity_at, models[-1].id) if models else None
        )
        return [mapper.model_to_entity(m) for m in models], next_cursor


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_direct_if_not_exists(
        self, conversation: DirectConversation,
    ) -> tuple[DirectConversation, bool]:
        """Insert the pair's conversation. Returns (conversation, created_flag)."""
        stmt = (
            pg_insert(ConversationModel)
            .values(
                id=conversation.id,
                kind=ConversationKind.DIRECT.value,
                direct_user_low=conversation.participant_a,
                direct_user_high=conversation.participant_b,
                created_at=conversation.created_at,
                last_activity_at=conversation.last_activity_at,
            )
            .on_conflict_do_nothing(constraint="uq_conversations_direct_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.direct_to_entity(row), True

        # Conflict: a concurrent request created the pair first
        existing = await ConversationReaderRepo(self._session).get_direct_between(
            conversation.participant_a, conversation.participant_b,
        )
        assert existing is not None
        return existing, False

    async def create_group(self, conversation: GroupConversation) -> GroupConversation:
        model = mapper.group_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)  # type: ignore[return-value]

    async def update_group(
        self,
        conversation_id: UUID,
        *,
        name: str | None = None,
        avatar: str | None = None,
    ) -> None:
        values: dict[str, str] = {}
        if name is not None:
            values["name"] = name
        if avatar is not None:
            values["avatar"] = avatar
        if not values:
            return
        stmt = (
            update(ConversationModel)
            .where(
                ConversationModel.id == conversation_id,
                ConversationModel.kind == ConversationKind.GROUP.value,
            )
            .values(**values)
        )
        await self._session.execute(stmt)

    async def touch_last_activity(self, conversation_id: UUID, ts: datetime) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(last_activity_at=func.greatest(ConversationModel.last_activity_at, ts))
        )
        await self._session.execute(stmt)

    async def delete(self, conversation_id: UUID) -> None:
        stmt = delete(ConversationModel).where(ConversationModel.id == conversation_id)
        await self._session.execute(stmt)
