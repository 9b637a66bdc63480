from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.message import Message
from messaging_service.infrastructure.db.mappers import message as mapper
from messaging_service.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    async def list_page(
        self,
        conversation_id: UUID,
        *,
        after: Message | None = None,
        limit: int = 20,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.sent_at.desc(), MessageModel.id.desc())
            .limit(limit)
        )
        if after is not None:
            stmt = stmt.where(
                (MessageModel.sent_at < after.sent_at)
                | ((MessageModel.sent_at == after.sent_at) & (MessageModel.id < after.id))
            )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def latest_for(self, conversation_ids: list[UUID]) -> dict[UUID, Message]:
        if not conversation_ids:
            return {}
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id.in_(conversation_ids))
            .distinct(MessageModel.conversation_id)
            .order_by(
                MessageModel.conversation_id,
                MessageModel.sent_at.desc(),
                MessageModel.id.desc(),
            )
        )
        result = await self._session.execute(stmt)
        return {m.conversation_id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def count_unread(
        self, conversation_ids: list[UUID], receiver_id: UUID,
    ) -> dict[UUID, int]:
        if not conversation_ids:
            return {}
        stmt = (
            select(MessageModel.conversation_id, func.count())
            .where(
                MessageModel.conversation_id.in_(conversation_ids),
                MessageModel.receiver_id == receiver_id,
                MessageModel.is_read.is_(False),
            )
            .group_by(MessageModel.conversation_id)
        )
        result = await self._session.execute(stmt)
        return {cid: count for cid, count in result.all()}

    async def attachment_keys(self, conversation_id: UUID) -> list[str]:
        stmt = select(MessageModel.attachment_key).where(
            MessageModel.conversation_id == conversation_id,
            MessageModel.attachment_key.is_not(None),
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(self, conversation_id: UUID, receiver_id: UUID) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def delete(self, message_id: UUID) -> None:
        stmt = delete(MessageModel).where(MessageModel.id == message_id)
        await self._session.execute(stmt)

    async def delete_for_conversation(self, conversation_id: UUID) -> int:
        stmt = (
            delete(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
