from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.membership import Membership
from messaging_service.infrastructure.db.models.membership import MembershipModel


class MembershipWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_many(self, memberships: list[Membership]) -> None:
        if not memberships:
            return
        stmt = (
            pg_insert(MembershipModel)
            .values(
                [
                    {
                        "conversation_id": m.conversation_id,
                        "user_id": m.user_id,
                        "is_admin": m.is_admin,
                        "joined_at": m.joined_at,
                    }
                    for m in memberships
                ]
            )
            .on_conflict_do_nothing(constraint="uq_conversation_member")
        )
        await self._session.execute(stmt)

    async def remove(self, conversation_id: UUID, user_id: UUID) -> None:
        stmt = delete(MembershipModel).where(
            MembershipModel.conversation_id == conversation_id,
            MembershipModel.user_id == user_id,
        )
        await self._session.execute(stmt)
