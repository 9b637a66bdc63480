from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.user import User
from messaging_service.domain.value_objects.enums import UserStatus
from messaging_service.infrastructure.db.mappers import user as mapper
from messaging_service.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, user_ids: list[UUID]) -> dict[UUID, User]:
        if not user_ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(set(user_ids)))
        result = await self._session.execute(stmt)
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def list_messageable(
        self,
        exclude_id: UUID,
        *,
        search: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[User], int]:
        conditions = [
            UserModel.id != exclude_id,
            UserModel.status == UserStatus.ACTIVE.value,
            UserModel.deleted_at.is_(None),
        ]
        if search:
            conditions.append(
                or_(
                    UserModel.name.icontains(search, autoescape=True),
                    UserModel.email.icontains(search, autoescape=True),
                )
            )

        total = await self._session.scalar(
            select(func.count()).select_from(UserModel).where(*conditions)
        )
        stmt = (
            select(UserModel)
            .where(*conditions)
            .order_by(UserModel.name.asc(), UserModel.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()], total or 0
