from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_service.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def get_many(self, user_ids: list[UUID]) -> dict[UUID, User]: ...

    async def list_messageable(
        self,
        exclude_id: UUID,
        *,
        search: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[User], int]:
        """Active users other than ``exclude_id`` ordered by name, plus the total count."""
        ...
