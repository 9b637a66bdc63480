from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_service.domain.entities.membership import Membership


class MembershipWriter(Protocol):
    async def add_many(self, memberships: list[Membership]) -> None: ...

    async def remove(self, conversation_id: UUID, user_id: UUID) -> None: ...
