from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel


class UserSummaryResponse(BaseModel):
    id: UUID
    name: str
    avatar: str | None

    model_config = {"from_attributes": True}


class ContactResponse(UserSummaryResponse):
    email: str | None


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class UserDirectoryResponse(BaseModel):
    users: list[ContactResponse]
    pagination: PaginationMeta
