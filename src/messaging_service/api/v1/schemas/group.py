from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field


class CreateGroupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    member_ids: list[UUID] = Field(alias="memberIds", min_length=1)

    model_config = {"populate_by_name": True}


class AddMembersRequest(BaseModel):
    member_ids: list[UUID] = Field(alias="memberIds", min_length=1)

    model_config = {"populate_by_name": True}


class UpdateGroupRequest(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    avatar: str | None = Field(default=None, max_length=1024)
