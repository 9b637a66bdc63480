from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from messaging_service.api.deps import CanDelete, CanInitiate, CanSend, StorageDep, UoWDep
from messaging_service.api.v1.schemas.common import AckResponse
from messaging_service.api.v1.schemas.conversation import ConversationResponse
from messaging_service.api.v1.schemas.group import (
    AddMembersRequest,
    CreateGroupRequest,
    UpdateGroupRequest,
)
from messaging_service.application.dto.conversation import GroupPatchDTO
from messaging_service.services import conversation_service, membership_service

router = APIRouter(prefix="/messages", tags=["groups"])


@router.post("/group", response_model=ConversationResponse, status_code=201)
async def create_group(
    body: CreateGroupRequest,
    principal: CanInitiate,
    uow: UoWDep,
) -> ConversationResponse:
    group = await conversation_service.create_group(
        principal.user_id, body.name, body.member_ids, uow,
    )
    return ConversationResponse.from_entity(group)


@router.post("/{room_id}/members", response_model=AckResponse)
async def add_members(
    room_id: UUID,
    body: AddMembersRequest,
    principal: CanSend,
    uow: UoWDep,
) -> AckResponse:
    added = await membership_service.add_members(
        room_id, principal.user_id, body.member_ids, uow,
    )
    if added == 0:
        return AckResponse(detail="No new members to add.")
    return AckResponse(detail="Members added successfully.")


@router.delete("/{room_id}/members/{user_id}", response_model=AckResponse)
async def remove_member(
    room_id: UUID,
    user_id: UUID,
    principal: CanDelete,
    uow: UoWDep,
    storage: StorageDep,
) -> AckResponse:
    outcome = await membership_service.remove_member(
        room_id, principal.user_id, user_id, uow, storage,
    )
    return AckResponse(detail=outcome.detail)


@router.patch("/{room_id}/group", response_model=ConversationResponse)
async def update_group(
    room_id: UUID,
    body: UpdateGroupRequest,
    principal: CanSend,
    uow: UoWDep,
) -> ConversationResponse:
    group = await membership_service.update_group(
        room_id,
        principal.user_id,
        GroupPatchDTO(name=body.name, avatar=body.avatar),
        uow,
    )
    return ConversationResponse.from_entity(group)
