from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from messaging_service.api.deps import (
    CanDelete,
    CanInitiate,
    CanRead,
    CanSend,
    SettingsDep,
    StorageDep,
    UoWDep,
)
from messaging_service.api.v1.schemas.common import AckResponse
from messaging_service.api.v1.schemas.conversation import (
    ConversationResponse,
    MessagePageResponse,
    SidebarResponse,
)
from messaging_service.api.v1.schemas.message import (
    InitiateMessageRequest,
    InitiateMessageResponse,
    MessageResponse,
    SendMessageRequest,
)
from messaging_service.api.v1.schemas.user import (
    ContactResponse,
    PaginationMeta,
    UserDirectoryResponse,
)
from messaging_service.application.dto.conversation import SidebarQueryDTO
from messaging_service.application.dto.message import AttachmentUpload, SendMessageDTO
from messaging_service.application.exceptions import BadRequestError
from messaging_service.services import (
    conversation_service,
    deletion_service,
    message_service,
    read_state_service,
    sidebar_service,
)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/initiate", response_model=InitiateMessageResponse, status_code=201)
async def initiate_message(
    body: InitiateMessageRequest,
    principal: CanInitiate,
    uow: UoWDep,
) -> InitiateMessageResponse:
    result = await conversation_service.initiate_direct(
        principal.user_id, body.receiver_id, body.message, uow,
    )
    return InitiateMessageResponse(
        conversation_id=result.conversation_id,
        created=result.created,
        message=MessageResponse.model_validate(result.message),
    )


@router.post(
    "/send/{room_id}",
    response_model=MessageResponse | list[MessageResponse],
    status_code=201,
)
async def send_message(
    room_id: UUID,
    request: Request,
    principal: CanSend,
    uow: UoWDep,
    storage: StorageDep,
    settings: SettingsDep,
) -> MessageResponse | list[MessageResponse]:
    payload, attachments = await _read_send_request(
        request,
        max_files=settings.MAX_ATTACHMENTS_PER_MESSAGE,
        max_file_bytes=settings.MAX_ATTACHMENT_BYTES,
    )
    result = await message_service.send_message(
        room_id,
        principal.user_id,
        payload,
        attachments,
        uow,
        storage,
        max_attachments=settings.MAX_ATTACHMENTS_PER_MESSAGE,
        max_attachment_bytes=settings.MAX_ATTACHMENT_BYTES,
    )
    if isinstance(result, list):
        return [MessageResponse.model_validate(m) for m in result]
    return MessageResponse.model_validate(result)


async def _read_send_request(
    request: Request,
    *,
    max_files: int,
    max_file_bytes: int,
) -> tuple[SendMessageDTO, list[AttachmentUpload]]:
    """Accept either a JSON text message or a multipart form with ``files``.

    File limits are enforced on the parsed form before any upload body is
    read into memory.
    """
    content_type = request.headers.get("content-type", "")
    attachments: list[AttachmentUpload] = []
    try:
        if content_type.startswith("application/json"):
            body = SendMessageRequest.model_validate(await request.json())
        else:
            form = await request.form()
            fields = {k: form[k] for k in ("type", "message") if isinstance(form.get(k), str)}
            body = SendMessageRequest.model_validate(fields)
            files = [f for f in form.getlist("files") if isinstance(f, UploadFile)]
            _check_file_limits(files, max_files, max_file_bytes)
            for item in files:
                attachments.append(
                    AttachmentUpload(
                        filename=item.filename or "upload",
                        content_type=item.content_type,
                        data=await item.read(),
                    )
                )
    except (PydanticValidationError, ValueError) as exc:
        raise BadRequestError(str(exc)) from exc
    text = body.message if body.message.strip() else ""
    return SendMessageDTO(content_type=body.type, body=text), attachments


def _check_file_limits(files: list[UploadFile], max_files: int, max_file_bytes: int) -> None:
    if len(files) > max_files:
        raise BadRequestError(f"At most {max_files} media files are allowed.")
    for item in files:
        if item.size is not None and item.size > max_file_bytes:
            raise BadRequestError(f"File {item.filename} exceeds the size limit.")


@router.get("/sidebar", response_model=SidebarResponse)
async def get_sidebar(
    principal: CanRead,
    uow: UoWDep,
    search: str | None = Query(None),
    cursor: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
) -> SidebarResponse:
    page = await sidebar_service.list_conversations(
        principal.user_id,
        SidebarQueryDTO(search=search, cursor=cursor, limit=limit),
        uow,
    )
    return SidebarResponse.from_page(page)


@router.get("/users", response_model=UserDirectoryResponse)
async def get_available_users(
    principal: CanRead,
    uow: UoWDep,
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> UserDirectoryResponse:
    result = await sidebar_service.list_messageable_users(
        principal.user_id, search, page, limit, uow,
    )
    return UserDirectoryResponse(
        users=[ContactResponse.model_validate(u) for u in result.users],
        pagination=PaginationMeta(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.patch("/{room_id}/read", response_model=AckResponse)
async def mark_as_read(
    room_id: UUID,
    principal: CanRead,
    uow: UoWDep,
) -> AckResponse:
    await read_state_service.mark_read(room_id, principal.user_id, uow)
    return AckResponse(detail="Messages marked as read successfully.")


@router.get("/{room_id}", response_model=MessagePageResponse)
async def get_messages(
    room_id: UUID,
    principal: CanRead,
    uow: UoWDep,
    cursor: UUID | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> MessagePageResponse:
    page = await message_service.list_messages(
        room_id, principal.user_id, cursor, limit, uow,
    )
    return MessagePageResponse.from_page(page)


@router.delete("/message/{message_id}", response_model=MessageResponse)
async def remove_message(
    message_id: UUID,
    principal: CanDelete,
    uow: UoWDep,
    storage: StorageDep,
) -> MessageResponse:
    msg = await deletion_service.delete_message(message_id, principal.user_id, uow, storage)
    return MessageResponse.model_validate(msg)


@router.delete("/{room_id}", response_model=ConversationResponse)
async def delete_room(
    room_id: UUID,
    principal: CanDelete,
    uow: UoWDep,
    storage: StorageDep,
) -> ConversationResponse:
    conv = await deletion_service.delete_conversation(room_id, principal.user_id, uow, storage)
    return ConversationResponse.from_entity(conv)
