from fastapi import APIRouter, Depends, Query

from harmony.core.deps import get_chat_service
from harmony.schemas.chat import ChatMessageCreate, ChatMessageEdit, ChatMessageResponse
from harmony.services.chat import ChatService

router = APIRouter(tags=["chat"])


@router.get("/households/{household_id}/chat", response_model=list[ChatMessageResponse])
async def list_messages(
    household_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: ChatService = Depends(get_chat_service),
):
    return await service.list_recent(household_id, limit=limit)


@router.post("/chat", response_model=ChatMessageResponse, status_code=201)
async def send_message(
    payload: ChatMessageCreate,
    service: ChatService = Depends(get_chat_service),
):
    return await service.send(payload)


@router.patch("/chat/{message_id}", response_model=ChatMessageResponse)
async def edit_message(
    message_id: str,
    payload: ChatMessageEdit,
    service: ChatService = Depends(get_chat_service),
):
    return await service.edit(message_id, payload.content)
