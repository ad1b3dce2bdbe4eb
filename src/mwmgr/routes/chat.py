"""
Chat Routes

Endpoints for the team chat room.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models.user import User
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

router = APIRouter(prefix="/chat", tags=["chat"])


class SendMessageRequest(BaseModel):
    text: str


@router.get("/messages")
async def list_messages(
    limit: Optional[int] = 100,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Most recent messages, oldest first"""
    messages = await engine.chat_service.list_messages(limit)
    return [m.to_dict() for m in messages]


@router.post("/messages", status_code=201)
async def send_message(
    request: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Post a message; @username mentions notify those users"""
    message = unwrap(await engine.chat_service.send_message(current_user, request.text))
    return message.to_dict()


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    unwrap(await engine.chat_service.delete_message(current_user, message_id))
    return {"success": True}
