from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.config import settings
from chatroom.database import get_db
from chatroom.security import require_user
from chatroom.services import chat_service
from chatroom.services.broadcast import BroadcastPublisher, get_publisher
from models.user import User
from schemas.chat import ChatHistoryResponse, MessageCreate, SendMessageResponse

router = APIRouter()

@router.get("", response_model=ChatHistoryResponse)
async def get_chat(
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db)
):
    messages = await chat_service.get_recent_messages(db, settings.CHAT_HISTORY_LIMIT)
    return ChatHistoryResponse(
        messages=messages,
        last_message_id=messages[-1].id if messages else None,
        channel=settings.CHAT_CHANNEL,
    )

@router.post("/send", response_model=SendMessageResponse)
async def send_message(
    payload: MessageCreate,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    publisher: BroadcastPublisher = Depends(get_publisher),
):
    message = await chat_service.store_message(db, user.id, payload.message)
    # stored before publishing; a failed broadcast never fails the request
    await publisher.publish(message.user, message)
    return SendMessageResponse(status="Message sent!", message=message)
