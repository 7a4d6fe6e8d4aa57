import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.config import settings
from chatroom.errors import NotFoundError, ValidationError
from models.chat import Message
from models.user import User

logger = logging.getLogger("chatroom.chat")


def validate_body(raw_text: str | None) -> str:
    body = (raw_text or "").strip()
    if not body:
        raise ValidationError("message required", field="message")
    if len(body) > settings.MESSAGE_MAX_LENGTH:
        raise ValidationError("message too long", field="message")
    return body


async def append(db: AsyncSession, user_id: int, body: str) -> Message:
    """Insert one message and return the stored row with id and created_at set.

    Ids come from the database's autoincrement, so concurrent appends never
    share an id and an id is never reused.
    """
    body = validate_body(body)
    author = (await db.execute(select(User.id).where(User.id == user_id))).scalar_one_or_none()
    if author is None:
        raise NotFoundError("user not found", field="user_id")
    message = Message(user_id=user_id, body=body)
    db.add(message)
    try:
        await db.commit()
    except IntegrityError:
        # the author row vanished between the lookup and the insert
        await db.rollback()
        raise NotFoundError("user not found", field="user_id")
    await db.refresh(message)
    logger.info("message stored id=%s user=%s length=%s", message.id, user_id, len(body))
    return message


async def recent(db: AsyncSession, limit: int = 50) -> list[Message]:
    if limit < 1:
        return []
    rows = await db.execute(select(Message).order_by(Message.id.desc()).limit(limit))
    messages = list(rows.scalars().all())
    messages.reverse()
    return messages
