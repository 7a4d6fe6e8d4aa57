from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.config import settings
from chatroom.errors import NotFoundError
from chatroom.services import message_store
from chatroom.services.message_store import validate_body
from models.chat import Message
from models.user import User
from schemas.chat import AuthorResponse, MessageResponse


async def load_authors(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, AuthorResponse]:
    ids = set(user_ids)
    if not ids:
        return {}
    rows = await db.execute(select(User.id, User.name).where(User.id.in_(ids)))
    return {row.id: AuthorResponse(id=row.id, name=row.name) for row in rows}


def to_response(message: Message, author: AuthorResponse) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        user_id=message.user_id,
        body=message.body,
        created_at=message.created_at,
        user=author,
    )


async def get_recent_messages(db: AsyncSession, limit: int | None = None) -> list[MessageResponse]:
    """Return the newest ``limit`` messages in ascending id order, each with its author."""
    if limit is None:
        limit = settings.CHAT_HISTORY_LIMIT
    messages = await message_store.recent(db, limit)
    authors = await load_authors(db, (m.user_id for m in messages))
    resp = []
    for m in messages:
        author = authors.get(m.user_id)
        if author is None:
            raise NotFoundError(f"author {m.user_id} of message {m.id} not found", field="user_id")
        resp.append(to_response(m, author))
    return resp


async def store_message(db: AsyncSession, user_id: int, raw_text: str | None) -> MessageResponse:
    """Validate and persist a message for ``user_id``.

    Publishing is left to the caller so the write stays a single attempt that
    succeeds or fails on its own.
    """
    body = validate_body(raw_text)
    message = await message_store.append(db, user_id, body)
    authors = await load_authors(db, [message.user_id])
    return to_response(message, authors[message.user_id])
