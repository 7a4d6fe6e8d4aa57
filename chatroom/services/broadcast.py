import logging

from chatroom.config import settings
from chatroom.errors import TransportError
from chatroom.ws import ConnectionManager, chat_manager
from schemas.chat import AuthorResponse, MessageResponse

logger = logging.getLogger("chatroom.broadcast")

EVENT_MESSAGE_SENT = "message.sent"


def build_event(channel: str, author: AuthorResponse, message: MessageResponse) -> dict:
    return {
        "event": EVENT_MESSAGE_SENT,
        "channel": channel,
        "user": {"id": author.id, "name": author.name},
        "message": {
            "id": message.id,
            "user_id": message.user_id,
            "body": message.body,
            "created_at": message.created_at.isoformat() if message.created_at else None,
        },
    }


class BroadcastPublisher:
    """Fire-and-forget fan-out of stored messages to one fixed channel.

    Delivery is at most once: subscribers that are not connected when an
    event goes out miss it and backfill from the chat history on reconnect.
    """

    def __init__(self, manager: ConnectionManager, channel: str):
        self.manager = manager
        self.channel = channel

    async def _send(self, event: dict) -> int:
        try:
            return await self.manager.broadcast(self.channel, event)
        except Exception as exc:
            raise TransportError(f"broadcast to {self.channel} failed: {exc}") from exc

    async def publish(self, author: AuthorResponse, message: MessageResponse) -> None:
        event = build_event(self.channel, author, message)
        try:
            await self._send(event)
        except TransportError as exc:
            logger.warning("BROADCAST_FAIL channel=%s message_id=%s error=%s", self.channel, message.id, exc.message)


publisher = BroadcastPublisher(chat_manager, settings.CHAT_CHANNEL)


def get_publisher() -> BroadcastPublisher:
    return publisher
