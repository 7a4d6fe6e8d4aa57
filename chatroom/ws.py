import logging
from typing import Dict, Set
from fastapi import WebSocket

logger = logging.getLogger("chatroom.ws")


class ConnectionManager:
    def __init__(self):
        self.active: Dict[str, Set[WebSocket]] = {}

    async def connect(self, channel: str, websocket: WebSocket):
        await websocket.accept()
        self.active.setdefault(channel, set()).add(websocket)
        logger.info("subscriber joined channel=%s subscribers=%s", channel, self.count(channel))

    def disconnect(self, channel: str, websocket: WebSocket):
        sockets = self.active.get(channel)
        if not sockets or websocket not in sockets:
            return
        sockets.discard(websocket)
        logger.info("subscriber left channel=%s subscribers=%s", channel, self.count(channel))

    def count(self, channel: str) -> int:
        return len(self.active.get(channel, ()))

    async def broadcast(self, channel: str, message: dict) -> int:
        delivered = 0
        for ws in list(self.active.get(channel, set())):
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception:
                logger.warning("dropping dead subscriber on channel=%s", channel, exc_info=True)
                self.disconnect(channel, ws)
        return delivered


chat_manager = ConnectionManager()
