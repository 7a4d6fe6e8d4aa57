import logging

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatroom import database
from chatroom.api import auth as auth_api
from chatroom.api import chat as chat_api
from chatroom.config import settings
from chatroom.errors import ChatError
from chatroom.logging_config import setup_logging
from chatroom.security import resolve_user
from chatroom.ws import chat_manager

logger = logging.getLogger("chatroom.ws")

app = FastAPI(title="Chatroom")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_api.router, prefix="/api/auth", tags=["auth"])
app.include_router(chat_api.router, prefix="/api/chat", tags=["chat"])


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError):
    content = {"detail": exc.message}
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=content)


@app.on_event("startup")
async def startup():
    setup_logging()
    await database.create_tables()


@app.get("/health")
async def health():
    return {"status": "ok", "subscribers": chat_manager.count(settings.CHAT_CHANNEL)}


@app.websocket("/ws/chat")
async def websocket_chat(websocket: WebSocket):
    # read-only channel: anonymous subscribers are allowed, the token only labels the log line
    async with database.AsyncSessionLocal() as session:
        user = await resolve_user(websocket, session)
    channel = settings.CHAT_CHANNEL
    await chat_manager.connect(channel, websocket)
    logger.info("websocket open channel=%s user=%s", channel, user.id if user else "-")
    try:
        await websocket.send_json({
            "event": "subscribed",
            "channel": channel,
            "subscribers": chat_manager.count(channel),
        })
        while True:
            # inbound text or binary frames are heartbeats only
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        chat_manager.disconnect(channel, websocket)
