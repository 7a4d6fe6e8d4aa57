import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.config import settings
from chatroom.database import get_db
from models.user import User

JWT_SECRET = settings.AUTH_JWT_SECRET or "chatroom-dev-secret"
JWT_ALGORITHM = settings.AUTH_JWT_ALGORITHM or "HS256"
logger = logging.getLogger("chatroom.security")


def _mask_user_id(user_id) -> str:
    value = str(user_id or "").strip()
    if not value:
        return "-"
    if len(value) <= 8:
        return value
    return f"{value[:4]}...{value[-4:]}"


def _audit_auth_failure(
    request: Request | None,
    reason: str,
    *,
    claimed_user_id=None,
    token_present: bool | None = None,
) -> None:
    if not request:
        logger.warning("AUTH_DENY reason=%s", reason)
        return
    path = getattr(getattr(request, "url", None), "path", "-")
    method = getattr(request, "method", "-")
    client = getattr(request, "client", None)
    ip = getattr(client, "host", "-") if client else "-"
    if token_present is None:
        token_present = bool(extract_auth_token(request))
    logger.warning(
        "AUTH_DENY reason=%s method=%s path=%s ip=%s claimed=%s token_present=%s",
        reason,
        method,
        path,
        ip,
        _mask_user_id(claimed_user_id),
        int(bool(token_present)),
    )


def create_access_token(user_id: int, *, expires_minutes: int | None = None) -> str:
    if expires_minutes is None:
        expires_minutes = settings.AUTH_TOKEN_TTL_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode({"sub": str(user_id), "exp": expire}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> int | None:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None


def extract_auth_token(request) -> str | None:
    """Find the bearer token on a request or websocket handshake.

    Looked up in order: ``Authorization: Bearer``, the session cookie, then
    the ``token`` query parameter (browsers cannot set headers on websockets).
    """
    if not request:
        return None
    headers = getattr(request, "headers", None)
    if headers:
        raw = (headers.get("authorization") or "").strip()
        if raw.lower().startswith("bearer "):
            token = raw.split(" ", 1)[1].strip()
            if token:
                return token
    cookies = getattr(request, "cookies", None)
    if cookies:
        token = (cookies.get(settings.SESSION_COOKIE_NAME) or "").strip()
        if token:
            return token
    query = getattr(request, "query_params", None)
    if query:
        token = (query.get("token") or "").strip()
        if token:
            return token
    return None


async def resolve_user(request, db: AsyncSession) -> User | None:
    token = extract_auth_token(request)
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        _audit_auth_failure(request, "invalid_token", token_present=True)
        return None
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        _audit_auth_failure(request, "unknown_user", claimed_user_id=user_id, token_present=True)
    return user


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User | None:
    return await resolve_user(request, db)


async def require_user(request: Request, user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        if not extract_auth_token(request):
            _audit_auth_failure(request, "missing_identity", token_present=False)
        raise HTTPException(status_code=401, detail="authentication required")
    return user
