import logging
import re

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.errors import AuthError, ValidationError
from models.user import User

logger = logging.getLogger("chatroom.security")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
MAX_NAME_LENGTH = 255


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(User.email == normalize_email(email)))
    return res.scalar_one_or_none()


async def register(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    password_confirmation: str | None = None,
) -> User:
    name = (name or "").strip()
    email = normalize_email(email)
    if not name:
        raise ValidationError("name required", field="name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError("name too long", field="name")
    if not EMAIL_RE.match(email):
        raise ValidationError("invalid email", field="email")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters", field="password")
    if password_confirmation is not None and password != password_confirmation:
        raise ValidationError("password confirmation does not match", field="password")
    if await get_user_by_email(db, email):
        raise ValidationError("email already registered", field="email")

    user = User(name=name, email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("email already registered", field="email")
    await db.refresh(user)
    logger.info("user registered id=%s", user.id)
    return user


async def authenticate(db: AsyncSession, *, email: str, password: str) -> User:
    email = normalize_email(email)
    if not EMAIL_RE.match(email):
        raise ValidationError("invalid email", field="email")
    if not password:
        raise ValidationError("password required", field="password")
    user = await get_user_by_email(db, email)
    # same error for unknown email and wrong password
    if user is None or not verify_password(password or "", user.password_hash):
        raise AuthError("invalid credentials")
    return user
