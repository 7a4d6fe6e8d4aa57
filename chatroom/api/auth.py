from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.config import settings
from chatroom.database import get_db
from chatroom.security import create_access_token, require_user
from chatroom.services import auth_service
from models.user import User
from schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse

router = APIRouter()


def _issue_session(response: Response, user: User) -> TokenResponse:
    token = create_access_token(user.id)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.AUTH_TOKEN_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(payload: RegisterRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await auth_service.register(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        password_confirmation=payload.password_confirmation,
    )
    return _issue_session(response, user)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await auth_service.authenticate(db, email=payload.email, password=payload.password)
    return _issue_session(response, user)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(require_user)):
    return UserResponse.model_validate(user)
