"""Auth routes — registration, login, logout, profile."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.constants import COOKIE_NAME
from poesis.db.session import get_db
from poesis.models.user import User
from poesis.schemas.auth import LoginRequest, MessageOut, RegisterRequest, UserOut
from poesis.services.auth_service import (
    clear_session_cookie,
    get_current_user,
    hash_password,
    set_session_cookie,
    verify_password,
)
from poesis.services.session_store import SessionStore, get_session_store
from poesis.services.user_service import (
    create_user,
    get_user_by_email,
    get_user_by_username,
    to_user_out,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    if await get_user_by_email(db, body.email):
        raise HTTPException(status_code=400, detail="User with this email already exists")
    if await get_user_by_username(db, body.username):
        raise HTTPException(status_code=400, detail="Username is already taken")

    user = await create_user(
        db,
        username=body.username,
        email=body.email,
        password_hash=await hash_password(body.password),
    )

    session_id = await sessions.create(user.id)
    set_session_cookie(response, session_id)
    return to_user_out(user)


@router.post("/login", response_model=UserOut)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    user = await get_user_by_email(db, body.email)
    if not user or not await verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    session_id = await sessions.create(user.id)
    set_session_cookie(response, session_id)
    logger.info("User %s logged in", user.id)
    return to_user_out(user)


@router.post("/logout", response_model=MessageOut)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
):
    """Destroy the server-side session and clear the cookie."""
    session_id = request.cookies.get(COOKIE_NAME)
    if session_id:
        await sessions.destroy(session_id)
    clear_session_cookie(response)
    return MessageOut(message="Logged out successfully")


@router.get("/users/profile", response_model=UserOut)
async def profile(user: User = Depends(get_current_user)):
    return to_user_out(user)
