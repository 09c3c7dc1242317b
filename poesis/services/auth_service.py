"""Password hashing, session cookies and the current-user dependencies."""

import asyncio

from fastapi import Depends, HTTPException, Request, Response
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.config import get_settings
from poesis.constants import COOKIE_NAME
from poesis.db.session import get_db
from poesis.models.user import User
from poesis.services.session_store import SessionStore, get_session_store

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def hash_password(password: str) -> str:
    return await asyncio.to_thread(pwd_context.hash, password)


async def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password; users created without a hash never match."""
    if not password_hash:
        return False
    return await asyncio.to_thread(pwd_context.verify, password, password_hash)


def set_session_cookie(response: Response, session_id: str) -> None:
    """Set the session id as an HTTP-only cookie on the response."""
    settings = get_settings()
    response.set_cookie(
        key=COOKIE_NAME,
        value=session_id,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=COOKIE_NAME, path="/")


async def _resolve_user(
    request: Request, db: AsyncSession, sessions: SessionStore
) -> tuple[User | None, str]:
    """Resolve cookie -> session -> user. Returns (user, reason-if-missing)."""
    session_id = request.cookies.get(COOKIE_NAME)
    if not session_id:
        return None, "Not authenticated"

    session = await sessions.get(session_id)
    if not session or not session.is_authenticated:
        return None, "Invalid or expired session"

    user = await db.get(User, session.user_id)
    if not user:
        # Session outlived its user (e.g. admin hard-delete)
        await sessions.destroy(session_id)
        return None, "User not found"
    return user, ""


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> User:
    """FastAPI dependency: resolve the session cookie to a User, or raise 401."""
    user, reason = await _resolve_user(request, db, sessions)
    if not user:
        raise HTTPException(status_code=401, detail=reason)
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> User | None:
    """Like get_current_user but returns None instead of raising 401."""
    user, _ = await _resolve_user(request, db, sessions)
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """FastAPI dependency: only users holding the admin role pass."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator role required")
    return user
