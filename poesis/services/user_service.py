"""User CRUD, profile projection and subscriber listing."""

import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.models.user import User, UserRole
from poesis.models.user_poem import UserPoem
from poesis.schemas.admin import SubscriberOut
from poesis.schemas.auth import UserOut
from poesis.services.subscription_service import (
    days_remaining,
    is_subscription_active,
    subscription_info,
)
from poesis.utils import now_utc

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    password_hash: str | None,
    role: UserRole = UserRole.USER,
) -> User:
    user = User(username=username, email=email, password_hash=password_hash, role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User created: id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    """Hard delete the user together with their bookmark rows."""
    await db.execute(delete(UserPoem).where(UserPoem.user_id == user.id))
    await db.delete(user)
    await db.commit()
    logger.info("User deleted: id=%s email=%s", user.id, user.email)


def to_user_out(user: User) -> UserOut:
    """Caller-facing user projection, never including the password hash."""
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        is_admin=user.is_admin,
        is_subscribed=bool(user.is_subscribed),
        subscription_plan=user.subscription_plan,
        subscribed_at=user.subscribed_at,
        subscription_end_date=user.subscription_end_date,
        created_at=user.created_at,
        subscription_info=subscription_info(user),
    )


async def list_subscribers(db: AsyncSession) -> list[SubscriberOut]:
    result = await db.execute(
        select(User)
        .where(or_(User.is_subscribed == True, User.subscription_end_date.is_not(None)))
        .order_by(User.subscription_end_date.desc(), User.id)
    )
    now = now_utc()
    return [
        SubscriberOut(
            id=user.id,
            username=user.username,
            email=user.email,
            subscription_type=user.subscription_plan,
            subscribed_at=user.subscribed_at,
            subscription_end_date=user.subscription_end_date,
            is_active=is_subscription_active(user, now),
            days_remaining=days_remaining(user, now),
        )
        for user in result.scalars().all()
    ]


async def user_counts(db: AsyncSession) -> dict:
    total = await db.scalar(select(func.count()).select_from(User)) or 0
    result = await db.execute(
        select(User).where(or_(User.is_subscribed == True, User.subscription_end_date.is_not(None)))
    )
    now = now_utc()
    active = sum(1 for user in result.scalars().all() if is_subscription_active(user, now))
    return {"total_users": total, "active_subscribers": active}
