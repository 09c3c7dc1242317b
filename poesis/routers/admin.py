"""Admin back-office routes — role-gated."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.db.session import get_db
from poesis.models.user import User
from poesis.schemas.admin import CatalogStats, DeleteUserRequest, SubscriberOut
from poesis.schemas.auth import MessageOut
from poesis.services.auth_service import require_admin
from poesis.services.poem_service import catalog_stats
from poesis.services.user_service import (
    delete_user,
    get_user_by_email,
    list_subscribers,
    user_counts,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=CatalogStats)
async def stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return CatalogStats(**await catalog_stats(db), **await user_counts(db))


@router.get("/subscribers", response_model=list[SubscriberOut])
async def subscribers(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await list_subscribers(db)


@router.delete("/users", response_model=MessageOut)
async def remove_user(
    body: DeleteUserRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_by_email(db, body.email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="Administrators cannot delete their own account")

    await delete_user(db, user)
    return MessageOut(message=f"User {body.email} deleted")
