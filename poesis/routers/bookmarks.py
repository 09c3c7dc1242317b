"""Bookmark routes — all require an authenticated session."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.db.session import get_db
from poesis.models.user import User
from poesis.schemas.poem import BookmarkOut, BookmarkRequest, PoemOut
from poesis.services import bookmark_service, poem_service
from poesis.services.access_service import evaluate_many
from poesis.services.auth_service import get_current_user

router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


@router.post("", response_model=BookmarkOut, status_code=201)
async def add_bookmark(
    body: BookmarkRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await poem_service.get_poem(db, body.poem_id):
        raise HTTPException(status_code=404, detail="Poem not found")
    return await bookmark_service.bookmark_poem(db, user.id, body.poem_id)


@router.get("", response_model=list[PoemOut])
async def list_bookmarks(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    poems = await bookmark_service.get_bookmarked_poems(db, user.id)
    return evaluate_many(poems, user)


@router.delete("/{poem_id}", status_code=204)
async def remove_bookmark(
    poem_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await bookmark_service.remove_bookmark(db, user.id, poem_id)
    return Response(status_code=204)
