"""Poem catalog routes — reads gated per caller, writes for members/admins."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.constants import RELATED_POEMS_LIMIT, RELATED_POEMS_MAX_LIMIT
from poesis.db.session import get_db
from poesis.models.poem import Poem
from poesis.models.user import User
from poesis.schemas.poem import MassAddRequest, MassAddResult, PoemCreate, PoemOut, PoemUpdate
from poesis.services import poem_service
from poesis.services.access_service import evaluate_access, evaluate_many
from poesis.services.auth_service import get_current_user, get_optional_user, require_admin
from poesis.services.poem_service import DuplicateTitleError

router = APIRouter(prefix="/api/poems", tags=["poems"])


async def _get_poem_or_404(db: AsyncSession, poem_id: int) -> Poem:
    poem = await poem_service.get_poem(db, poem_id)
    if not poem:
        raise HTTPException(status_code=404, detail="Poem not found")
    return poem


@router.get("", response_model=list[PoemOut])
async def list_poems(
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    poems = await poem_service.list_poems(db)
    return evaluate_many(poems, user)


@router.post("/mass-add", response_model=MassAddResult)
async def mass_add(
    body: MassAddRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await poem_service.mass_add_poems(db, body, created_by_id=admin.id)


@router.get("/title/{title}", response_model=PoemOut)
async def get_poem_by_title(
    title: str,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await poem_service.get_poem_by_title(db, title)
    if not poem:
        raise HTTPException(status_code=404, detail="Poem not found")
    return evaluate_access(poem, user)


@router.get("/{poem_id}", response_model=PoemOut)
async def get_poem(
    poem_id: int,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _get_poem_or_404(db, poem_id)
    return evaluate_access(poem, user)


@router.get("/{poem_id}/related", response_model=list[PoemOut])
async def related_poems(
    poem_id: int,
    limit: int = Query(RELATED_POEMS_LIMIT, ge=1, le=RELATED_POEMS_MAX_LIMIT),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    poem = await _get_poem_or_404(db, poem_id)
    related = await poem_service.get_related_poems(db, poem, limit)
    return evaluate_many(related, user)


@router.post("", response_model=PoemOut, status_code=201)
async def create_poem(
    body: PoemCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        poem = await poem_service.create_poem(db, body, created_by_id=user.id)
    except DuplicateTitleError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return PoemOut.model_validate(poem)


@router.put("/{poem_id}", response_model=PoemOut)
async def update_poem(
    poem_id: int,
    body: PoemUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    poem = await _get_poem_or_404(db, poem_id)
    try:
        poem = await poem_service.update_poem(db, poem, body)
    except DuplicateTitleError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return PoemOut.model_validate(poem)


@router.delete("/{poem_id}", status_code=204)
async def delete_poem(
    poem_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    poem = await _get_poem_or_404(db, poem_id)
    await poem_service.delete_poem(db, poem)
    return Response(status_code=204)
