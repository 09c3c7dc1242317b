"""Poem catalog CRUD, related poems and bulk import."""

import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.models.poem import Poem
from poesis.models.user_poem import UserPoem
from poesis.schemas.poem import (
    MassAddFailure,
    MassAddRequest,
    MassAddResult,
    PoemCreate,
    PoemUpdate,
)

logger = logging.getLogger(__name__)


class DuplicateTitleError(ValueError):
    def __init__(self, title: str):
        super().__init__(f"A poem titled '{title}' already exists")
        self.title = title


async def list_poems(db: AsyncSession) -> list[Poem]:
    result = await db.execute(select(Poem).order_by(Poem.created_at.desc(), Poem.id.desc()))
    return list(result.scalars().all())


async def get_poem(db: AsyncSession, poem_id: int) -> Poem | None:
    return await db.get(Poem, poem_id)


async def get_poem_by_title(db: AsyncSession, title: str) -> Poem | None:
    result = await db.execute(
        select(Poem).where(func.lower(Poem.title) == title.strip().lower()).limit(1)
    )
    return result.scalar_one_or_none()


async def _ensure_title_available(
    db: AsyncSession, title: str, exclude_id: int | None = None
) -> None:
    """Explicit pre-check; the unique constraint alone would surface as a 500."""
    existing = await get_poem_by_title(db, title)
    if existing and existing.id != exclude_id:
        raise DuplicateTitleError(title)


async def create_poem(db: AsyncSession, data: PoemCreate, created_by_id: int | None) -> Poem:
    await _ensure_title_available(db, data.title)
    poem = Poem(**data.model_dump(), created_by_id=created_by_id)
    db.add(poem)
    await db.commit()
    await db.refresh(poem)
    logger.info("Poem created: id=%s title=%r", poem.id, poem.title)
    return poem


async def update_poem(db: AsyncSession, poem: Poem, updates: PoemUpdate) -> Poem:
    update_data = updates.model_dump(exclude_unset=True)
    if update_data.get("title"):
        await _ensure_title_available(db, update_data["title"], exclude_id=poem.id)

    for key, value in update_data.items():
        setattr(poem, key, value)

    await db.commit()
    await db.refresh(poem)
    return poem


async def delete_poem(db: AsyncSession, poem: Poem) -> None:
    await db.execute(delete(UserPoem).where(UserPoem.poem_id == poem.id))
    await db.delete(poem)
    await db.commit()
    logger.info("Poem deleted: id=%s", poem.id)


async def get_related_poems(db: AsyncSession, poem: Poem, limit: int) -> list[Poem]:
    """Poems by the same author or in the same category."""
    match = [Poem.author == poem.author]
    if poem.category:
        match.append(Poem.category == poem.category)

    result = await db.execute(
        select(Poem)
        .where(Poem.id != poem.id, or_(*match))
        .order_by(Poem.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def mass_add_poems(
    db: AsyncSession, request: MassAddRequest, created_by_id: int | None
) -> MassAddResult:
    """Add each content entry as its own poem sharing the batch metadata.

    Failures are collected per item; the rest of the batch still goes in.
    """
    meta = request.metadata
    numbered = len(request.poems) > 1
    successful: list[int] = []
    failed: list[MassAddFailure] = []

    for index, content in enumerate(request.poems):
        if not content or not content.strip():
            failed.append(MassAddFailure(index=index, error="Poem content is empty or invalid."))
            continue

        title = f"{meta.title} ({index + 1})" if numbered else meta.title
        data = PoemCreate(
            title=title,
            author=meta.author,
            content=content,
            description=meta.description,
            year=meta.year,
            category=meta.category,
            image_url=meta.image_url,
            audio_url=meta.audio_url,
            is_premium=meta.is_premium,
        )
        try:
            poem = await create_poem(db, data, created_by_id)
        except DuplicateTitleError as e:
            failed.append(MassAddFailure(index=index, error=str(e)))
            continue
        successful.append(poem.id)

    logger.info("Mass add finished: %d added, %d failed", len(successful), len(failed))
    return MassAddResult(
        message=f"Mass add finished: {len(successful)} poems added, {len(failed)} failed.",
        success_count=len(successful),
        failed_count=len(failed),
        successful_poem_ids=successful,
        failed_poems=failed,
    )


async def catalog_stats(db: AsyncSession) -> dict:
    total = await db.scalar(select(func.count()).select_from(Poem)) or 0
    premium = await db.scalar(
        select(func.count()).select_from(Poem).where(Poem.is_premium == True)
    ) or 0
    authors = await db.scalar(select(func.count(func.distinct(Poem.author)))) or 0

    rows = await db.execute(
        select(Poem.category, func.count())
        .where(Poem.category.is_not(None))
        .group_by(Poem.category)
    )
    categories = {category: count for category, count in rows.all()}

    return {
        "total_poems": total,
        "premium_poems": premium,
        "free_poems": total - premium,
        "categories": categories,
        "authors_count": authors,
    }
