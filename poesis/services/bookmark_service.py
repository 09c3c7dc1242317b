"""Bookmark operations — one UserPoem row per (user, poem), tombstoned on removal."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.models.poem import Poem
from poesis.models.user_poem import UserPoem


async def _get_association(db: AsyncSession, user_id: int, poem_id: int) -> UserPoem | None:
    result = await db.execute(
        select(UserPoem).where(UserPoem.user_id == user_id, UserPoem.poem_id == poem_id)
    )
    return result.scalar_one_or_none()


async def bookmark_poem(db: AsyncSession, user_id: int, poem_id: int) -> UserPoem:
    """Create the association, or revive a previously removed one."""
    association = await _get_association(db, user_id, poem_id)
    if association:
        association.is_bookmarked = True
    else:
        association = UserPoem(user_id=user_id, poem_id=poem_id, is_bookmarked=True)
        db.add(association)

    await db.commit()
    await db.refresh(association)
    return association


async def get_bookmarked_poems(db: AsyncSession, user_id: int) -> list[Poem]:
    result = await db.execute(
        select(Poem)
        .join(UserPoem, UserPoem.poem_id == Poem.id)
        .where(UserPoem.user_id == user_id, UserPoem.is_bookmarked == True)
        .order_by(UserPoem.id)
    )
    return list(result.scalars().all())


async def remove_bookmark(db: AsyncSession, user_id: int, poem_id: int) -> None:
    association = await _get_association(db, user_id, poem_id)
    if association and association.is_bookmarked:
        association.is_bookmarked = False
        await db.commit()
