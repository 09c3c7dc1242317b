"""Admin seed script — creates the administrator account and sample poems.

Usage:
    python -m poesis.admin_seed

Reads ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD from the environment or .env.
Safe to run repeatedly: existing admin and a non-empty catalog are left alone.
"""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.config import get_settings
from poesis.models.poem import Poem
from poesis.models.user import User, UserRole
from poesis.services.auth_service import hash_password
from poesis.services.user_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)

SAMPLE_POEMS = [
    {
        "title": "Invictus",
        "author": "William Ernest Henley",
        "content": (
            "Out of the night that covers me,\n"
            "Black as the pit from pole to pole,\n"
            "I thank whatever gods may be\n"
            "For my unconquerable soul."
        ),
        "description": "A poem about the indomitable spirit of human perseverance.",
        "year": "1888",
        "category": "Classic Poetry",
        "is_premium": False,
    },
    {
        "title": "Fire and Ice",
        "author": "Robert Frost",
        "content": (
            "Some say the world will end in fire,\n"
            "Some say in ice.\n"
            "From what I've tasted of desire\n"
            "I hold with those who favor fire."
        ),
        "description": "Reflections on the destructive forces of human nature.",
        "year": "1920",
        "category": "Classic Poetry",
        "is_premium": False,
    },
    {
        "title": "Hope is the thing with feathers",
        "author": "Emily Dickinson",
        "content": (
            "Hope is the thing with feathers\n"
            "That perches in the soul,\n"
            "And sings the tune without the words,\n"
            "And never stops at all,"
        ),
        "description": "A bird as a metaphor for hope.",
        "year": "1891",
        "category": "Classic Poetry",
        "is_premium": True,
    },
    {
        "title": "Do not go gentle into that good night",
        "author": "Dylan Thomas",
        "content": (
            "Do not go gentle into that good night,\n"
            "Old age should burn and rave at close of day;\n"
            "Rage, rage against the dying of the light."
        ),
        "description": "Confronting death with passion and resistance.",
        "year": "1951",
        "category": "Modern Poetry",
        "is_premium": True,
    },
]

SAMPLE_IMAGE_URL = "https://images.unsplash.com/photo-1519681393784-d120267933ba?auto=format&fit=crop&w=600&q=80"


async def seed_database(db: AsyncSession) -> tuple[User, int]:
    """Ensure the admin account exists and the catalog is not empty.

    Returns the admin user and the number of poems inserted.
    """
    settings = get_settings()

    admin = await get_user_by_email(db, settings.admin_email)
    if admin is None:
        admin = await create_user(
            db,
            username=settings.admin_username,
            email=settings.admin_email,
            password_hash=await hash_password(settings.admin_password),
            role=UserRole.ADMIN,
        )
    elif not admin.is_admin:
        admin.role = UserRole.ADMIN
        await db.commit()

    poem_count = await db.scalar(select(func.count()).select_from(Poem)) or 0
    if poem_count:
        return admin, 0

    for sample in SAMPLE_POEMS:
        db.add(Poem(**sample, image_url=SAMPLE_IMAGE_URL, created_by_id=admin.id))
    await db.commit()
    return admin, len(SAMPLE_POEMS)


async def main():
    # Ensure .env is loaded before importing settings-dependent modules
    from dotenv import load_dotenv
    load_dotenv()

    from poesis.db.session import async_session_factory, engine
    from poesis.models import Base
    from poesis.utils import setup_logging

    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        admin, inserted = await seed_database(db)

    await engine.dispose()

    print(f"Admin user ready (id={admin.id}, username={admin.username}, email={admin.email})")
    print(f"Sample poems inserted: {inserted}")
    print()
    print("Next steps:")
    print("  1. Start the web app:  uvicorn poesis.app:app --reload")
    print("  2. POST /api/login with the admin email and ADMIN_PASSWORD")


if __name__ == "__main__":
    asyncio.run(main())
