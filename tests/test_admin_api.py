from datetime import timedelta

from sqlalchemy import func, select

from poesis.admin_seed import SAMPLE_POEMS, seed_database
from poesis.config import get_settings
from poesis.models import Poem, User, UserPoem, UserRole
from poesis.utils import now_utc


async def _admin(user_factory, login_as):
    admin = await user_factory(username="Boss", role=UserRole.ADMIN)
    await login_as(admin)
    return admin


async def test_admin_routes_reject_regular_users(client, user_factory, login_as):
    await login_as(await user_factory(username="Administrator"))

    for path in ("/api/admin/stats", "/api/admin/subscribers"):
        response = await client.get(path)
        assert response.status_code == 403
        assert response.json()["detail"] == "Administrator role required"


async def test_admin_routes_reject_anonymous(client):
    assert (await client.get("/api/admin/stats")).status_code == 401


async def test_stats(client, poem_factory, user_factory, login_as):
    await poem_factory(author="A", category="Nature", is_premium=True)
    await poem_factory(author="A", category="Nature")
    await poem_factory(author="B", category="Love")
    now = now_utc()
    await user_factory(is_subscribed=True, subscription_end_date=now + timedelta(days=3))
    await user_factory(is_subscribed=True, subscription_end_date=now - timedelta(days=3))
    await _admin(user_factory, login_as)

    body = (await client.get("/api/admin/stats")).json()

    assert body["totalPoems"] == 3
    assert body["premiumPoems"] == 1
    assert body["freePoems"] == 2
    assert body["categories"] == {"Nature": 2, "Love": 1}
    assert body["authorsCount"] == 2
    assert body["totalUsers"] == 3
    assert body["activeSubscribers"] == 1


async def test_subscribers_list(client, user_factory, login_as):
    now = now_utc()
    await user_factory(
        username="current",
        is_subscribed=True,
        subscription_plan="annual",
        subscribed_at=now,
        subscription_end_date=now + timedelta(days=100),
    )
    await user_factory(username="lapsed", is_subscribed=True, subscription_end_date=now - timedelta(days=1))
    await user_factory(username="never")
    await _admin(user_factory, login_as)

    body = (await client.get("/api/admin/subscribers")).json()

    by_name = {row["username"]: row for row in body}
    assert set(by_name) == {"current", "lapsed"}
    assert by_name["current"]["isActive"] is True
    assert by_name["current"]["subscriptionType"] == "annual"
    assert by_name["lapsed"]["isActive"] is False


async def test_delete_user_removes_bookmarks(client, db, poem_factory, user_factory, login_as):
    poem = await poem_factory()
    victim = await user_factory(username="victim")
    db.add(UserPoem(user_id=victim.id, poem_id=poem.id, is_bookmarked=True))
    await db.commit()
    await _admin(user_factory, login_as)

    response = await client.request("DELETE", "/api/admin/users", json={"email": "victim@example.com"})

    assert response.status_code == 200
    db.expunge_all()
    assert await db.get(User, victim.id) is None
    assert await db.scalar(select(func.count()).select_from(UserPoem)) == 0


async def test_delete_unknown_user(client, user_factory, login_as):
    await _admin(user_factory, login_as)
    response = await client.request("DELETE", "/api/admin/users", json={"email": "ghost@example.com"})
    assert response.status_code == 404


async def test_admin_cannot_delete_self(client, user_factory, login_as):
    await _admin(user_factory, login_as)
    response = await client.request("DELETE", "/api/admin/users", json={"email": "boss@example.com"})
    assert response.status_code == 400


async def test_seed_is_idempotent(db):
    admin, inserted = await seed_database(db)

    assert admin.is_admin
    assert admin.email == get_settings().admin_email
    assert inserted == len(SAMPLE_POEMS)

    again, inserted_again = await seed_database(db)
    assert again.id == admin.id
    assert inserted_again == 0
    assert await db.scalar(select(func.count()).select_from(Poem)) == len(SAMPLE_POEMS)


async def test_seed_promotes_existing_account(db, user_factory):
    existing = await user_factory(username="Administrator", email=get_settings().admin_email)
    assert not existing.is_admin

    admin, _ = await seed_database(db)

    assert admin.id == existing.id
    assert admin.is_admin
