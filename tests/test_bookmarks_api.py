async def test_bookmarks_require_login(client):
    assert (await client.get("/api/bookmarks")).status_code == 401
    assert (await client.post("/api/bookmarks", json={"poemId": 1})).status_code == 401


async def test_bookmark_unknown_poem(client, user_factory, login_as):
    await login_as(await user_factory())
    response = await client.post("/api/bookmarks", json={"poemId": 4242})
    assert response.status_code == 404


async def test_add_list_remove(client, poem_factory, user_factory, login_as):
    first = await poem_factory(title="First")
    second = await poem_factory(title="Second")
    await login_as(await user_factory())

    created = await client.post("/api/bookmarks", json={"poemId": first.id})
    assert created.status_code == 201
    assert created.json()["isBookmarked"] is True
    await client.post("/api/bookmarks", json={"poemId": second.id})

    listed = (await client.get("/api/bookmarks")).json()
    assert [p["title"] for p in listed] == ["First", "Second"]

    removed = await client.delete(f"/api/bookmarks/{first.id}")
    assert removed.status_code == 204

    listed = (await client.get("/api/bookmarks")).json()
    assert [p["title"] for p in listed] == ["Second"]


async def test_rebookmark_revives_row(client, poem_factory, user_factory, login_as):
    poem = await poem_factory()
    await login_as(await user_factory())

    first = (await client.post("/api/bookmarks", json={"poemId": poem.id})).json()
    await client.delete(f"/api/bookmarks/{poem.id}")
    again = (await client.post("/api/bookmarks", json={"poemId": poem.id})).json()

    assert again["id"] == first["id"]
    assert again["isBookmarked"] is True


async def test_bookmarked_premium_poem_stays_redacted(client, poem_factory, user_factory, login_as):
    poem = await poem_factory(is_premium=True, content="one\ntwo\nthree")
    await login_as(await user_factory())
    await client.post("/api/bookmarks", json={"poemId": poem.id})

    listed = (await client.get("/api/bookmarks")).json()

    assert listed[0]["content"] == "one\ntwo..."
    assert listed[0]["isPremiumLocked"] is True


async def test_removing_unknown_bookmark_is_noop(client, user_factory, login_as):
    await login_as(await user_factory())
    response = await client.delete("/api/bookmarks/77")
    assert response.status_code == 204
