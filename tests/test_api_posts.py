from app.models.user import UserRoleEnum
from app.repositories.notification_repo import NotificationRepository
from app.repositories.user_repo import UserRepository


async def test_trending_tags_include_new_post_tags(client, signup):
    _, alice = await signup("alice")
    res = await client.post("/api/posts", json={"content": "sketching", "tags": ["art", "daily"]}, headers=alice)
    assert res.status_code == 201

    trending = (await client.get("/api/trending/tags")).json()
    counts = {t["tag"]: t["count"] for t in trending}
    assert counts["art"] >= 1
    assert counts["daily"] >= 1


async def test_following_feed_only_shows_followed_authors(client, signup):
    _, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    _, carol = await signup("carol")

    assert (await client.get("/api/posts/following", headers=alice)).json() == []

    res = await client.post(f"/api/users/{bob_id}/follow", headers=alice)
    assert res.json() == {"is_following": True}
    post = (await client.post("/api/posts", json={"content": "from bob"}, headers=bob)).json()

    as_alice = (await client.get("/api/posts/following", headers=alice)).json()
    assert [p["post_id"] for p in as_alice] == [post["post_id"]]
    assert (await client.get("/api/posts/following", headers=carol)).json() == []

    # ?filter=following 與 /posts/following 相同
    res = await client.get("/api/posts", params={"filter": "following"}, headers=alice)
    assert [p["post_id"] for p in res.json()] == [post["post_id"]]
    assert (await client.get("/api/posts", params={"filter": "following"})).status_code == 401


async def test_quote_is_resolved_live(client, signup):
    _, alice = await signup("alice")
    _, bob = await signup("bob")

    original = (await client.post("/api/posts", json={"content": "P original"}, headers=alice)).json()
    quote = (await client.post(
        "/api/posts", json={"content": "nice!", "quoted_post_id": original["post_id"]}, headers=bob
    )).json()
    assert quote["quoted_post"]["content"] == "P original"
    assert quote["quoted_post"]["author"]["username"] == "alice"
    assert quote["quoted_post"]["quoted_post"] is None

    res = await client.patch(f"/api/posts/{original['post_id']}", json={"content": "P edited"}, headers=alice)
    assert res.status_code == 200

    fetched = (await client.get(f"/api/posts/{quote['post_id']}")).json()
    assert fetched["quoted_post"]["content"] == "P edited"

    feed = (await client.get("/api/posts", params={"filter": "quotes"})).json()
    assert [p["post_id"] for p in feed] == [quote["post_id"]]


async def test_quote_of_quote_resolves_one_level(client, signup):
    _, alice = await signup("alice")
    first = (await client.post("/api/posts", json={"content": "first"}, headers=alice)).json()
    second = (await client.post("/api/posts", json={"content": "second", "quoted_post_id": first["post_id"]}, headers=alice)).json()
    third = (await client.post("/api/posts", json={"content": "third", "quoted_post_id": second["post_id"]}, headers=alice)).json()

    assert third["quoted_post"]["post_id"] == second["post_id"]
    assert third["quoted_post"]["quoted_post_id"] == first["post_id"]
    assert third["quoted_post"]["quoted_post"] is None


async def test_post_validation(client, signup):
    _, alice = await signup("alice")
    assert (await client.post("/api/posts", json={"content": "   "}, headers=alice)).status_code == 400
    res = await client.post("/api/posts", json={"content": "", "quoted_post_id": "missing"}, headers=alice)
    assert res.status_code == 400
    too_many = {"content": "pics", "image_urls": [f"https://img/{i}.png" for i in range(6)]}
    assert (await client.post("/api/posts", json=too_many, headers=alice)).status_code == 400


async def test_round_trip_keeps_order(client, signup):
    _, alice = await signup("alice")
    payload = {"content": "order", "tags": ["b", "a", "c"], "image_urls": ["https://x/2", "https://x/1"]}
    created = (await client.post("/api/posts", json=payload, headers=alice)).json()

    fetched = (await client.get(f"/api/posts/{created['post_id']}")).json()
    assert fetched["content"] == "order"
    assert fetched["tags"] == ["b", "a", "c"]
    assert fetched["image_urls"] == ["https://x/2", "https://x/1"]


async def test_new_post_notifies_followers(client, signup):
    _, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    await client.post(f"/api/users/{bob_id}/follow", headers=alice)

    post = (await client.post("/api/posts", json={"content": "hello followers"}, headers=bob)).json()

    notifications = (await client.get("/api/notifications", headers=alice)).json()
    assert len(notifications) == 1
    assert notifications[0]["post_id"] == post["post_id"]
    assert notifications[0]["type"] == "new_post"
    assert notifications[0]["author"]["username"] == "bob"
    assert (await client.get("/api/notifications/unread-count", headers=alice)).json() == {"count": 1}
    # 作者本人不會收到通知
    assert (await client.get("/api/notifications", headers=bob)).json() == []

    res = await client.put(f"/api/notifications/{notifications[0]['notification_id']}/read", headers=bob)
    assert res.status_code == 403
    res = await client.put(f"/api/notifications/{notifications[0]['notification_id']}/read", headers=alice)
    assert res.json()["is_read"] is True
    assert (await client.put("/api/notifications/missing/read", headers=alice)).status_code == 404
    assert (await client.get("/api/notifications/unread-count", headers=alice)).json() == {"count": 0}


async def test_fan_out_failure_does_not_fail_post(client, signup, monkeypatch):
    _, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    await client.post(f"/api/users/{bob_id}/follow", headers=alice)

    async def broken(self, notifications):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(NotificationRepository, "create_notifications", broken)

    res = await client.post("/api/posts", json={"content": "still posted"}, headers=bob)
    assert res.status_code == 201
    assert res.json()["content"] == "still posted"
    assert len((await client.get("/api/posts")).json()) == 1


async def test_delete_post_status_codes(client, signup):
    _, alice = await signup("alice")
    _, bob = await signup("bob")
    post = (await client.post("/api/posts", json={"content": "mine"}, headers=alice)).json()

    assert (await client.delete("/api/posts/missing", headers=alice)).status_code == 404
    # 不是作者：和不存在一樣回 404，貼文仍在
    res = await client.delete(f"/api/posts/{post['post_id']}", headers=bob)
    assert res.status_code == 404
    assert (await client.get(f"/api/posts/{post['post_id']}")).status_code == 200
    assert (await client.patch(f"/api/posts/{post['post_id']}", json={"content": "x"}, headers=bob)).status_code == 403
    assert (await client.patch("/api/posts/missing", json={"content": "x"}, headers=alice)).status_code == 404
    assert (await client.delete(f"/api/posts/{post['post_id']}", headers=alice)).status_code == 204
    assert (await client.get(f"/api/posts/{post['post_id']}")).status_code == 404


async def test_like_bookmark_and_comments(client, signup):
    alice_id, alice = await signup("alice")
    _, bob = await signup("bob")
    post = (await client.post("/api/posts", json={"content": "like me"}, headers=alice)).json()
    post_id = post["post_id"]

    assert (await client.post(f"/api/posts/{post_id}/like", headers=bob)).json() == {"is_liked": True}
    assert (await client.post(f"/api/posts/{post_id}/bookmark", headers=bob)).json() == {"is_bookmarked": True}
    assert (await client.post("/api/posts/missing/like", headers=bob)).status_code == 404

    comment = await client.post(f"/api/posts/{post_id}/comments", json={"content": "great"}, headers=bob)
    assert comment.status_code == 201
    assert comment.json()["author"]["username"] == "bob"

    as_bob = (await client.get(f"/api/posts/{post_id}", headers=bob)).json()
    assert (as_bob["likes_count"], as_bob["comments_count"]) == (1, 1)
    assert as_bob["is_liked"] is True
    assert as_bob["is_bookmarked"] is True

    as_guest = (await client.get("/api/posts")).json()[0]
    assert as_guest["is_liked"] is False

    assert [p["post_id"] for p in (await client.get("/api/bookmarks", headers=bob)).json()] == [post_id]
    assert [p["post_id"] for p in (await client.get("/api/liked", headers=bob)).json()] == [post_id]
    assert (await client.get(f"/api/users/{alice_id}/liked", headers=bob)).status_code == 403

    comments = (await client.get(f"/api/posts/{post_id}/comments")).json()
    comment_id = comments[0]["comment_id"]
    assert (await client.delete(f"/api/comments/{comment_id}", headers=alice)).status_code == 403
    assert (await client.delete(f"/api/comments/{comment_id}", headers=bob)).status_code == 204
    assert (await client.get(f"/api/posts/{post_id}/comments")).json() == []

    assert (await client.post(f"/api/posts/{post_id}/like", headers=bob)).json() == {"is_liked": False}


async def test_feed_filter_precedence(client, signup):
    alice_id, alice = await signup("alice")
    _, bob = await signup("bob")
    await client.post("/api/posts", json={"content": "cat pictures", "tags": ["pets"]}, headers=alice)
    await client.post("/api/posts", json={"content": "dog pictures", "tags": ["pets"]}, headers=bob)

    # search 優先於 tag 與 author
    res = await client.get("/api/posts", params={"search": "dog", "tag": "pets", "author": alice_id})
    assert [p["content"] for p in res.json()] == ["dog pictures"]
    # tag 優先於 author
    res = await client.get("/api/posts", params={"tag": "pets", "author": alice_id})
    assert len(res.json()) == 2
    res = await client.get("/api/posts", params={"author": alice_id})
    assert [p["content"] for p in res.json()] == ["cat pictures"]


async def test_profile_stats_and_user_posts(client, signup):
    alice_id, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    await client.post(f"/api/users/{alice_id}/follow", headers=bob)
    await client.post(f"/api/users/{bob_id}/follow", headers=alice)
    request = (await client.post("/api/friend-requests", json={"target_id": bob_id}, headers=alice)).json()
    await client.put(f"/api/friend-requests/{request['request_id']}", json={"status": "accepted"}, headers=bob)

    original = (await client.post("/api/posts", json={"content": "original"}, headers=alice)).json()
    await client.post("/api/posts", json={"content": "", "quoted_post_id": original["post_id"]}, headers=alice)

    profile = (await client.get(f"/api/users/{alice_id}")).json()
    assert (profile["posts_count"], profile["followers_count"], profile["following_count"], profile["friends_count"]) == (2, 1, 1, 1)

    quotes = (await client.get(f"/api/users/{alice_id}/posts", params={"filter": "quotes"})).json()
    assert len(quotes) == 1
    originals = (await client.get(f"/api/users/{alice_id}/posts", params={"filter": "original"})).json()
    assert [p["content"] for p in originals] == ["original"]
    assert (await client.get("/api/users/missing/posts")).status_code == 404
    assert [u["username"] for u in (await client.get(f"/api/users/{alice_id}/followers")).json()] == ["bob"]


async def test_tag_suggestions(client, signup):
    _, alice = await signup("alice")
    await client.post("/api/posts", json={"content": "latte", "tags": ["coffee", "daily"]}, headers=alice)
    await client.post("/api/posts", json={"content": "drawing", "tags": ["art"]}, headers=alice)

    res = await client.get("/api/tags/suggestions", params={"content": "short"})
    assert res.json() == {"tags": []}

    res = await client.get("/api/tags/suggestions", params={"content": "a great coffee shop downtown", "selected": ["daily"]})
    tags = res.json()["tags"]
    assert tags[0] == "coffee"
    assert "daily" not in tags


async def test_admin_can_delete_any_post(client, signup, db_session):
    _, alice = await signup("alice")
    admin_id, admin = await signup("moderator")
    await UserRepository(db_session).update_user_role(admin_id, UserRoleEnum.admin)
    post = (await client.post("/api/posts", json={"content": "spam"}, headers=alice)).json()

    assert (await client.delete(f"/api/posts/{post['post_id']}", headers=admin)).status_code == 204
    assert (await client.get(f"/api/posts/{post['post_id']}")).status_code == 404
