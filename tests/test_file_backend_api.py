# 同樣的 API 情境跑在 JSON 檔案後端 (STORAGE_BACKEND=file)
import json


async def test_feed_scenarios_on_file_backend(file_client, file_signup, file_storage):
    alice_id, alice = await file_signup("alice")
    bob_id, bob = await file_signup("bob")
    _, carol = await file_signup("carol")

    await file_client.post(f"/api/users/{bob_id}/follow", headers=alice)
    post = (await file_client.post("/api/posts", json={"content": "P", "tags": ["art", "daily"]}, headers=bob)).json()

    following = (await file_client.get("/api/posts/following", headers=alice)).json()
    assert [p["post_id"] for p in following] == [post["post_id"]]
    assert (await file_client.get("/api/posts/following", headers=carol)).json() == []

    counts = {t["tag"]: t["count"] for t in (await file_client.get("/api/trending/tags")).json()}
    assert counts == {"art": 1, "daily": 1}

    notifications = (await file_client.get("/api/notifications", headers=alice)).json()
    assert [n["post_id"] for n in notifications] == [post["post_id"]]

    quote = (await file_client.post(
        "/api/posts", json={"content": "nice!", "quoted_post_id": post["post_id"]}, headers=alice
    )).json()
    await file_client.patch(f"/api/posts/{post['post_id']}", json={"content": "P edited"}, headers=bob)
    fetched = (await file_client.get(f"/api/posts/{quote['post_id']}")).json()
    assert fetched["quoted_post"]["content"] == "P edited"

    assert (await file_client.delete(f"/api/posts/{post['post_id']}", headers=alice)).status_code == 404
    assert (await file_client.delete(f"/api/posts/{post['post_id']}", headers=bob)).status_code == 204
    fetched = (await file_client.get(f"/api/posts/{quote['post_id']}")).json()
    assert fetched["quoted_post_id"] is None
    assert fetched["quoted_post"] is None

    notifications = (await file_client.get("/api/notifications", headers=alice)).json()
    assert notifications[0]["post"] is None


async def test_file_backend_writes_one_json_array_per_table(file_client, file_signup, file_storage):
    _, alice = await file_signup("alice")
    await file_client.post("/api/posts", json={"content": "persisted"}, headers=alice)

    posts_file = file_storage.data_dir / "posts.json"
    users_file = file_storage.data_dir / "users.json"
    assert json.loads(posts_file.read_text(encoding="utf-8"))[0]["content"] == "persisted"
    users = json.loads(users_file.read_text(encoding="utf-8"))
    assert users[0]["username"] == "alice"
    assert users[0]["role"] == "user"
    # 不會留下暫存檔
    assert not list(file_storage.data_dir.glob("*.tmp"))


async def test_auth_and_conflicts_on_file_backend(file_client, file_signup):
    await file_signup("alice")
    res = await file_client.post("/api/register", json={"username": "alice", "password": "secret123"})
    assert res.status_code == 400
    res = await file_client.post("/api/login", json={"username": "alice", "password": "nope-nope"})
    assert res.status_code == 401
