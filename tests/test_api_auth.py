async def test_register_login_and_current_user(client, signup):
    user_id, headers = await signup("alice")

    res = await client.get("/api/auth/user", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["user_id"] == user_id
    assert body["posts_count"] == 0
    assert "password_hash" not in body

    res = await client.get("/api/user", headers=headers)
    assert res.json()["username"] == "alice"


async def test_duplicate_username_and_email_messages(client):
    first = await client.post("/api/register", json={"username": "alice", "email": "alice@mail.com", "password": "secret123"})
    assert first.status_code == 201

    same_name = await client.post("/api/register", json={"username": "alice", "password": "secret123"})
    assert same_name.status_code == 400
    assert "名稱" in same_name.json()["message"]

    same_email = await client.post("/api/register", json={"username": "alice2", "email": "alice@mail.com", "password": "secret123"})
    assert same_email.status_code == 400
    assert "Email" in same_email.json()["message"]


async def test_bad_credentials_return_401(client, signup):
    await signup("alice")
    res = await client.post("/api/login", json={"username": "alice", "password": "wrong-pass"})
    assert res.status_code == 401
    assert res.json()["message"]

    res = await client.post("/api/login", json={"username": "nobody", "password": "wrong-pass"})
    assert res.status_code == 401


async def test_token_endpoint_accepts_form(client, signup):
    await signup("alice")
    res = await client.post("/api/auth/token", data={"username": "alice", "password": "secret123"})
    assert res.status_code == 200
    assert res.json()["token_type"] == "bearer"


async def test_protected_routes_require_token(client):
    assert (await client.get("/api/auth/user")).status_code == 401
    assert (await client.post("/api/posts", json={"content": "x"})).status_code == 401
    res = await client.get("/api/user", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


async def test_validation_errors_are_400(client):
    res = await client.post("/api/register", json={"username": "a b", "password": "secret123"})
    assert res.status_code == 400
    assert res.json()["errors"]


async def test_logout(client, signup):
    _, headers = await signup("alice")
    res = await client.post("/api/logout", headers=headers)
    assert res.status_code == 200


async def test_profile_update_and_search(client, signup):
    _, alice = await signup("alice")
    bob_id, bob = await signup("bob")

    res = await client.put("/api/users/me", json={"display_name": "Alice A.", "bio": "retro fan"}, headers=alice)
    assert res.status_code == 200
    assert res.json()["display_name"] == "Alice A."

    res = await client.get("/api/users", params={"search": "ALI"}, headers=bob)
    assert [u["username"] for u in res.json()] == ["alice"]
    # 搜尋不包含自己
    res = await client.get("/api/users", params={"search": "bob"}, headers=bob)
    assert res.json() == []

    # 沒有搜尋字串：追蹤中 + 粉絲
    await client.post(f"/api/users/{bob_id}/follow", headers=alice)
    res = await client.get("/api/users", headers=alice)
    assert [u["username"] for u in res.json()] == ["bob"]


async def test_admin_routes(client, signup, db_session):
    from app.models.user import UserRoleEnum
    from app.repositories.user_repo import UserRepository

    admin_id, admin = await signup("admin")
    user_id, user = await signup("user1")
    await UserRepository(db_session).update_user_role(admin_id, UserRoleEnum.admin)

    assert (await client.get("/api/admin/users", headers=user)).status_code == 403

    res = await client.get("/api/admin/users", headers=admin)
    assert res.status_code == 200
    assert {u["username"] for u in res.json()} == {"admin", "user1"}

    post = (await client.post("/api/posts", json={"content": "bad post"}, headers=user)).json()
    assert len((await client.get("/api/admin/posts", headers=admin)).json()) == 1
    assert (await client.delete(f"/api/admin/posts/{post['post_id']}", headers=admin)).status_code == 204
    assert (await client.delete(f"/api/admin/posts/{post['post_id']}", headers=admin)).status_code == 404

    res = await client.patch(f"/api/admin/users/{user_id}/role", json={"role": "admin"}, headers=admin)
    assert res.status_code == 200
    assert res.json()["role"] == "admin"
