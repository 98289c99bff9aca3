import asyncio

from app.models.engagement import Like
from app.models.user import User
from app.repositories.base import repository_for
from app.repositories.engagement_repo import EngagementRepository
from app.repositories.file_storage import FileStorage
from app.repositories.post_repo import PostRepository
from app.schemas.post_schema import PostCreate
from sqlalchemy import func, select


async def _like_rows(storage, post_id, user_id) -> int:
    if isinstance(storage, FileStorage):
        return sum(1 for r in await storage._read("likes") if r["post_id"] == post_id and r["user_id"] == user_id)
    stmt = select(func.count(Like.like_id)).where(Like.post_id == post_id, Like.user_id == user_id)
    return (await storage.execute(stmt)).scalar_one()


async def test_toggle_like_twice_restores_state(storage, make_user):
    alice = await make_user("alice")
    post = await repository_for(PostRepository, storage).create_post(PostCreate(content="hello"), alice.user_id)
    repo = repository_for(EngagementRepository, storage)

    assert await repo.is_post_liked(post.post_id, alice.user_id) is False
    assert await repo.toggle_like(post.post_id, alice.user_id) is True
    assert await _like_rows(storage, post.post_id, alice.user_id) == 1
    assert await repo.toggle_like(post.post_id, alice.user_id) is False
    assert await _like_rows(storage, post.post_id, alice.user_id) == 0
    assert await repo.is_post_liked(post.post_id, alice.user_id) is False


async def test_toggle_bookmark(storage, make_user):
    alice = await make_user("alice")
    post = await repository_for(PostRepository, storage).create_post(PostCreate(content="save me"), alice.user_id)
    repo = repository_for(EngagementRepository, storage)

    assert await repo.toggle_bookmark(post.post_id, alice.user_id) is True
    assert await repo.is_post_bookmarked(post.post_id, alice.user_id) is True
    assert await repo.toggle_bookmark(post.post_id, alice.user_id) is False
    assert await repo.is_post_bookmarked(post.post_id, alice.user_id) is False


async def test_file_backend_concurrent_writes_are_not_lost(file_storage):
    # 同時送出的寫入都要保留 (讀-改-寫之間不能被其他請求插隊)
    users = await asyncio.gather(*(
        file_storage.create_user(User(username=f"user{i}", password_hash="x")) for i in range(8)
    ))
    assert len(await file_storage.list_all_users()) == 8

    post = await file_storage.create_post(PostCreate(content="popular"), users[0].user_id)
    results = await asyncio.gather(*(file_storage.toggle_like(post.post_id, u.user_id) for u in users))
    assert results == [True] * 8

    row = await file_storage.get_post_row(post.post_id)
    assert row.likes_count == 8
