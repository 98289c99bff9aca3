# app/repositories/file_storage.py
# JSON 檔案儲存後端 (STORAGE_BACKEND=file)
# 每個資料表一個 JSON 陣列檔案；寫入時先寫暫存檔再 replace，單表寫入是原子的，
# 但跨表沒有原子性 (例如 貼文 + 通知)。
# 實作與各個 SQL Repository 相同名稱、相同語意的方法，Service 層不需要區分後端。

import asyncio
import json
import logging
import uuid
from collections import Counter
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional, Tuple

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.database import utcnow
from app.core.exceptions import ConflictError, InvalidOperationError, NotFoundError
from app.models.social import FriendRequestStatusEnum
from app.models.user import UserRoleEnum
from app.repositories.rows import ConversationRow, PostRow

logger = logging.getLogger(__name__)

USER_SEARCH_LIMIT = 20

USER_FIELDS = (
    "user_id", "username", "email", "password_hash", "role", "first_name", "last_name",
    "display_name", "profile_image_url", "bio", "location", "website", "created_at", "updated_at",
)


def _now() -> str:
    # 固定到微秒，字串排序等於時間排序
    return utcnow().isoformat(timespec="microseconds")


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_times(record: dict) -> dict:
    parsed = dict(record)
    for key, value in record.items():
        if key.endswith("_at") and isinstance(value, str):
            parsed[key] = datetime.fromisoformat(value)
    return parsed


def _newest_first(records: List[dict], key: str = "created_at") -> List[dict]:
    """依時間由新到舊；同一時間時後寫入的排前面"""
    indexed = list(enumerate(records))
    indexed.sort(key=lambda item: (item[1].get(key) or "", item[0]), reverse=True)
    return [record for _, record in indexed]


def _page(records: list, limit: Optional[int], offset: int) -> list:
    if limit is None:
        return records[offset:]
    return records[offset:offset + limit]


class FileStorage:
    """
    以 JSON 檔案實作所有 Repository 方法
    檔案 I/O 走 aiofiles；會寫入的方法整段持有 self._lock，讀-改-寫不會交錯
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self._lock = asyncio.Lock()

    # --- 檔案存取 ---

    def _path(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    async def _read(self, table: str) -> List[dict]:
        path = self._path(table)
        if not await aiofiles.os.path.exists(path):
            return []
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return json.loads(await f.read())

    async def _write(self, table: str, records: List[dict]) -> None:
        await aiofiles.os.makedirs(self.data_dir, exist_ok=True)
        path = self._path(table)
        tmp_path = path.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(records, ensure_ascii=False, indent=2))
        await aiofiles.os.replace(tmp_path, path)

    async def _insert(self, table: str, record: dict) -> dict:
        async with self._lock:
            records = await self._read(table)
            records.append(record)
            await self._write(table, records)
        return record

    # Session 相容介面：每次寫入都已經落地
    async def commit(self) -> None:
        return None

    async def rollback(self) -> None:
        return None

    # --- 組裝回傳物件 ---

    async def _users_by_id(self) -> dict:
        return {u["user_id"]: u for u in await self._read("users")}

    def _user_ns(self, record: Optional[dict]):
        if record is None:
            return None
        data = _parse_times(record)
        data["role"] = UserRoleEnum(data.get("role") or UserRoleEnum.user.value)
        return SimpleNamespace(**data)

    def _post_ns(self, record: dict, users: dict):
        data = _parse_times(record)
        data["author"] = self._user_ns(users.get(record["author_id"]))
        return SimpleNamespace(**data)

    async def _post_rows(self, records: List[dict], viewer_id: Optional[str]) -> List[PostRow]:
        users = await self._users_by_id()
        likes = await self._read("likes")
        bookmarks = await self._read("bookmarks")
        like_counts = Counter(like["post_id"] for like in likes)
        comment_counts = Counter(c["post_id"] for c in await self._read("comments"))
        liked = {like["post_id"] for like in likes if like["user_id"] == viewer_id} if viewer_id else set()
        saved = {b["post_id"] for b in bookmarks if b["user_id"] == viewer_id} if viewer_id else set()
        return [
            PostRow(
                self._post_ns(record, users),
                like_counts[record["post_id"]],
                comment_counts[record["post_id"]],
                record["post_id"] in liked,
                record["post_id"] in saved,
            )
            for record in records
        ]

    @staticmethod
    def _filter_posts(records: List[dict], post_filter: str) -> List[dict]:
        if post_filter == "quotes":
            return [p for p in records if p.get("quoted_post_id")]
        if post_filter == "original":
            return [p for p in records if not p.get("quoted_post_id")]
        return records

    async def _list_newest(self, records, viewer_id, limit, offset, post_filter) -> List[PostRow]:
        records = _newest_first(self._filter_posts(records, post_filter))
        return await self._post_rows(_page(records, limit, offset), viewer_id)

    # ===== Users =====

    async def get_user_by_id(self, user_id: str):
        return self._user_ns((await self._users_by_id()).get(user_id))

    async def get_user_by_username(self, username: str):
        match = next((u for u in await self._read("users") if u["username"] == username), None)
        return self._user_ns(match)

    async def get_user_by_email(self, email: str):
        match = next((u for u in await self._read("users") if email and u.get("email") == email), None)
        return self._user_ns(match)

    async def search_users(self, query: str, exclude_user_id: Optional[str] = None) -> list:
        # 字面子字串比對，% 與 _ 不是萬用字元
        needle = query.lower()
        matches = []
        for user in await self._read("users"):
            if user["user_id"] == exclude_user_id:
                continue
            fields = (user.get(f) or "" for f in ("username", "display_name", "first_name", "last_name"))
            if any(needle in value.lower() for value in fields):
                matches.append(user)
        matches.sort(key=lambda u: u["username"])
        return [self._user_ns(u) for u in matches[:USER_SEARCH_LIMIT]]

    async def create_user(self, user):
        async with self._lock:
            users = await self._read("users")
            if any(u["username"] == user.username for u in users):
                raise ConflictError("使用者名稱已存在", field="username")
            if user.email and any(u.get("email") == user.email for u in users):
                raise ConflictError("此 Email 已經被註冊", field="email")

            record = {field: getattr(user, field, None) for field in USER_FIELDS}
            now = _now()
            role = record["role"] or UserRoleEnum.user
            record.update(
                user_id=record["user_id"] or _new_id(),
                role=UserRoleEnum(role).value,
                created_at=now,
                updated_at=now,
            )
            users.append(record)
            await self._write("users", users)
        return self._user_ns(record)

    async def update_user(self, user_id: str, updates: dict):
        async with self._lock:
            users = await self._read("users")
            record = next((u for u in users if u["user_id"] == user_id), None)
            if record is None:
                raise NotFoundError("使用者不存在")

            new_email = updates.get("email")
            if new_email and new_email != record.get("email"):
                if any(u.get("email") == new_email and u["user_id"] != user_id for u in users):
                    raise ConflictError("此 Email 已經被註冊", field="email")

            record.update(updates)
            record["updated_at"] = _now()
            await self._write("users", users)
        return self._user_ns(record)

    async def list_all_users(self) -> list:
        return [self._user_ns(u) for u in _newest_first(await self._read("users"))]

    async def update_user_role(self, user_id: str, role: UserRoleEnum) -> bool:
        async with self._lock:
            users = await self._read("users")
            record = next((u for u in users if u["user_id"] == user_id), None)
            if record is None:
                return False
            record["role"] = UserRoleEnum(role).value
            record["updated_at"] = _now()
            await self._write("users", users)
        return True

    # ===== Posts =====

    async def create_post(self, post_data, author_id: str):
        async with self._lock:
            posts = await self._read("posts")
            if post_data.quoted_post_id and not any(p["post_id"] == post_data.quoted_post_id for p in posts):
                raise InvalidOperationError("被引用的貼文不存在")

            now = _now()
            record = {
                "post_id": _new_id(),
                "author_id": author_id,
                "content": post_data.content,
                "image_url": post_data.image_url,
                "image_urls": list(post_data.image_urls),
                "tags": list(post_data.tags),
                "quoted_post_id": post_data.quoted_post_id,
                "sentiment_score": None,
                "sentiment_confidence": None,
                "sentiment_analyzed_at": None,
                "created_at": now,
                "updated_at": now,
            }
            posts.append(record)
            await self._write("posts", posts)
        return self._post_ns(record, await self._users_by_id())

    async def update_post(self, post_id: str, updates: dict, author_id: str):
        async with self._lock:
            posts = await self._read("posts")
            record = next((p for p in posts if p["post_id"] == post_id and p["author_id"] == author_id), None)
            if record is None:
                return None
            record.update(updates)
            record["updated_at"] = _now()
            await self._write("posts", posts)
        return self._post_ns(record, await self._users_by_id())

    async def update_post_sentiment(self, post_id: str, score: int, confidence: int) -> bool:
        async with self._lock:
            posts = await self._read("posts")
            record = next((p for p in posts if p["post_id"] == post_id), None)
            if record is None:
                return False
            record.update(sentiment_score=score, sentiment_confidence=confidence, sentiment_analyzed_at=_now())
            await self._write("posts", posts)
        return True

    async def delete_post(self, post_id: str, author_id: Optional[str] = None) -> bool:
        async with self._lock:
            posts = await self._read("posts")
            target = next((p for p in posts if p["post_id"] == post_id), None)
            if target is None or (author_id is not None and target["author_id"] != author_id):
                return False

            remaining = [p for p in posts if p["post_id"] != post_id]
            for post in remaining:
                if post.get("quoted_post_id") == post_id:
                    post["quoted_post_id"] = None
            await self._write("posts", remaining)

            for table in ("likes", "bookmarks", "comments"):
                await self._write(table, [r for r in await self._read(table) if r["post_id"] != post_id])

            notifications = await self._read("notifications")
            for notification in notifications:
                if notification.get("post_id") == post_id:
                    notification["post_id"] = None
            await self._write("notifications", notifications)
        return True

    async def get_post_by_id(self, post_id: str):
        record = next((p for p in await self._read("posts") if p["post_id"] == post_id), None)
        return self._post_ns(record, await self._users_by_id()) if record else None

    async def get_post_row(self, post_id: str, viewer_id: Optional[str] = None) -> PostRow | None:
        rows = await self.get_post_rows_by_ids([post_id], viewer_id)
        return rows[0] if rows else None

    async def get_post_rows_by_ids(self, post_ids: List[str], viewer_id: Optional[str] = None) -> List[PostRow]:
        if not post_ids:
            return []
        wanted = set(post_ids)
        return await self._post_rows([p for p in await self._read("posts") if p["post_id"] in wanted], viewer_id)

    async def list_posts(self, viewer_id=None, limit=20, offset=0, post_filter="all") -> List[PostRow]:
        return await self._list_newest(await self._read("posts"), viewer_id, limit, offset, post_filter)

    async def list_posts_by_tag(self, tag: str, viewer_id=None, limit=20, offset=0, post_filter="all") -> List[PostRow]:
        records = [p for p in await self._read("posts") if tag in p.get("tags", [])]
        return await self._list_newest(records, viewer_id, limit, offset, post_filter)

    async def list_posts_by_author(self, author_id: str, viewer_id=None, limit=20, offset=0, post_filter="all") -> List[PostRow]:
        records = [p for p in await self._read("posts") if p["author_id"] == author_id]
        return await self._list_newest(records, viewer_id, limit, offset, post_filter)

    async def list_posts_by_authors(self, author_ids: List[str], viewer_id=None, limit=20, offset=0, post_filter="all") -> List[PostRow]:
        if not author_ids:
            return []
        wanted = set(author_ids)
        records = [p for p in await self._read("posts") if p["author_id"] in wanted]
        return await self._list_newest(records, viewer_id, limit, offset, post_filter)

    async def search_posts(self, query: str, viewer_id=None, limit=20, offset=0, post_filter="all") -> List[PostRow]:
        needle = query.lower()
        records = [
            p for p in await self._read("posts")
            if needle in (p.get("content") or "").lower()
            or any(needle in tag.lower() for tag in p.get("tags", []))
        ]
        return await self._list_newest(records, viewer_id, limit, offset, post_filter)

    async def _engaged_post_rows(self, table: str, user_id: str, viewer_id: str, limit: int, offset: int) -> List[PostRow]:
        posts = {p["post_id"]: p for p in await self._read("posts")}
        engagements = _newest_first([r for r in await self._read(table) if r["user_id"] == user_id])
        records = [posts[r["post_id"]] for r in engagements if r["post_id"] in posts]
        return await self._post_rows(_page(records, limit, offset), viewer_id)

    async def list_bookmarked_post_rows(self, user_id: str, limit: int = 20, offset: int = 0) -> List[PostRow]:
        return await self._engaged_post_rows("bookmarks", user_id, user_id, limit, offset)

    async def list_liked_post_rows(self, user_id: str, viewer_id=None, limit: int = 20, offset: int = 0) -> List[PostRow]:
        return await self._engaged_post_rows("likes", user_id, viewer_id or user_id, limit, offset)

    async def get_trending_tags(self, limit: Optional[int] = 10) -> List[Tuple[str, int]]:
        usage = Counter(tag for p in await self._read("posts") for tag in p.get("tags", []))
        ranked = sorted(usage.items(), key=lambda item: (-item[1], item[0]))
        return ranked if limit is None else ranked[:limit]

    async def list_tag_usage(self) -> List[Tuple[str, int]]:
        return await self.get_trending_tags(limit=None)

    async def count_posts_by_author(self, author_id: str) -> int:
        return sum(1 for p in await self._read("posts") if p["author_id"] == author_id)

    # ===== Comments =====

    def _comment_ns(self, record: dict, users: dict):
        data = _parse_times(record)
        data["author"] = self._user_ns(users.get(record["author_id"]))
        return SimpleNamespace(**data)

    async def create_comment(self, post_id: str, author_id: str, content: str):
        record = await self._insert("comments", {
            "comment_id": _new_id(),
            "post_id": post_id,
            "author_id": author_id,
            "content": content,
            "created_at": _now(),
        })
        return self._comment_ns(record, await self._users_by_id())

    async def get_comment_by_id(self, comment_id: str):
        record = next((c for c in await self._read("comments") if c["comment_id"] == comment_id), None)
        return self._comment_ns(record, await self._users_by_id()) if record else None

    async def list_comments_by_post(self, post_id: str) -> list:
        users = await self._users_by_id()
        records = _newest_first([c for c in await self._read("comments") if c["post_id"] == post_id])
        return [self._comment_ns(c, users) for c in records]

    async def delete_comment(self, comment_id: str, author_id: str) -> bool:
        async with self._lock:
            comments = await self._read("comments")
            remaining = [c for c in comments if not (c["comment_id"] == comment_id and c["author_id"] == author_id)]
            if len(remaining) == len(comments):
                return False
            await self._write("comments", remaining)
        return True

    # ===== Likes / Bookmarks =====

    async def _toggle(self, table: str, id_field: str, post_id: str, user_id: str) -> bool:
        async with self._lock:
            records = await self._read(table)
            remaining = [r for r in records if not (r["post_id"] == post_id and r["user_id"] == user_id)]
            if len(remaining) != len(records):
                await self._write(table, remaining)
                return False
            records.append({id_field: _new_id(), "post_id": post_id, "user_id": user_id, "created_at": _now()})
            await self._write(table, records)
        return True

    async def toggle_like(self, post_id: str, user_id: str) -> bool:
        return await self._toggle("likes", "like_id", post_id, user_id)

    async def toggle_bookmark(self, post_id: str, user_id: str) -> bool:
        return await self._toggle("bookmarks", "bookmark_id", post_id, user_id)

    async def is_post_liked(self, post_id: str, user_id: str) -> bool:
        return any(r["post_id"] == post_id and r["user_id"] == user_id for r in await self._read("likes"))

    async def is_post_bookmarked(self, post_id: str, user_id: str) -> bool:
        return any(r["post_id"] == post_id and r["user_id"] == user_id for r in await self._read("bookmarks"))

    # ===== Follows =====

    async def toggle_follow(self, follower_id: str, following_id: str) -> bool:
        if follower_id == following_id:
            return False
        async with self._lock:
            follows = await self._read("follows")
            remaining = [
                f for f in follows
                if not (f["follower_id"] == follower_id and f["following_id"] == following_id)
            ]
            if len(remaining) != len(follows):
                await self._write("follows", remaining)
                return False
            follows.append({
                "follow_id": _new_id(),
                "follower_id": follower_id,
                "following_id": following_id,
                "created_at": _now(),
            })
            await self._write("follows", follows)
        return True

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        return any(
            f["follower_id"] == follower_id and f["following_id"] == following_id
            for f in await self._read("follows")
        )

    async def _follow_users(self, match_field: str, user_field: str, user_id: str) -> list:
        users = await self._users_by_id()
        follows = _newest_first([f for f in await self._read("follows") if f[match_field] == user_id])
        return [self._user_ns(users[f[user_field]]) for f in follows if f[user_field] in users]

    async def list_followers(self, user_id: str) -> list:
        return await self._follow_users("following_id", "follower_id", user_id)

    async def list_following(self, user_id: str) -> list:
        return await self._follow_users("follower_id", "following_id", user_id)

    async def list_following_ids(self, user_id: str) -> List[str]:
        return [f["following_id"] for f in await self._read("follows") if f["follower_id"] == user_id]

    async def list_follower_ids(self, user_id: str) -> List[str]:
        return [f["follower_id"] for f in await self._read("follows") if f["following_id"] == user_id]

    async def count_followers(self, user_id: str) -> int:
        return len(await self.list_follower_ids(user_id))

    async def count_following(self, user_id: str) -> int:
        return len(await self.list_following_ids(user_id))

    # ===== Friend requests =====

    def _friend_request_ns(self, record: dict, users: dict):
        data = _parse_times(record)
        data["status"] = FriendRequestStatusEnum(record["status"])
        data["requester"] = self._user_ns(users.get(record["requester_id"]))
        data["target"] = self._user_ns(users.get(record["target_id"]))
        return SimpleNamespace(**data)

    @staticmethod
    def _is_pair(record: dict, user_a: str, user_b: str) -> bool:
        return {record["requester_id"], record["target_id"]} == {user_a, user_b}

    async def send_friend_request(self, requester_id: str, target_id: str):
        if requester_id == target_id:
            raise InvalidOperationError("不能對自己送出好友邀請")
        async with self._lock:
            requests = await self._read("friend_requests")
            if any(self._is_pair(r, requester_id, target_id) for r in requests):
                raise ConflictError("好友邀請已存在")

            now = _now()
            record = {
                "request_id": _new_id(),
                "requester_id": requester_id,
                "target_id": target_id,
                "status": FriendRequestStatusEnum.pending.value,
                "created_at": now,
                "updated_at": now,
            }
            requests.append(record)
            await self._write("friend_requests", requests)
        return self._friend_request_ns(record, await self._users_by_id())

    async def get_friend_request_by_id(self, request_id: str):
        record = next((r for r in await self._read("friend_requests") if r["request_id"] == request_id), None)
        return self._friend_request_ns(record, await self._users_by_id()) if record else None

    async def respond_to_friend_request(self, request_id: str, status: FriendRequestStatusEnum):
        async with self._lock:
            requests = await self._read("friend_requests")
            record = next((r for r in requests if r["request_id"] == request_id), None)
            if record is None:
                raise NotFoundError("好友邀請不存在")
            if record["status"] != FriendRequestStatusEnum.pending.value:
                raise InvalidOperationError("好友邀請已處理")

            record["status"] = FriendRequestStatusEnum(status).value
            record["updated_at"] = _now()
            await self._write("friend_requests", requests)
        logger.info(f"好友邀請 {request_id} -> {record['status']}")
        return self._friend_request_ns(record, await self._users_by_id())

    async def list_friend_requests(self, user_id: str, direction: str = "received") -> list:
        field = "target_id" if direction == "received" else "requester_id"
        users = await self._users_by_id()
        records = _newest_first([
            r for r in await self._read("friend_requests")
            if r[field] == user_id and r["status"] == FriendRequestStatusEnum.pending.value
        ])
        return [self._friend_request_ns(r, users) for r in records]

    async def _friend_ids(self, user_id: str) -> List[str]:
        ids = []
        for r in await self._read("friend_requests"):
            if r["status"] != FriendRequestStatusEnum.accepted.value:
                continue
            if r["requester_id"] == user_id:
                ids.append(r["target_id"])
            elif r["target_id"] == user_id:
                ids.append(r["requester_id"])
        return ids

    async def list_friends(self, user_id: str) -> list:
        users = await self._users_by_id()
        friends = [users[i] for i in await self._friend_ids(user_id) if i in users]
        friends.sort(key=lambda u: u["username"])
        return [self._user_ns(u) for u in friends]

    async def count_friends(self, user_id: str) -> int:
        return len(await self._friend_ids(user_id))

    async def get_friendship_status(self, user_id: str, other_id: str) -> str:
        record = next(
            (r for r in await self._read("friend_requests") if self._is_pair(r, user_id, other_id)), None
        )
        if record is None or record["status"] == FriendRequestStatusEnum.rejected.value:
            return "none"
        if record["status"] == FriendRequestStatusEnum.accepted.value:
            return "friends"
        return "pending_sent" if record["requester_id"] == user_id else "pending_received"

    # ===== Messages =====

    def _message_ns(self, record: dict, users: dict):
        data = _parse_times(record)
        data["sender"] = self._user_ns(users.get(record["sender_id"]))
        data["receiver"] = self._user_ns(users.get(record["receiver_id"]))
        return SimpleNamespace(**data)

    async def send_message(self, message_data, sender_id: str):
        record = await self._insert("messages", {
            "message_id": _new_id(),
            "sender_id": sender_id,
            "receiver_id": message_data.receiver_id,
            "content": message_data.content,
            "message_type": message_data.message_type,
            "read_at": None,
            "created_at": _now(),
        })
        return self._message_ns(record, await self._users_by_id())

    async def list_messages_between(self, user_a: str, user_b: str, limit: int = 50, offset: int = 0) -> list:
        users = await self._users_by_id()
        records = _newest_first([
            m for m in await self._read("messages")
            if {m["sender_id"], m["receiver_id"]} == {user_a, user_b}
        ])
        return [self._message_ns(m, users) for m in _page(records, limit, offset)]

    async def mark_messages_as_read(self, sender_id: str, receiver_id: str) -> int:
        async with self._lock:
            messages = await self._read("messages")
            now = _now()
            updated = 0
            for m in messages:
                if m["sender_id"] == sender_id and m["receiver_id"] == receiver_id and m.get("read_at") is None:
                    m["read_at"] = now
                    updated += 1
            if updated:
                await self._write("messages", messages)
        return updated

    async def list_conversations(self, user_id: str) -> List[ConversationRow]:
        users = await self._users_by_id()
        latest = {}
        unread = Counter()
        # _newest_first：每位對象第一次遇到的就是最後一則
        for m in _newest_first(await self._read("messages")):
            if user_id not in (m["sender_id"], m["receiver_id"]):
                continue
            peer = m["receiver_id"] if m["sender_id"] == user_id else m["sender_id"]
            latest.setdefault(peer, m)
            if m["receiver_id"] == user_id and m.get("read_at") is None:
                unread[peer] += 1
        return [
            ConversationRow(self._user_ns(users.get(peer)), self._message_ns(m, users), unread[peer])
            for peer, m in latest.items()
        ]

    # ===== Notifications =====

    def _notification_ns(self, record: dict, users: dict, posts: dict):
        data = _parse_times(record)
        post = posts.get(record.get("post_id"))
        data["post"] = SimpleNamespace(post_id=post["post_id"], content=post["content"]) if post else None
        data["author"] = self._user_ns(users.get(record.get("author_id")))
        return SimpleNamespace(**data)

    @staticmethod
    def _notification_record(notification) -> dict:
        return {
            "notification_id": getattr(notification, "notification_id", None) or _new_id(),
            "user_id": notification.user_id,
            "post_id": notification.post_id,
            "author_id": notification.author_id,
            "type": notification.type or "new_post",
            "title": notification.title,
            "message": notification.message,
            "is_read": bool(notification.is_read),
            "created_at": _now(),
        }

    async def create_notification(self, notification):
        record = await self._insert("notifications", self._notification_record(notification))
        return self._notification_ns(record, await self._users_by_id(), {})

    async def create_notifications(self, notifications: list) -> int:
        if not notifications:
            return 0
        async with self._lock:
            records = await self._read("notifications")
            records.extend(self._notification_record(n) for n in notifications)
            await self._write("notifications", records)
        return len(notifications)

    async def get_notification_by_id(self, notification_id: str):
        record = next(
            (n for n in await self._read("notifications") if n["notification_id"] == notification_id), None
        )
        if record is None:
            return None
        posts = {p["post_id"]: p for p in await self._read("posts")}
        return self._notification_ns(record, await self._users_by_id(), posts)

    async def list_notifications_by_user(self, user_id: str, limit: int = 20, offset: int = 0) -> list:
        users = await self._users_by_id()
        posts = {p["post_id"]: p for p in await self._read("posts")}
        records = _newest_first([n for n in await self._read("notifications") if n["user_id"] == user_id])
        return [self._notification_ns(n, users, posts) for n in _page(records, limit, offset)]

    async def mark_as_read(self, notification):
        async with self._lock:
            records = await self._read("notifications")
            for record in records:
                if record["notification_id"] == notification.notification_id:
                    record["is_read"] = True
            await self._write("notifications", records)
        notification.is_read = True
        return notification

    async def mark_all_as_read(self, user_id: str) -> int:
        async with self._lock:
            records = await self._read("notifications")
            updated = 0
            for record in records:
                if record["user_id"] == user_id and not record["is_read"]:
                    record["is_read"] = True
                    updated += 1
            if updated:
                await self._write("notifications", records)
        return updated

    async def count_unread(self, user_id: str) -> int:
        return sum(1 for n in await self._read("notifications") if n["user_id"] == user_id and not n["is_read"])


_file_storage: Optional[FileStorage] = None


def get_file_storage() -> FileStorage:
    """整個行程共用一個 FileStorage"""
    global _file_storage
    if _file_storage is None:
        _file_storage = FileStorage(settings.FILE_STORAGE_DIR)
        logger.info(f"使用 JSON 檔案儲存: {settings.FILE_STORAGE_DIR}")
    return _file_storage
