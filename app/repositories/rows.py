# app/repositories/rows.py
# 兩種儲存後端 (資料庫 / JSON 檔案) 共用的回傳格式

from typing import Any, NamedTuple


class PostRow(NamedTuple):
    """一篇貼文加上即時計算的計數與觀看者狀態"""
    post: Any
    likes_count: int
    comments_count: int
    is_liked: bool
    is_bookmarked: bool


class ConversationRow(NamedTuple):
    user: Any
    last_message: Any
    unread_count: int


class UserStatsRow(NamedTuple):
    posts_count: int
    followers_count: int
    following_count: int
    friends_count: int
