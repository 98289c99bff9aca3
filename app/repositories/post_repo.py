# app/repositories/post_repo.py
# 貼文 (內容) 的資料庫操作：列表查詢一次算出按讚數 / 留言數 / 觀看者狀態

import uuid
from typing import List, Optional, Tuple
from sqlalchemy import delete, exists, func, literal, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import aliased

from app.core.database import utcnow
from app.core.exceptions import InvalidOperationError
from app.models.comment import Comment
from app.models.engagement import Bookmark, Like
from app.models.notification import Notification
from app.models.post import Post, PostTag
from app.repositories.rows import PostRow
from app.schemas.post_schema import PostCreate


class PostRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # --- 查詢組裝 ---

    def _post_row_stmt(self, viewer_id: Optional[str] = None):
        """
        Post + 按讚數 + 留言數 + (觀看者) 是否按讚 / 收藏
        全部是關聯子查詢，整頁只需要一次 SQL
        """
        likes_count = (
            select(func.count(Like.like_id))
            .where(Like.post_id == Post.post_id)
            .correlate(Post)
            .scalar_subquery()
        )
        comments_count = (
            select(func.count(Comment.comment_id))
            .where(Comment.post_id == Post.post_id)
            .correlate(Post)
            .scalar_subquery()
        )
        if viewer_id:
            is_liked = (
                exists()
                .where(Like.post_id == Post.post_id, Like.user_id == viewer_id)
                .correlate(Post)
            )
            is_bookmarked = (
                exists()
                .where(Bookmark.post_id == Post.post_id, Bookmark.user_id == viewer_id)
                .correlate(Post)
            )
        else:
            is_liked = literal(False)
            is_bookmarked = literal(False)

        return select(
            Post,
            likes_count.label("likes_count"),
            comments_count.label("comments_count"),
            is_liked.label("is_liked"),
            is_bookmarked.label("is_bookmarked"),
        ).execution_options(populate_existing=True)

    @staticmethod
    def _apply_filter(stmt, post_filter: str):
        if post_filter == "quotes":
            return stmt.where(Post.quoted_post_id.is_not(None))
        if post_filter == "original":
            return stmt.where(Post.quoted_post_id.is_(None))
        return stmt

    async def _fetch_rows(self, stmt) -> List[PostRow]:
        result = await self.db.execute(stmt)
        return [
            PostRow(post, int(likes or 0), int(comments or 0), bool(liked), bool(bookmarked))
            for post, likes, comments, liked, bookmarked in result.all()
        ]

    async def _list_newest(self, stmt, limit: int, offset: int) -> List[PostRow]:
        stmt = stmt.order_by(Post.created_at.desc(), Post.post_id.desc()).limit(limit).offset(offset)
        return await self._fetch_rows(stmt)

    # --- 寫入 ---

    async def create_post(self, post_data: PostCreate, author_id: str) -> Post:
        """
        建立貼文並寫入 貼文-標籤 關聯表 (保留順序)
        """
        if post_data.quoted_post_id:
            quoted = await self.get_post_by_id(post_data.quoted_post_id)
            if quoted is None:
                raise InvalidOperationError("被引用的貼文不存在")

        new_post_id = str(uuid.uuid4())
        db_post = Post(
            post_id=new_post_id,
            author_id=author_id,
            content=post_data.content,
            image_url=post_data.image_url,
            image_urls=list(post_data.image_urls),
            quoted_post_id=post_data.quoted_post_id,
            tag_links=[
                PostTag(post_id=new_post_id, tag=tag, position=index)
                for index, tag in enumerate(post_data.tags)
            ],
        )
        self.db.add(db_post)
        await self.db.commit()

        # 重新查詢一次，讓 author 等關聯以 selectin 載入
        return await self.get_post_by_id(new_post_id)

    async def update_post(self, post_id: str, updates: dict, author_id: str) -> Post | None:
        """
        只允許作者本人修改；找不到 (或不是作者) 時回傳 None
        """
        stmt = select(Post).where(Post.post_id == post_id, Post.author_id == author_id)
        result = await self.db.execute(stmt)
        post = result.scalars().first()
        if post is None:
            return None

        tags = updates.pop("tags", None)
        for field, value in updates.items():
            setattr(post, field, value)

        if tags is not None:
            # 沿用已存在的標籤列，避免 (post_id, tag) 唯一鍵在同一次 flush 中衝突
            existing = {link.tag: link for link in post.tag_links}
            links = []
            for index, tag in enumerate(tags):
                link = existing.get(tag) or PostTag(post_id=post_id, tag=tag)
                link.position = index
                links.append(link)
            post.tag_links = links

        post.updated_at = utcnow()
        await self.db.commit()
        return await self.get_post_by_id(post_id)

    async def delete_post(self, post_id: str, author_id: Optional[str] = None) -> bool:
        """
        刪除貼文以及它的留言 / 按讚 / 收藏 / 標籤
        - 引用它的貼文保留，quoted_post_id 設為 NULL
        - 通知保留，post_id 設為 NULL
        - author_id 為 None 時不檢查作者 (管理員)
        """
        stmt = select(Post.post_id).where(Post.post_id == post_id)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            return False

        await self.db.execute(
            update(Post).where(Post.quoted_post_id == post_id).values(quoted_post_id=None)
        )
        await self.db.execute(
            update(Notification).where(Notification.post_id == post_id).values(post_id=None)
        )
        for model in (Like, Bookmark, Comment, PostTag):
            await self.db.execute(delete(model).where(model.post_id == post_id))

        result = await self.db.execute(delete(Post).where(Post.post_id == post_id))
        await self.db.commit()
        return result.rowcount > 0

    async def update_post_sentiment(self, post_id: str, score: int, confidence: int) -> bool:
        stmt = (
            update(Post)
            .where(Post.post_id == post_id)
            .values(
                sentiment_score=score,
                sentiment_confidence=confidence,
                sentiment_analyzed_at=utcnow(),
                # 背景分析不算是編輯
                updated_at=Post.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0

    # --- 單筆查詢 ---

    async def get_post_by_id(self, post_id: str) -> Post | None:
        stmt = select(Post).where(Post.post_id == post_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_post_row(self, post_id: str, viewer_id: Optional[str] = None) -> PostRow | None:
        stmt = self._post_row_stmt(viewer_id).where(Post.post_id == post_id)
        rows = await self._fetch_rows(stmt)
        return rows[0] if rows else None

    async def get_post_rows_by_ids(self, post_ids: List[str], viewer_id: Optional[str] = None) -> List[PostRow]:
        """
        一次取回多篇貼文 (解析引用貼文用，單一 IN 查詢)
        """
        if not post_ids:
            return []
        stmt = self._post_row_stmt(viewer_id).where(Post.post_id.in_(post_ids))
        return await self._fetch_rows(stmt)

    # --- 列表 (一律由新到舊) ---

    async def list_posts(
        self, viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0, post_filter: str = "all"
    ) -> List[PostRow]:
        stmt = self._apply_filter(self._post_row_stmt(viewer_id), post_filter)
        return await self._list_newest(stmt, limit, offset)

    async def list_posts_by_tag(
        self, tag: str, viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0, post_filter: str = "all"
    ) -> List[PostRow]:
        tagged = select(PostTag.post_id).where(PostTag.tag == tag)
        stmt = self._post_row_stmt(viewer_id).where(Post.post_id.in_(tagged))
        return await self._list_newest(self._apply_filter(stmt, post_filter), limit, offset)

    async def list_posts_by_author(
        self, author_id: str, viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0, post_filter: str = "all"
    ) -> List[PostRow]:
        stmt = self._post_row_stmt(viewer_id).where(Post.author_id == author_id)
        return await self._list_newest(self._apply_filter(stmt, post_filter), limit, offset)

    async def list_posts_by_authors(
        self, author_ids: List[str], viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0, post_filter: str = "all"
    ) -> List[PostRow]:
        # 沒有追蹤任何人：直接回傳空列表，不查詢
        if not author_ids:
            return []
        stmt = self._post_row_stmt(viewer_id).where(Post.author_id.in_(author_ids))
        return await self._list_newest(self._apply_filter(stmt, post_filter), limit, offset)

    async def search_posts(
        self, query: str, viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0, post_filter: str = "all"
    ) -> List[PostRow]:
        """
        內容或任一標籤 不分大小寫的子字串比對 (% 與 _ 不是萬用字元)
        """
        tagged = select(PostTag.post_id).where(PostTag.tag.icontains(query, autoescape=True))
        stmt = self._post_row_stmt(viewer_id).where(
            or_(Post.content.icontains(query, autoescape=True), Post.post_id.in_(tagged))
        )
        return await self._list_newest(self._apply_filter(stmt, post_filter), limit, offset)

    async def list_bookmarked_post_rows(self, user_id: str, limit: int = 20, offset: int = 0) -> List[PostRow]:
        """
        使用者收藏的貼文，依「收藏時間」由新到舊
        """
        saved = aliased(Bookmark)
        stmt = (
            self._post_row_stmt(user_id)
            .join(saved, saved.post_id == Post.post_id)
            .where(saved.user_id == user_id)
            .order_by(saved.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch_rows(stmt)

    async def list_liked_post_rows(
        self, user_id: str, viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0
    ) -> List[PostRow]:
        """
        使用者按讚的貼文，依「按讚時間」由新到舊
        """
        liked = aliased(Like)
        stmt = (
            self._post_row_stmt(viewer_id or user_id)
            .join(liked, liked.post_id == Post.post_id)
            .where(liked.user_id == user_id)
            .order_by(liked.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch_rows(stmt)

    # --- 標籤與統計 ---

    async def get_trending_tags(self, limit: int = 10) -> List[Tuple[str, int]]:
        """
        依使用次數排序的熱門標籤 (次數相同時依字母排序)
        """
        usage = func.count(PostTag.post_tag_id).label("count")
        stmt = (
            select(PostTag.tag, usage)
            .group_by(PostTag.tag)
            .order_by(usage.desc(), PostTag.tag.asc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [(tag, int(count)) for tag, count in result.all()]

    async def list_tag_usage(self) -> List[Tuple[str, int]]:
        """所有出現過的標籤與使用次數 (標籤建議的候選)"""
        return await self.get_trending_tags(limit=None)

    async def count_posts_by_author(self, author_id: str) -> int:
        stmt = select(func.count(Post.post_id)).where(Post.author_id == author_id)
        result = await self.db.execute(stmt)
        return result.scalar_one()
