# app/repositories/engagement_repo.py
# 按讚 / 收藏：先讀後寫的切換 (toggle)，唯一鍵保證同一組 (post, user) 最多一列

import logging
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.engagement import Bookmark, Like

logger = logging.getLogger(__name__)

class EngagementRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _toggle(self, model, post_id: str, user_id: str) -> bool:
        """
        存在就刪除 (回傳 False)，不存在就新增 (回傳 True)
        """
        stmt = select(model).where(model.post_id == post_id, model.user_id == user_id)
        result = await self.db.execute(stmt)
        if result.scalars().first() is not None:
            await self.db.execute(
                delete(model).where(model.post_id == post_id, model.user_id == user_id)
            )
            await self.db.commit()
            return False

        self.db.add(model(post_id=post_id, user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # 另一個同時送出的請求已經寫入同一組 (post, user)
            await self.db.rollback()
            logger.warning(f"{model.__tablename__} 重複寫入: post={post_id} user={user_id}")
        return True

    async def toggle_like(self, post_id: str, user_id: str) -> bool:
        return await self._toggle(Like, post_id, user_id)

    async def toggle_bookmark(self, post_id: str, user_id: str) -> bool:
        return await self._toggle(Bookmark, post_id, user_id)

    async def is_post_liked(self, post_id: str, user_id: str) -> bool:
        stmt = select(Like.like_id).where(Like.post_id == post_id, Like.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def is_post_bookmarked(self, post_id: str, user_id: str) -> bool:
        stmt = select(Bookmark.bookmark_id).where(Bookmark.post_id == post_id, Bookmark.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.first() is not None
