# app/repositories/notification_repo.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, update
from typing import List, Optional
import logging

from app.models.notification import Notification

logger = logging.getLogger(__name__)

class NotificationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_notification(self, notification: Notification) -> Notification:
        """
        新增一筆通知
        """
        try:
            self.db.add(notification)
            await self.db.commit()
            return notification
        except Exception as e:
            await self.db.rollback()
            logger.error(f"建立通知失敗: {e}", exc_info=True)
            raise

    async def create_notifications(self, notifications: List[Notification]) -> int:
        """
        批次新增通知 (一次 INSERT)，回傳筆數
        """
        if not notifications:
            return 0
        try:
            self.db.add_all(notifications)
            await self.db.commit()
            return len(notifications)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"批次建立通知失敗: {e}", exc_info=True)
            raise

    async def get_notification_by_id(self, notification_id: str) -> Optional[Notification]:
        """
        依 ID 獲取通知 (主要用於權限檢查)
        """
        stmt = select(Notification).where(Notification.notification_id == notification_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_notifications_by_user(self, user_id: str, limit: int = 20, offset: int = 0) -> List[Notification]:
        """
        獲取某位使用者的通知 (依時間降序排列，附來源貼文與觸發者)
        """
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_as_read(self, notification: Notification) -> Notification:
        """
        將單一通知設為已讀
        """
        notification.is_read = True
        await self.db.commit()
        return notification

    async def mark_all_as_read(self, user_id: str) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount

    async def count_unread(self, user_id: str) -> int:
        stmt = select(func.count(Notification.notification_id)).where(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
        return (await self.db.execute(stmt)).scalar_one()
