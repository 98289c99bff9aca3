# app/services/notification_service.py

from fastapi import HTTPException, status
from typing import List

from app.models.user import User
from app.models.notification import Notification
from app.repositories.base import repository_for
from app.repositories.notification_repo import NotificationRepository

import logging

logger = logging.getLogger(__name__)

class NotificationService:
    def __init__(self, db):
        self.repo = repository_for(NotificationRepository, db)

    async def get_my_notifications(self, user: User, limit: int = 20, offset: int = 0) -> List[Notification]:
        """
        (API 用) 獲取當前登入者的通知列表
        """
        return await self.repo.list_notifications_by_user(user.user_id, limit, offset)

    async def mark_notification_as_read(self, notification_id: str, user: User) -> Notification:
        """
        (API 用) 將通知設為已讀，並檢查權限
        """
        notification = await self.repo.get_notification_by_id(notification_id)

        if not notification:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "通知不存在")

        # (重要) 只能標記自己的通知
        if notification.user_id != user.user_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "無權操作此通知")

        if notification.is_read:
            return notification # 已讀，直接回傳

        return await self.repo.mark_as_read(notification)

    async def mark_all_as_read(self, user: User) -> int:
        updated = await self.repo.mark_all_as_read(user.user_id)
        logger.info(f"使用者 {user.user_id} 將 {updated} 則通知標為已讀")
        return updated

    async def count_unread(self, user: User) -> int:
        return await self.repo.count_unread(user.user_id)
