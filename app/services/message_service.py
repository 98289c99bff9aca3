# app/services/message_service.py
# 一對一私訊

import logging
from typing import List
from fastapi import HTTPException, status

from app.models.user import User
from app.repositories.base import repository_for
from app.repositories.message_repo import MessageRepository
from app.repositories.user_repo import UserRepository
from app.schemas.message_schema import ConversationOut, MessageCreate, MessageOut
from app.schemas.user_schema import UserBriefOut

logger = logging.getLogger(__name__)

class MessageService:
    def __init__(self, db):
        self.message_repo = repository_for(MessageRepository, db)
        self.user_repo = repository_for(UserRepository, db)

    async def send_message(self, message_data: MessageCreate, sender: User):
        if message_data.receiver_id == sender.user_id:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "不能傳訊息給自己")
        if await self.user_repo.get_user_by_id(message_data.receiver_id) is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "接收者不存在")
        return await self.message_repo.send_message(message_data, sender.user_id)

    async def get_thread(self, user: User, peer_id: str, limit: int = 50, offset: int = 0) -> list:
        """
        開啟與某人的對話：先把對方傳來的未讀訊息標為已讀，再回傳訊息 (由新到舊)
        """
        if await self.user_repo.get_user_by_id(peer_id) is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "使用者不存在")
        marked = await self.message_repo.mark_messages_as_read(peer_id, user.user_id)
        if marked:
            logger.info(f"使用者 {user.user_id} 已讀 {marked} 則來自 {peer_id} 的訊息")
        return await self.message_repo.list_messages_between(user.user_id, peer_id, limit, offset)

    async def list_conversations(self, user: User) -> List[ConversationOut]:
        rows = await self.message_repo.list_conversations(user.user_id)
        return [
            ConversationOut(
                user=UserBriefOut.model_validate(row.user),
                last_message=MessageOut.model_validate(row.last_message),
                unread_count=row.unread_count,
            )
            for row in rows
            if row.user is not None
        ]
