# app/repositories/message_repo.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, case, func, update
from typing import List

from app.core.database import utcnow
from app.models.message import Message
from app.repositories.rows import ConversationRow
from app.schemas.message_schema import MessageCreate

class MessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def send_message(self, message_data: MessageCreate, sender_id: str) -> Message:
        """
        儲存私訊 (read_at 一律為 NULL)
        """
        db_message = Message(
            sender_id=sender_id,
            receiver_id=message_data.receiver_id,
            content=message_data.content,
            message_type=message_data.message_type,
        )
        self.db.add(db_message)
        await self.db.commit()

        # 重新查詢以載入 sender / receiver
        stmt = (
            select(Message)
            .where(Message.message_id == db_message.message_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    def _between(user_a: str, user_b: str):
        return or_(
            and_(Message.sender_id == user_a, Message.receiver_id == user_b),
            and_(Message.sender_id == user_b, Message.receiver_id == user_a),
        )

    async def list_messages_between(self, user_a: str, user_b: str, limit: int = 50, offset: int = 0) -> List[Message]:
        """
        兩人之間 (雙向) 的訊息，由新到舊
        """
        stmt = (
            select(Message)
            .where(self._between(user_a, user_b))
            .order_by(Message.created_at.desc(), Message.message_id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_messages_as_read(self, sender_id: str, receiver_id: str) -> int:
        """
        將 sender -> receiver 尚未讀取的訊息標記為已讀 (重複呼叫不影響結果)
        """
        stmt = (
            update(Message)
            .where(
                Message.sender_id == sender_id,
                Message.receiver_id == receiver_id,
                Message.read_at.is_(None),
            )
            .values(read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount

    async def list_conversations(self, user_id: str) -> List[ConversationRow]:
        """
        依對話對象分組：每位對象一筆 (最後一則訊息 + 對方傳來的未讀數)
        依最後訊息時間由新到舊
        """
        # 1. 每位對象的最後訊息時間
        peer_id = case(
            (Message.sender_id == user_id, Message.receiver_id),
            else_=Message.sender_id,
        ).label("peer_id")
        touching = (
            select(peer_id, Message.created_at)
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .subquery()
        )
        latest = (
            select(touching.c.peer_id, func.max(touching.c.created_at).label("last_at"))
            .group_by(touching.c.peer_id)
            .subquery()
        )

        # 2. 取回那則訊息本身
        stmt = (
            select(Message, latest.c.peer_id)
            .join(
                latest,
                and_(
                    Message.created_at == latest.c.last_at,
                    or_(
                        and_(Message.sender_id == user_id, Message.receiver_id == latest.c.peer_id),
                        and_(Message.receiver_id == user_id, Message.sender_id == latest.c.peer_id),
                    ),
                ),
            )
            .order_by(Message.created_at.desc(), Message.message_id.desc())
        )
        result = await self.db.execute(stmt)

        # 3. 每位對象傳來的未讀數
        unread_stmt = (
            select(Message.sender_id, func.count(Message.message_id))
            .where(Message.receiver_id == user_id, Message.read_at.is_(None))
            .group_by(Message.sender_id)
        )
        unread = dict((await self.db.execute(unread_stmt)).all())

        conversations = []
        seen = set()
        for message, peer in result.all():
            # 同一時間有兩則訊息時只保留一則
            if peer in seen:
                continue
            seen.add(peer)
            peer_user = message.receiver if message.sender_id == user_id else message.sender
            conversations.append(ConversationRow(peer_user, message, int(unread.get(peer, 0))))
        return conversations
