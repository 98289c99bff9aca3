# app/models/message.py

import uuid
from sqlalchemy import Column, String, Text, ForeignKey, TIMESTAMP, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow

class Message(Base):
    """
    使用者之間的私訊；read_at 在接收者開啟對話時設定 (僅此一次)
    """
    __tablename__ = "messages"

    message_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    message_type = Column(String(50), default="text")
    read_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, index=True)

    # --- 必要：明確指定 foreign_keys ---
    sender = relationship("User", foreign_keys="[Message.sender_id]", lazy="selectin")
    receiver = relationship("User", foreign_keys="[Message.receiver_id]", lazy="selectin")
