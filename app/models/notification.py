# app/models/notification.py

import uuid
from sqlalchemy import Column, String, TEXT, BOOLEAN, CHAR, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow

class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # 接收通知的 user
    user_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    # 來源貼文 (貼文刪除後為 NULL)
    post_id = Column(CHAR(36), ForeignKey("posts.post_id", ondelete="SET NULL"), nullable=True)
    # 觸發通知的使用者
    author_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)

    type = Column(String(50), nullable=False, default="new_post")
    title = Column(String(255), nullable=False)
    message = Column(TEXT, nullable=False)

    is_read = Column(BOOLEAN, default=False, nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, index=True)

    post = relationship("Post", lazy="selectin")
    author = relationship("User", foreign_keys="[Notification.author_id]", lazy="selectin")
