# app/models/comment.py

import uuid
from sqlalchemy import Column, Text, ForeignKey, TIMESTAMP, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow

class Comment(Base):
    __tablename__ = "comments"

    comment_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(CHAR(36), ForeignKey("posts.post_id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    author = relationship("User", lazy="selectin")
