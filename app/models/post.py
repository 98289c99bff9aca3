# app/models/post.py

import uuid
from sqlalchemy import Column, String, Text, Integer, ForeignKey, TIMESTAMP, CHAR, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow

class Post(Base):
    __tablename__ = "posts"

    post_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False, default="")

    # 舊版單張圖片，以及 (最多 5 張) 有序的多張圖片
    image_url = Column(String(500))
    image_urls = Column(JSON, nullable=False, default=list)

    # 引用貼文：被引用的貼文刪除時設為 NULL，不會連帶刪除引用者
    quoted_post_id = Column(CHAR(36), ForeignKey("posts.post_id", ondelete="SET NULL"), nullable=True, index=True)

    # 情緒分析 (非同步寫入，不阻擋貼文建立)
    sentiment_score = Column(Integer)       # 1-5
    sentiment_confidence = Column(Integer)  # 0-100
    sentiment_analyzed_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, index=True)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    author = relationship("User", lazy="selectin")
    tag_links = relationship(
        "PostTag",
        back_populates="post",
        order_by="PostTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        """依建立時的順序回傳標籤"""
        return [link.tag for link in self.tag_links]


class PostTag(Base):
    """
    貼文-標籤 關聯表 (position 保留顯示順序)
    """
    __tablename__ = "post_tags"
    __table_args__ = (UniqueConstraint("post_id", "tag", name="uq_post_tags_post_tag"),)

    post_tag_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(CHAR(36), ForeignKey("posts.post_id", ondelete="CASCADE"), nullable=False, index=True)
    tag = Column(String(50), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    post = relationship("Post", back_populates="tag_links")
