# app/models/social.py
# 社交關係：追蹤 (單向) 與好友邀請 (pending -> accepted / rejected)

import uuid
import enum
from sqlalchemy import Column, ForeignKey, TIMESTAMP, CHAR, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow

class FriendRequestStatusEnum(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"

class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),)

    follow_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    follower_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

class FriendRequest(Base):
    __tablename__ = "friend_requests"

    request_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    target_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(FriendRequestStatusEnum, name="friend_request_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=FriendRequestStatusEnum.pending,
        index=True,
    )
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    # --- 必要：兩個外鍵都指向 users，需明確指定 foreign_keys ---
    requester = relationship("User", foreign_keys="[FriendRequest.requester_id]", lazy="selectin")
    target = relationship("User", foreign_keys="[FriendRequest.target_id]", lazy="selectin")
