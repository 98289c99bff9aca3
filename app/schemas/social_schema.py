# app/schemas/social_schema.py
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict
from app.models.social import FriendRequestStatusEnum
from app.schemas.user_schema import UserBriefOut

FriendshipStatus = Literal["none", "pending_sent", "pending_received", "friends"]

class FollowStatusOut(BaseModel):
    is_following: bool

class FriendRequestCreate(BaseModel):
    target_id: str

class FriendRequestRespond(BaseModel):
    # 只能回覆為接受或拒絕
    status: Literal["accepted", "rejected"]

class FriendRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_id: str
    requester_id: str
    target_id: str
    status: FriendRequestStatusEnum
    created_at: datetime
    updated_at: Optional[datetime] = None
    requester: Optional[UserBriefOut] = None
    target: Optional[UserBriefOut] = None

class FriendshipStatusOut(BaseModel):
    status: FriendshipStatus
