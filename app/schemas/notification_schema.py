# app/schemas/notification_schema.py

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

from app.schemas.user_schema import UserBriefOut

class NotificationPostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: str
    content: str

class NotificationOut(BaseModel):
    """
    用於 API 回傳的通知格式 (來源貼文與觸發者可能已不存在)
    """
    model_config = ConfigDict(from_attributes=True)

    notification_id: str
    user_id: str
    post_id: Optional[str] = None
    author_id: Optional[str] = None
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime
    post: Optional[NotificationPostOut] = None
    author: Optional[UserBriefOut] = None

class UnreadCountOut(BaseModel):
    count: int
