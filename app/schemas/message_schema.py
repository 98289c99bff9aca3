# app/schemas/message_schema.py

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from app.schemas.user_schema import UserBriefOut

class MessageCreate(BaseModel):
    """
    傳送私訊的請求體
    """
    receiver_id: str = Field(..., description="接收者 ID")
    content: str = Field(..., min_length=1, max_length=5000, description="訊息內容")
    message_type: str = Field('text', max_length=50, description="'text' or 'image'")

class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    message_id: str
    sender_id: str
    receiver_id: str
    content: str
    message_type: str = "text"
    read_at: Optional[datetime] = None
    created_at: datetime
    # 為了顯示雙方名稱，巢狀 User
    sender: Optional[UserBriefOut] = None
    receiver: Optional[UserBriefOut] = None

class ConversationOut(BaseModel):
    """
    對話列表：每位對象一筆，附最後一則訊息與未讀數
    """
    user: UserBriefOut
    last_message: MessageOut
    unread_count: int
