# app/schemas/comment_schema.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from app.schemas.user_schema import UserBriefOut

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comment_id: str
    post_id: str
    author_id: str
    content: str
    created_at: datetime
    author: Optional[UserBriefOut] = None
