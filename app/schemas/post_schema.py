# app/schemas/post_schema.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from app.schemas.user_schema import UserBriefOut

MAX_IMAGES = 5
MAX_TAG_LENGTH = 50


def normalize_tags(tags: List[str]) -> List[str]:
    """
    去除空白與開頭的 '#'，丟棄空字串，重複的標籤只保留第一次出現的位置
    """
    cleaned = []
    for raw in tags:
        tag = raw.strip().lstrip("#").strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"標籤長度不可超過 {MAX_TAG_LENGTH} 個字元")
        if tag not in cleaned:
            cleaned.append(tag)
    return cleaned


# 1. 發文的 Request Body
class PostCreate(BaseModel):
    content: str = Field("", max_length=5000)
    tags: List[str] = []
    image_url: Optional[str] = Field(None, max_length=500)
    image_urls: List[str] = Field([], max_length=MAX_IMAGES)
    quoted_post_id: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)

    @model_validator(mode="after")
    def require_content_or_quote(self):
        # 引用貼文時允許空白內容
        if not self.content.strip() and not self.quoted_post_id:
            raise ValueError("貼文內容不可為空")
        return self


# 2. 編輯貼文 (所有欄位皆可選)
class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, max_length=5000)
    tags: Optional[List[str]] = None
    image_url: Optional[str] = Field(None, max_length=500)
    image_urls: Optional[List[str]] = Field(None, max_length=MAX_IMAGES)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(v) if v is not None else None


# 3. 回傳給前端的貼文 (view-model：作者、即時計數、觀看者狀態、引用貼文)
class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: str
    author_id: str
    content: str
    image_url: Optional[str] = None
    image_urls: List[str] = []
    tags: List[str] = []
    quoted_post_id: Optional[str] = None
    sentiment_score: Optional[int] = None
    sentiment_confidence: Optional[int] = None
    sentiment_analyzed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    author: Optional[UserBriefOut] = None
    # 只解析一層，被引用貼文本身的 quoted_post 永遠是 None
    quoted_post: Optional["PostOut"] = None

    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False
    is_bookmarked: bool = False


class LikeStatusOut(BaseModel):
    is_liked: bool


class BookmarkStatusOut(BaseModel):
    is_bookmarked: bool


class ReportCreate(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class TrendingTagOut(BaseModel):
    tag: str
    count: int


class TagSuggestionsOut(BaseModel):
    tags: List[str]
