# app/schemas/user_schema.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from app.models.user import UserRoleEnum

# 登入請求的格式
class UserLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

# Token 回應的格式
class Token(BaseModel):
    access_token: str
    token_type: str

# Token 內的資料
class TokenData(BaseModel):
    user_id: str
    role: str


# 註冊請求 Body (只需要 username 與 password)
class UserCreate(BaseModel):
    username: str = Field(..., min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=4)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        """
        使用者名稱不可包含空白
        """
        v = v.strip()
        if len(v) < 2:
            raise ValueError('使用者名稱至少 2 個字元')
        if any(ch.isspace() for ch in v):
            raise ValueError('使用者名稱不可包含空白')
        return v


# 個人檔案更新 (所有欄位皆可選)
class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    profile_image_url: Optional[str] = Field(None, max_length=500)


class RoleUpdate(BaseModel):
    role: UserRoleEnum


# 嵌入在貼文、留言、訊息中的精簡使用者資料
class UserBriefOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    role: UserRoleEnum = UserRoleEnum.user


# 註冊/查詢使用者的安全回應 (不含密碼)
class UserOut(UserBriefOut):
    email: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserStats(BaseModel):
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    friends_count: int = 0


class UserWithStatsOut(UserOut, UserStats):
    pass


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
