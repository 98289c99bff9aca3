# models/user.py
import uuid
import enum
from sqlalchemy import Column, String, Text, Enum, CHAR, TIMESTAMP
from app.core.database import Base, utcnow

# 對應 SQL 中的 ENUM 型別
class UserRoleEnum(str, enum.Enum):
    user = "user"
    admin = "admin"

class User(Base):
    __tablename__ = "users"

    # 基本欄位
    user_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRoleEnum, name="user_role", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=UserRoleEnum.user,
    )

    # 個人檔案
    first_name = Column(String(100))
    last_name = Column(String(100))
    display_name = Column(String(100))
    profile_image_url = Column(String(500))
    bio = Column(Text)
    location = Column(String(255))
    website = Column(String(500))

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)
