# app/core/security.py
# 負責密碼雜湊與 JWT 權杖的產生與驗證
from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from app.core.config import settings
from app.core.database import get_db
from app.schemas.user_schema import TokenData
from app.repositories.base import repository_for
from app.repositories.user_repo import UserRepository
from app.models.user import User, UserRoleEnum

# 1. 密碼雜湊設定 (Bcrypt)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# 2. 定義 Token 從哪裡來 (Authorization Header)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")
# 公開但需要辨識觀看者的 API (例如動態牆的 is_liked) 使用
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """驗證明文密碼是否與雜湊值相符"""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """產生密碼的雜湊值"""
    return pwd_context.hash(password)

def create_access_token(data: dict) -> str:
    """
    根據傳入的 data (e.g., user_id) 產生 JWT access token
    """
    to_encode = data.copy() # 避免修改原始資料
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )

def verify_access_token(token: str) -> TokenData | None:
    """
    驗證 JWT，回傳 TokenData (Pydantic Model) 或 None
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
        user_id = payload.get("user_id")
        role = payload.get("role")

        if user_id is None or role is None:
            return None

        return TokenData(user_id=user_id, role=role)

    except JWTError:
        return None

async def _load_user(token: Optional[str], db) -> User | None:
    if not token:
        return None
    token_data = verify_access_token(token)
    if token_data is None:
        return None
    user_repo = repository_for(UserRepository, db)
    return await user_repo.get_user_by_id(token_data.user_id)

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db = Depends(get_db)
) -> User:
    """
    FastAPI 依賴項：驗證 Token 並回傳 User (未登入或 Token 無效時 401)
    """
    user = await _load_user(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="無法驗證憑證",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def get_current_user_optional(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db = Depends(get_db)
) -> User | None:
    """公開 API 使用：有有效 Token 時回傳 User，否則回傳 None"""
    return await _load_user(token, db)

async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """僅限系統管理員"""
    if current_user.role != UserRoleEnum.admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "需要管理員權限")
    return current_user
