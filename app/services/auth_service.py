# app/services/auth_service.py
import logging
from fastapi import HTTPException, status
from app.core.exceptions import ConflictError
from app.core.security import verify_password, create_access_token, get_password_hash
from app.models.user import User, UserRoleEnum
from app.repositories.base import repository_for
from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import UserCreate

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db):
        self.user_repo = repository_for(UserRepository, db)

    async def authenticate_user(self, username: str, password: str) -> User | None:
        """
        驗證使用者帳號密碼。
        成功回傳 User 物件，失敗回傳 None。
        """
        user = await self.user_repo.get_user_by_username(username)

        # 1. 檢查使用者是否存在
        if not user:
            return None

        # 2. 檢查密碼是否正確
        if not verify_password(plain_password=password, hashed_password=user.password_hash):
            return None

        logger.info(f"使用者登入: {user.username}")
        return user

    async def register_user(self, user_create: UserCreate) -> User:
        """
        處理使用者註冊 (使用者名稱 / Email 重複時 400，訊息區分是哪一個欄位)
        """
        # 1. 雜湊密碼
        hashed_password = get_password_hash(user_create.password)

        # 2. 建立 User ORM 模型
        new_user = User(
            username=user_create.username,
            email=user_create.email,
            password_hash=hashed_password,
            first_name=user_create.first_name,
            last_name=user_create.last_name,
            role=UserRoleEnum.user,
        )

        # 3. 呼叫 Repository 儲存
        try:
            created_user = await self.user_repo.create_user(new_user)
        except ConflictError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        logger.info(f"新使用者註冊: {created_user.username}")
        return created_user

    def create_login_token(self, user: User) -> str:
        """
        為指定使用者建立 access token
        """
        return create_access_token(
            data={
                "sub": user.username,
                "user_id": str(user.user_id),
                "role": UserRoleEnum(user.role).value # 確保存入的是字串
            }
        )
