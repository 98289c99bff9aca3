# app/repositories/user_repo.py
# 負責與使用者相關的資料庫操作
from typing import List, Optional
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.exceptions import ConflictError, NotFoundError
from app.models.user import User, UserRoleEnum

USER_SEARCH_LIMIT = 20

class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> User | None:
        """
        透過 user_id 查詢使用者
        """
        stmt = select(User).where(User.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_user_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_user_by_email(self, email: str) -> User | None:
        """
        透過 email 查詢使用者
        """
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def search_users(self, query: str, exclude_user_id: Optional[str] = None) -> List[User]:
        """
        使用者名稱 / 顯示名稱 / 姓名 不分大小寫的子字串比對 (最多 20 筆，排除自己)
        % 與 _ 會被跳脫，當成一般字元
        """
        stmt = select(User).where(
            or_(
                User.username.icontains(query, autoescape=True),
                User.display_name.icontains(query, autoescape=True),
                User.first_name.icontains(query, autoescape=True),
                User.last_name.icontains(query, autoescape=True),
            )
        )
        if exclude_user_id:
            stmt = stmt.where(User.user_id != exclude_user_id)
        stmt = stmt.order_by(User.username).limit(USER_SEARCH_LIMIT)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_user(self, user: User) -> User:
        """
        新增使用者到資料庫；username / email 重複時拋出 ConflictError
        """
        if await self.get_user_by_username(user.username):
            raise ConflictError("使用者名稱已存在", field="username")
        if user.email and await self.get_user_by_email(user.email):
            raise ConflictError("此 Email 已經被註冊", field="email")

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # 兩個註冊請求同時搶同一個名稱
            await self.db.rollback()
            raise ConflictError("使用者名稱或 Email 已存在", field="username")
        return user

    async def update_user(self, user_id: str, updates: dict) -> User:
        user = await self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("使用者不存在")

        new_email = updates.get("email")
        if new_email and new_email != user.email:
            existing = await self.get_user_by_email(new_email)
            if existing and existing.user_id != user_id:
                raise ConflictError("此 Email 已經被註冊", field="email")

        for field, value in updates.items():
            setattr(user, field, value)
        await self.db.commit()
        return user

    async def list_all_users(self) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_user_role(self, user_id: str, role: UserRoleEnum) -> bool:
        stmt = (
            update(User)
            .where(User.user_id == user_id)
            .values(role=role)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0
