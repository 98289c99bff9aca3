# app/services/user_service.py
# 個人檔案、使用者搜尋與管理員的使用者管理

import logging
from typing import List, Optional
from fastapi import HTTPException, status

from app.core.exceptions import ConflictError, NotFoundError
from app.models.user import User, UserRoleEnum
from app.repositories.base import repository_for
from app.repositories.social_repo import SocialRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import UserOut, UserUpdate, UserWithStatsOut
from app.services.post_service import PostService

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db):
        self.db = db
        self.user_repo = repository_for(UserRepository, db)
        self.social_repo = repository_for(SocialRepository, db)
        self.post_service = PostService(db)

    async def get_user_or_404(self, user_id: str) -> User:
        user = await self.user_repo.get_user_by_id(user_id)
        if user is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "使用者不存在")
        return user

    async def get_profile(self, user_id: str) -> UserWithStatsOut:
        """
        個人檔案 + 統計數字 (貼文 / 粉絲 / 追蹤中 / 好友)
        """
        user = await self.get_user_or_404(user_id)
        stats = await self.post_service.get_user_stats(user_id)
        return UserWithStatsOut(**UserOut.model_validate(user).model_dump(), **stats.model_dump())

    async def update_profile(self, user: User, user_update: UserUpdate) -> User:
        updates = user_update.model_dump(exclude_unset=True)
        try:
            return await self.user_repo.update_user(user.user_id, updates)
        except NotFoundError as e:
            raise HTTPException(status.HTTP_404_NOT_FOUND, e.message)
        except ConflictError as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, e.message)

    async def search_users(self, user: User, search: Optional[str]) -> List[User]:
        """
        有搜尋字串：模糊搜尋 (排除自己)
        沒有：回傳追蹤中與粉絲的聯集 (聯絡人)
        """
        if search and search.strip():
            return await self.user_repo.search_users(search.strip(), exclude_user_id=user.user_id)

        contacts = {}
        for contact in await self.social_repo.list_following(user.user_id):
            contacts[contact.user_id] = contact
        for contact in await self.social_repo.list_followers(user.user_id):
            contacts.setdefault(contact.user_id, contact)
        return list(contacts.values())

    async def list_followers(self, user_id: str) -> List[User]:
        await self.get_user_or_404(user_id)
        return await self.social_repo.list_followers(user_id)

    async def list_following(self, user_id: str) -> List[User]:
        await self.get_user_or_404(user_id)
        return await self.social_repo.list_following(user_id)

    # --- 管理員 ---

    async def list_all_users(self) -> List[User]:
        return await self.user_repo.list_all_users()

    async def update_role(self, admin: User, user_id: str, role: UserRoleEnum) -> User:
        updated = await self.user_repo.update_user_role(user_id, role)
        if not updated:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "使用者不存在")
        logger.info(f"管理員 {admin.username} 將使用者 {user_id} 的角色設為 {UserRoleEnum(role).value}")
        return await self.get_user_or_404(user_id)
