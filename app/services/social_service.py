# app/services/social_service.py
# 追蹤與好友邀請：把儲存層例外轉成 HTTP 錯誤

import logging
from typing import List
from fastapi import HTTPException, status

from app.core.exceptions import ConflictError, InvalidOperationError, NotFoundError
from app.models.social import FriendRequestStatusEnum
from app.models.user import User
from app.repositories.base import repository_for
from app.repositories.social_repo import SocialRepository
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

FRIEND_REQUEST_TYPES = ("received", "sent")

class SocialService:
    def __init__(self, db):
        self.social_repo = repository_for(SocialRepository, db)
        self.user_repo = repository_for(UserRepository, db)

    async def _ensure_user(self, user_id: str) -> User:
        user = await self.user_repo.get_user_by_id(user_id)
        if user is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "使用者不存在")
        return user

    async def toggle_follow(self, user: User, target_id: str) -> bool:
        await self._ensure_user(target_id)
        return await self.social_repo.toggle_follow(user.user_id, target_id)

    async def is_following(self, user: User, target_id: str) -> bool:
        return await self.social_repo.is_following(user.user_id, target_id)

    async def send_friend_request(self, user: User, target_id: str):
        await self._ensure_user(target_id)
        try:
            friend_request = await self.social_repo.send_friend_request(user.user_id, target_id)
        except (InvalidOperationError, ConflictError) as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, e.message)
        logger.info(f"好友邀請 {user.user_id} -> {target_id}")
        return friend_request

    async def respond_to_friend_request(self, user: User, request_id: str, new_status: str):
        """
        只有被邀請的一方可以接受 / 拒絕
        """
        friend_request = await self.social_repo.get_friend_request_by_id(request_id)
        if friend_request is None:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "好友邀請不存在")
        if friend_request.target_id != user.user_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "無權回覆此好友邀請")

        try:
            return await self.social_repo.respond_to_friend_request(
                request_id, FriendRequestStatusEnum(new_status)
            )
        except (NotFoundError, InvalidOperationError) as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, e.message)

    async def list_friend_requests(self, user: User, request_type: str = "received") -> list:
        if request_type not in FRIEND_REQUEST_TYPES:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "type 必須是 received 或 sent")
        return await self.social_repo.list_friend_requests(user.user_id, request_type)

    async def list_friends(self, user: User) -> List[User]:
        return await self.social_repo.list_friends(user.user_id)

    async def get_friendship_status(self, user: User, other_id: str) -> str:
        await self._ensure_user(other_id)
        return await self.social_repo.get_friendship_status(user.user_id, other_id)
