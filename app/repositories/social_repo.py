# app/repositories/social_repo.py
# 社交關係：追蹤 與 好友邀請

import logging
from typing import List
from sqlalchemy import and_, delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import ConflictError, InvalidOperationError, NotFoundError
from app.models.social import Follow, FriendRequest, FriendRequestStatusEnum
from app.models.user import User

logger = logging.getLogger(__name__)

class SocialRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # --- 追蹤 ---

    async def toggle_follow(self, follower_id: str, following_id: str) -> bool:
        """
        追蹤 / 取消追蹤，回傳切換後是否為追蹤中
        不能追蹤自己 (不寫入任何資料，回傳 False)
        """
        if follower_id == following_id:
            return False

        if await self.is_following(follower_id, following_id):
            await self.db.execute(
                delete(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
            )
            await self.db.commit()
            return False

        self.db.add(Follow(follower_id=follower_id, following_id=following_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
        return True

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        stmt = select(Follow.follow_id).where(
            Follow.follower_id == follower_id, Follow.following_id == following_id
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def list_followers(self, user_id: str) -> List[User]:
        stmt = (
            select(User)
            .join(Follow, Follow.follower_id == User.user_id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_following(self, user_id: str) -> List[User]:
        stmt = (
            select(User)
            .join(Follow, Follow.following_id == User.user_id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_following_ids(self, user_id: str) -> List[str]:
        stmt = select(Follow.following_id).where(Follow.follower_id == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_follower_ids(self, user_id: str) -> List[str]:
        stmt = select(Follow.follower_id).where(Follow.following_id == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_followers(self, user_id: str) -> int:
        stmt = select(func.count(Follow.follow_id)).where(Follow.following_id == user_id)
        return (await self.db.execute(stmt)).scalar_one()

    async def count_following(self, user_id: str) -> int:
        stmt = select(func.count(Follow.follow_id)).where(Follow.follower_id == user_id)
        return (await self.db.execute(stmt)).scalar_one()

    # --- 好友邀請 ---

    @staticmethod
    def _pair_clause(user_a: str, user_b: str):
        """不分方向的 (a, b) 配對"""
        return or_(
            and_(FriendRequest.requester_id == user_a, FriendRequest.target_id == user_b),
            and_(FriendRequest.requester_id == user_b, FriendRequest.target_id == user_a),
        )

    async def send_friend_request(self, requester_id: str, target_id: str) -> FriendRequest:
        """
        建立好友邀請
        - 不能邀請自己 (InvalidOperationError)
        - 同一對使用者 (不分方向) 只能有一筆紀錄，包含已拒絕的 (ConflictError)
        """
        if requester_id == target_id:
            raise InvalidOperationError("不能對自己送出好友邀請")

        stmt = select(FriendRequest.request_id).where(self._pair_clause(requester_id, target_id))
        if (await self.db.execute(stmt)).first() is not None:
            raise ConflictError("好友邀請已存在")

        friend_request = FriendRequest(requester_id=requester_id, target_id=target_id)
        self.db.add(friend_request)
        await self.db.commit()
        return await self.get_friend_request_by_id(friend_request.request_id)

    async def get_friend_request_by_id(self, request_id: str) -> FriendRequest | None:
        stmt = (
            select(FriendRequest)
            .where(FriendRequest.request_id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def respond_to_friend_request(self, request_id: str, status: FriendRequestStatusEnum) -> FriendRequest:
        """
        pending -> accepted / rejected；已處理過的邀請不能再變更
        """
        friend_request = await self.get_friend_request_by_id(request_id)
        if friend_request is None:
            raise NotFoundError("好友邀請不存在")
        if friend_request.status != FriendRequestStatusEnum.pending:
            raise InvalidOperationError("好友邀請已處理")

        friend_request.status = FriendRequestStatusEnum(status)
        await self.db.commit()
        logger.info(f"好友邀請 {request_id} -> {friend_request.status.value}")
        return await self.get_friend_request_by_id(request_id)

    async def list_friend_requests(self, user_id: str, direction: str = "received") -> List[FriendRequest]:
        """
        待處理的好友邀請 (received: 收到的 / sent: 送出的)，由新到舊
        """
        column = FriendRequest.target_id if direction == "received" else FriendRequest.requester_id
        stmt = (
            select(FriendRequest)
            .where(column == user_id, FriendRequest.status == FriendRequestStatusEnum.pending)
            .order_by(FriendRequest.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    def _accepted_for(self, user_id: str):
        return and_(
            FriendRequest.status == FriendRequestStatusEnum.accepted,
            or_(FriendRequest.requester_id == user_id, FriendRequest.target_id == user_id),
        )

    async def list_friends(self, user_id: str) -> List[User]:
        stmt = select(FriendRequest.requester_id, FriendRequest.target_id).where(self._accepted_for(user_id))
        result = await self.db.execute(stmt)
        friend_ids = [
            target_id if requester_id == user_id else requester_id
            for requester_id, target_id in result.all()
        ]
        if not friend_ids:
            return []
        users = await self.db.execute(select(User).where(User.user_id.in_(friend_ids)).order_by(User.username))
        return list(users.scalars().all())

    async def count_friends(self, user_id: str) -> int:
        stmt = select(func.count(FriendRequest.request_id)).where(self._accepted_for(user_id))
        return (await self.db.execute(stmt)).scalar_one()

    async def get_friendship_status(self, user_id: str, other_id: str) -> str:
        """
        從 user_id 的角度看兩人關係：none / pending_sent / pending_received / friends
        (被拒絕的邀請視為 none)
        """
        stmt = select(FriendRequest).where(self._pair_clause(user_id, other_id))
        friend_request = (await self.db.execute(stmt)).scalars().first()
        if friend_request is None or friend_request.status == FriendRequestStatusEnum.rejected:
            return "none"
        if friend_request.status == FriendRequestStatusEnum.accepted:
            return "friends"
        return "pending_sent" if friend_request.requester_id == user_id else "pending_received"
