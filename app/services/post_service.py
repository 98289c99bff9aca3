# app/services/post_service.py
# 動態牆組合 (Feed Composer)：決定要呼叫哪一個貼文查詢、解析引用貼文、
# 發文後通知粉絲，以及按讚 / 收藏 / 留言

import logging
from typing import List, Optional
from fastapi import HTTPException, status

from app.core.exceptions import InvalidOperationError
from app.models.notification import Notification
from app.models.user import User, UserRoleEnum
from app.repositories.base import repository_for
from app.repositories.comment_repo import CommentRepository
from app.repositories.engagement_repo import EngagementRepository
from app.repositories.notification_repo import NotificationRepository
from app.repositories.post_repo import PostRepository
from app.repositories.rows import PostRow
from app.repositories.social_repo import SocialRepository
from app.repositories.user_repo import UserRepository
from app.schemas.comment_schema import CommentCreate
from app.schemas.post_schema import PostCreate, PostOut, PostUpdate, ReportCreate
from app.schemas.user_schema import UserStats

logger = logging.getLogger(__name__)

# 管理員後台一次列出的貼文數
ADMIN_POST_LIMIT = 500

class PostService:
    def __init__(self, db):
        self.db = db
        self.post_repo = repository_for(PostRepository, db)
        self.comment_repo = repository_for(CommentRepository, db)
        self.engagement_repo = repository_for(EngagementRepository, db)
        self.social_repo = repository_for(SocialRepository, db)
        self.notification_repo = repository_for(NotificationRepository, db)
        self.user_repo = repository_for(UserRepository, db)

    # --- view-model 組裝 ---

    @staticmethod
    def _row_to_out(row: PostRow) -> PostOut:
        return PostOut.model_validate(row.post).model_copy(update={
            "likes_count": row.likes_count,
            "comments_count": row.comments_count,
            "is_liked": row.is_liked,
            "is_bookmarked": row.is_bookmarked,
        })

    async def _to_out(self, rows: List[PostRow], viewer_id: Optional[str]) -> List[PostOut]:
        """
        轉成 PostOut，並以一次 IN 查詢解析整頁的引用貼文 (只解析一層)
        """
        quoted_ids = list({row.post.quoted_post_id for row in rows if row.post.quoted_post_id})
        quoted = {}
        for quoted_row in await self.post_repo.get_post_rows_by_ids(quoted_ids, viewer_id):
            # 被引用貼文本身的 quoted_post 不再展開
            quoted[quoted_row.post.post_id] = self._row_to_out(quoted_row)

        posts = []
        for row in rows:
            out = self._row_to_out(row)
            if row.post.quoted_post_id:
                out.quoted_post = quoted.get(row.post.quoted_post_id)
            posts.append(out)
        return posts

    async def _get_post_or_404(self, post_id: str):
        post = await self.post_repo.get_post_by_id(post_id)
        if post is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "貼文不存在")
        return post

    # --- 動態牆 ---

    async def get_feed(
        self,
        viewer: Optional[User] = None,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        author_id: Optional[str] = None,
        feed_filter: str = "all",
        limit: int = 20,
        offset: int = 0,
    ) -> List[PostOut]:
        """
        優先順序：搜尋 > 標籤 > 作者 > 時間排序
        feed_filter:
        - all: 全部
        - following: 只看追蹤中的使用者 (需登入)
        - quotes: 只看引用貼文
        """
        viewer_id = viewer.user_id if viewer else None

        if feed_filter == "following":
            if viewer is None:
                raise HTTPException(status.HTTP_401_UNAUTHORIZED, "請先登入")
            return await self.get_following_feed(viewer, limit, offset)

        post_filter = "quotes" if feed_filter == "quotes" else "all"
        if search:
            rows = await self.post_repo.search_posts(search, viewer_id, limit, offset, post_filter)
        elif tag:
            rows = await self.post_repo.list_posts_by_tag(tag, viewer_id, limit, offset, post_filter)
        elif author_id:
            rows = await self.post_repo.list_posts_by_author(author_id, viewer_id, limit, offset, post_filter)
        else:
            rows = await self.post_repo.list_posts(viewer_id, limit, offset, post_filter)
        return await self._to_out(rows, viewer_id)

    async def get_following_feed(self, viewer: User, limit: int = 20, offset: int = 0) -> List[PostOut]:
        following_ids = await self.social_repo.list_following_ids(viewer.user_id)
        rows = await self.post_repo.list_posts_by_authors(following_ids, viewer.user_id, limit, offset)
        return await self._to_out(rows, viewer.user_id)

    async def get_post(self, post_id: str, viewer: Optional[User] = None) -> PostOut:
        return await self._get_post_out(post_id, viewer.user_id if viewer else None)

    async def _get_post_out(self, post_id: str, viewer_id: Optional[str]) -> PostOut:
        row = await self.post_repo.get_post_row(post_id, viewer_id)
        if row is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "貼文不存在")
        return (await self._to_out([row], viewer_id))[0]

    async def list_user_posts(
        self, user_id: str, viewer: Optional[User] = None, post_filter: str = "all", limit: int = 20, offset: int = 0
    ) -> List[PostOut]:
        if await self.user_repo.get_user_by_id(user_id) is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "使用者不存在")
        viewer_id = viewer.user_id if viewer else None
        rows = await self.post_repo.list_posts_by_author(user_id, viewer_id, limit, offset, post_filter)
        return await self._to_out(rows, viewer_id)

    async def list_bookmarks(self, user: User, limit: int = 20, offset: int = 0) -> List[PostOut]:
        rows = await self.post_repo.list_bookmarked_post_rows(user.user_id, limit, offset)
        return await self._to_out(rows, user.user_id)

    async def list_liked(self, user_id: str, viewer: User, limit: int = 20, offset: int = 0) -> List[PostOut]:
        """按讚過的貼文只有本人看得到"""
        if user_id != viewer.user_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "只能查看自己按讚的貼文")
        rows = await self.post_repo.list_liked_post_rows(user_id, viewer.user_id, limit, offset)
        return await self._to_out(rows, viewer.user_id)

    # --- 發文 / 編輯 / 刪除 ---

    async def create_post(self, post_data: PostCreate, author: User) -> PostOut:
        try:
            post = await self.post_repo.create_post(post_data, author.user_id)
        except InvalidOperationError as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, e.message)
        post_id, author_id = post.post_id, author.user_id
        logger.info(f"使用者 {author.username} 發布貼文 {post_id}")

        # 貼文已經寫入，通知失敗不影響發文結果
        await self._notify_followers(post, author)
        # 通知失敗時 session 已 rollback，物件屬性過期，只用事先取出的 id
        return await self._get_post_out(post_id, author_id)

    async def _notify_followers(self, post, author: User) -> int:
        """
        對作者的每一位粉絲寫入一則 new_post 通知 (一次批次寫入)
        失敗只記錄錯誤，不往上拋
        """
        post_id, author_id = post.post_id, author.user_id
        name = author.display_name or author.username
        preview = (post.content or "")[:100]
        try:
            follower_ids = await self.social_repo.list_follower_ids(author_id)
            notifications = [
                Notification(
                    user_id=follower_id,
                    post_id=post_id,
                    author_id=author_id,
                    type="new_post",
                    title=f"{name} 發布了新貼文",
                    message=preview,
                    is_read=False,
                )
                for follower_id in follower_ids
            ]
            created = await self.notification_repo.create_notifications(notifications)
            logger.info(f"貼文 {post_id} 已通知 {created} 位粉絲")
            return created
        except Exception as e:
            await self.db.rollback()
            logger.error(f"貼文 {post_id} 通知粉絲失敗: {e}", exc_info=True)
            return 0

    async def update_post(self, post_id: str, post_update: PostUpdate, user: User) -> PostOut:
        updates = post_update.model_dump(exclude_unset=True)
        # 明確傳 null 的欄位視為未修改 (image_urls / tags 不可為 NULL)
        updates = {field: value for field, value in updates.items() if value is not None}
        post = await self.post_repo.update_post(post_id, updates, user.user_id)
        if post is None:
            await self._get_post_or_404(post_id)
            raise HTTPException(status.HTTP_403_FORBIDDEN, "只能編輯自己的貼文")
        return await self.get_post(post_id, user)

    async def delete_post(self, post_id: str, user: User) -> None:
        """
        作者本人或管理員可以刪除
        不存在或不是作者一律 404，不透露貼文是否存在
        """
        author_scope = None if user.role == UserRoleEnum.admin else user.user_id
        if not await self.post_repo.delete_post(post_id, author_scope):
            raise HTTPException(status.HTTP_404_NOT_FOUND, "貼文不存在或無權限刪除")
        logger.info(f"使用者 {user.username} 刪除貼文 {post_id}")

    async def admin_delete_post(self, post_id: str, admin: User) -> None:
        if not await self.post_repo.delete_post(post_id):
            raise HTTPException(status.HTTP_404_NOT_FOUND, "貼文不存在")
        logger.info(f"管理員 {admin.username} 刪除貼文 {post_id}")

    async def list_all_posts(self, admin: User) -> List[PostOut]:
        rows = await self.post_repo.list_posts(admin.user_id, limit=ADMIN_POST_LIMIT)
        return await self._to_out(rows, admin.user_id)

    async def report_post(self, post_id: str, report: ReportCreate, user: User) -> None:
        # 目前只記錄，沒有審核流程
        await self._get_post_or_404(post_id)
        logger.warning(f"使用者 {user.user_id} 檢舉貼文 {post_id}: {report.reason or '(未填寫原因)'}")

    # --- 按讚 / 收藏 ---

    async def toggle_like(self, post_id: str, user: User) -> bool:
        await self._get_post_or_404(post_id)
        return await self.engagement_repo.toggle_like(post_id, user.user_id)

    async def toggle_bookmark(self, post_id: str, user: User) -> bool:
        await self._get_post_or_404(post_id)
        return await self.engagement_repo.toggle_bookmark(post_id, user.user_id)

    # --- 留言 ---

    async def add_comment(self, post_id: str, comment_data: CommentCreate, user: User):
        await self._get_post_or_404(post_id)
        return await self.comment_repo.create_comment(post_id, user.user_id, comment_data.content)

    async def list_comments(self, post_id: str) -> list:
        await self._get_post_or_404(post_id)
        return await self.comment_repo.list_comments_by_post(post_id)

    async def delete_comment(self, comment_id: str, user: User) -> None:
        comment = await self.comment_repo.get_comment_by_id(comment_id)
        if comment is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "留言不存在")
        if comment.author_id != user.user_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "只能刪除自己的留言")
        await self.comment_repo.delete_comment(comment_id, user.user_id)

    # --- 統計 ---

    async def get_user_stats(self, user_id: str) -> UserStats:
        """每一項各一次 COUNT 查詢"""
        return UserStats(
            posts_count=await self.post_repo.count_posts_by_author(user_id),
            followers_count=await self.social_repo.count_followers(user_id),
            following_count=await self.social_repo.count_following(user_id),
            friends_count=await self.social_repo.count_friends(user_id),
        )
