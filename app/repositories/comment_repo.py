# app/repositories/comment_repo.py

from typing import List
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.comment import Comment

class CommentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_comment(self, post_id: str, author_id: str, content: str) -> Comment:
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        self.db.add(comment)
        await self.db.commit()
        return await self.get_comment_by_id(comment.comment_id)

    async def get_comment_by_id(self, comment_id: str) -> Comment | None:
        stmt = (
            select(Comment)
            .where(Comment.comment_id == comment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_comments_by_post(self, post_id: str) -> List[Comment]:
        """
        某篇貼文的留言 (由新到舊，附作者)
        """
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def delete_comment(self, comment_id: str, author_id: str) -> bool:
        stmt = delete(Comment).where(Comment.comment_id == comment_id, Comment.author_id == author_id)
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0
