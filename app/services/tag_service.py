# app/services/tag_service.py

from typing import List
from app.repositories.base import repository_for
from app.repositories.post_repo import PostRepository
from app.schemas.post_schema import TrendingTagOut
from app.utils.recommender import MIN_CONTENT_LENGTH, suggest_tags

class TagService:
    def __init__(self, db):
        self.post_repo = repository_for(PostRepository, db)

    async def get_trending_tags(self, limit: int = 10) -> List[TrendingTagOut]:
        """依使用次數由高到低"""
        trending = await self.post_repo.get_trending_tags(limit)
        return [TrendingTagOut(tag=tag, count=count) for tag, count in trending]

    async def suggest_tags(self, content: str, selected: List[str]) -> List[str]:
        if len(content.strip()) < MIN_CONTENT_LENGTH:
            return []
        tag_usage = await self.post_repo.list_tag_usage()
        return suggest_tags(content, tag_usage, selected)
