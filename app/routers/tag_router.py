# app/routers/tag_router.py
from typing import List
from fastapi import APIRouter, Depends, Query
from app.core.database import get_db
from app.schemas.post_schema import TagSuggestionsOut, TrendingTagOut
from app.services.tag_service import TagService

router = APIRouter(
    tags=["Tags"]
)

@router.get("/trending/tags", response_model=List[TrendingTagOut])
async def get_trending_tags(
    limit: int = Query(10, ge=1, le=50),
    db = Depends(get_db)
):
    """
    熱門標籤 (依使用次數由高到低)
    """
    return await TagService(db).get_trending_tags(limit)

@router.get("/tags/suggestions", response_model=TagSuggestionsOut)
async def get_tag_suggestions(
    content: str = "",
    selected: List[str] = Query([]),
    db = Depends(get_db)
):
    """
    依貼文內容建議標籤 (內容少於 10 個字元時為空)
    """
    return {"tags": await TagService(db).suggest_tags(content, selected)}
