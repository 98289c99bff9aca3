# app/routers/post_router.py
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from app.core.database import get_db
from app.core.security import get_current_user, get_current_user_optional
from app.models.user import User
from app.schemas.comment_schema import CommentCreate, CommentOut
from app.schemas.post_schema import (
    BookmarkStatusOut, LikeStatusOut, PostCreate, PostOut, PostUpdate, ReportCreate
)
from app.services.post_service import PostService
from app.services.sentiment_service import run_post_sentiment_analysis

router = APIRouter(
    tags=["Posts"]
)

# --- 動態牆 ---

@router.get("/posts", response_model=List[PostOut])
async def list_posts(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    tag: Optional[str] = None,
    search: Optional[str] = None,
    author: Optional[str] = None,
    feed_filter: str = Query("all", alias="filter", pattern="^(all|following|quotes)$"),
    viewer: Optional[User] = Depends(get_current_user_optional),
    db = Depends(get_db)
):
    """
    動態牆 (優先順序：search > tag > author > 全部)
    - 有登入時會帶出 is_liked / is_bookmarked
    """
    return await PostService(db).get_feed(viewer, search, tag, author, feed_filter, limit, offset)

@router.get("/posts/following", response_model=List[PostOut])
async def list_following_posts(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    只看追蹤中使用者的貼文 (沒有追蹤任何人時為空列表)
    """
    return await PostService(db).get_following_feed(current_user, limit, offset)

@router.post("/posts", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    發文 (會通知所有粉絲；情緒分析在回應送出後才執行)
    """
    post = await PostService(db).create_post(post_data, current_user)
    background_tasks.add_task(run_post_sentiment_analysis, post.post_id, post.content)
    return post

@router.get("/posts/{post_id}", response_model=PostOut)
async def read_post(
    post_id: str,
    viewer: Optional[User] = Depends(get_current_user_optional),
    db = Depends(get_db)
):
    return await PostService(db).get_post(post_id, viewer)

@router.patch("/posts/{post_id}", response_model=PostOut)
async def update_post(
    post_id: str,
    post_update: PostUpdate,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await PostService(db).update_post(post_id, post_update, current_user)

@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    await PostService(db).delete_post(post_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/posts/{post_id}/report", status_code=status.HTTP_202_ACCEPTED)
async def report_post(
    post_id: str,
    report: ReportCreate,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    await PostService(db).report_post(post_id, report, current_user)
    return {"message": "已收到檢舉"}

# --- 按讚 / 收藏 ---

@router.post("/posts/{post_id}/like", response_model=LikeStatusOut)
async def toggle_like(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return {"is_liked": await PostService(db).toggle_like(post_id, current_user)}

@router.post("/posts/{post_id}/bookmark", response_model=BookmarkStatusOut)
async def toggle_bookmark(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return {"is_bookmarked": await PostService(db).toggle_bookmark(post_id, current_user)}

@router.get("/bookmarks", response_model=List[PostOut])
async def list_bookmarks(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """收藏的貼文 (依收藏時間由新到舊)"""
    return await PostService(db).list_bookmarks(current_user, limit, offset)

@router.get("/liked", response_model=List[PostOut])
async def list_liked(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await PostService(db).list_liked(current_user.user_id, current_user, limit, offset)

# --- 留言 ---

@router.post("/posts/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await PostService(db).add_comment(post_id, comment_data, current_user)

@router.get("/posts/{post_id}/comments", response_model=List[CommentOut])
async def list_comments(post_id: str, db = Depends(get_db)):
    return await PostService(db).list_comments(post_id)

@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    await PostService(db).delete_comment(comment_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
