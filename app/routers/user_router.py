# app/routers/user_router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from app.core.database import get_db
from app.core.security import get_current_user, get_current_user_optional
from app.models.user import User
from app.schemas.post_schema import PostOut
from app.schemas.social_schema import FollowStatusOut, FriendshipStatusOut
from app.schemas.user_schema import UserBriefOut, UserOut, UserUpdate, UserWithStatsOut
from app.services.post_service import PostService
from app.services.social_service import SocialService
from app.services.user_service import UserService

router = APIRouter(
    tags=["Users"]
)

@router.get("/user", response_model=UserOut)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """
    取得目前登入的使用者資訊
    """
    return current_user

@router.get("/users", response_model=List[UserBriefOut])
async def search_users(
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    有 search：模糊搜尋使用者；沒有：追蹤中與粉絲 (聯絡人)
    """
    return await UserService(db).search_users(current_user, search)

@router.put("/users/me", response_model=UserOut)
async def update_my_profile(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await UserService(db).update_profile(current_user, user_update)

@router.get("/users/{user_id}", response_model=UserWithStatsOut)
async def read_user_profile(user_id: str, db = Depends(get_db)):
    return await UserService(db).get_profile(user_id)

@router.get("/users/{user_id}/followers", response_model=List[UserBriefOut])
async def list_followers(user_id: str, db = Depends(get_db)):
    return await UserService(db).list_followers(user_id)

@router.get("/users/{user_id}/following", response_model=List[UserBriefOut])
async def list_following(user_id: str, db = Depends(get_db)):
    return await UserService(db).list_following(user_id)

@router.get("/users/{user_id}/posts", response_model=List[PostOut])
async def list_user_posts(
    user_id: str,
    post_filter: str = Query("all", alias="filter", pattern="^(all|quotes|original)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[User] = Depends(get_current_user_optional),
    db = Depends(get_db)
):
    """
    個人頁面的貼文 (filter: all / quotes / original)
    """
    return await PostService(db).list_user_posts(user_id, viewer, post_filter, limit, offset)

@router.get("/users/{user_id}/liked", response_model=List[PostOut])
async def list_user_liked_posts(
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await PostService(db).list_liked(user_id, current_user, limit, offset)

@router.post("/users/{user_id}/follow", response_model=FollowStatusOut)
async def toggle_follow(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    追蹤 / 取消追蹤，回傳切換後的狀態 (追蹤自己不會有任何效果)
    """
    is_following = await SocialService(db).toggle_follow(current_user, user_id)
    return {"is_following": is_following}

@router.get("/users/{user_id}/follow-status", response_model=FollowStatusOut)
async def read_follow_status(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return {"is_following": await SocialService(db).is_following(current_user, user_id)}

@router.get("/users/{user_id}/friendship-status", response_model=FriendshipStatusOut)
async def read_friendship_status(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return {"status": await SocialService(db).get_friendship_status(current_user, user_id)}
