# app/routers/social_router.py
from typing import List
from fastapi import APIRouter, Depends, Query, status
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.social_schema import FriendRequestCreate, FriendRequestOut, FriendRequestRespond
from app.schemas.user_schema import UserBriefOut
from app.services.social_service import SocialService

router = APIRouter(
    tags=["Friends"]
)

@router.post("/friend-requests", response_model=FriendRequestOut, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request_data: FriendRequestCreate,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    送出好友邀請 (對自己 / 已存在邀請時 400)
    """
    return await SocialService(db).send_friend_request(current_user, request_data.target_id)

@router.put("/friend-requests/{request_id}", response_model=FriendRequestOut)
async def respond_to_friend_request(
    request_id: str,
    response_data: FriendRequestRespond,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await SocialService(db).respond_to_friend_request(current_user, request_id, response_data.status)

@router.get("/friend-requests", response_model=List[FriendRequestOut])
async def list_friend_requests(
    request_type: str = Query("received", alias="type"),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """待處理的好友邀請 (type=received|sent)"""
    return await SocialService(db).list_friend_requests(current_user, request_type)

@router.get("/friends", response_model=List[UserBriefOut])
async def list_friends(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await SocialService(db).list_friends(current_user)
