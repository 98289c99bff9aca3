# app/routers/notification_router.py

from fastapi import APIRouter, Depends, Query
from typing import List

from app.core.database import get_db
from app.models.user import User
from app.core.security import get_current_user
from app.services.notification_service import NotificationService
from app.schemas.notification_schema import NotificationOut, UnreadCountOut

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"]
)

@router.get(
    "",
    response_model=List[NotificationOut],
    summary="獲取我的通知列表"
)
async def get_my_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    獲取當前登入者的通知列表 (依時間倒序)。
    來源貼文已刪除時 post 為 null。
    """
    service = NotificationService(db)
    return await service.get_my_notifications(current_user, limit, offset)

@router.get("/unread-count", response_model=UnreadCountOut, summary="未讀通知數")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return {"count": await NotificationService(db).count_unread(current_user)}

@router.put("/mark-all-read", summary="全部設為已讀")
async def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    updated = await NotificationService(db).mark_all_as_read(current_user)
    return {"updated": updated}

@router.put(
    "/{notification_id}/read",
    response_model=NotificationOut,
    summary="將通知設為已讀"
)
async def mark_as_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    當使用者點擊通知時，前端應呼叫此 API 將其標記為已讀。
    """
    service = NotificationService(db)
    return await service.mark_notification_as_read(notification_id, current_user)
