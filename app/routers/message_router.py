# app/routers/message_router.py

from fastapi import APIRouter, Depends, Query, status
from typing import List

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.message_schema import ConversationOut, MessageCreate, MessageOut
from app.services.message_service import MessageService

router = APIRouter(
    prefix="/messages",
    tags=["Messages"]
)

@router.get("/conversations", response_model=List[ConversationOut])
async def list_conversations(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    對話列表：每位對象一筆，附最後一則訊息與未讀數
    """
    return await MessageService(db).list_conversations(current_user)

@router.get("/{user_id}", response_model=List[MessageOut])
async def get_thread(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """
    與某位使用者的訊息 (由新到舊)；對方傳來的訊息會被標為已讀
    """
    return await MessageService(db).get_thread(current_user, user_id, limit, offset)

@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await MessageService(db).send_message(message_data, current_user)
