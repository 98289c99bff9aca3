# app/routers/admin_router.py
# 管理員專用 (role=admin)
from typing import List
from fastapi import APIRouter, Depends, Response, status
from app.core.database import get_db
from app.core.security import require_admin
from app.models.user import User
from app.schemas.post_schema import PostOut
from app.schemas.user_schema import RoleUpdate, UserOut
from app.services.post_service import PostService
from app.services.user_service import UserService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"]
)

@router.get("/users", response_model=List[UserOut])
async def list_all_users(
    admin: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await UserService(db).list_all_users()

@router.get("/posts", response_model=List[PostOut])
async def list_all_posts(
    admin: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await PostService(db).list_all_posts(admin)

@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_any_post(
    post_id: str,
    admin: User = Depends(require_admin),
    db = Depends(get_db)
):
    await PostService(db).admin_delete_post(post_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch("/users/{user_id}/role", response_model=UserOut)
async def update_user_role(
    user_id: str,
    role_update: RoleUpdate,
    admin: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await UserService(db).update_role(admin, user_id, role_update.role)
