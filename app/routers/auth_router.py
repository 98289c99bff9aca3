import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.user_service import UserService
from app.schemas.user_schema import LoginResponse, Token, UserCreate, UserLogin, UserOut, UserWithStatsOut


logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Auth"]    # API 文件分類標籤
)


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_new_user(
    user_data: UserCreate, # Request Body 會被 Pydantic 驗證
    db = Depends(get_db)
):
    """
    註冊新使用者
    - 使用者名稱或 Email 重複時回傳 400，訊息會說明是哪一個欄位
    """
    auth_service = AuthService(db)

    # 服務層中的 HTTPException 會自動被 FastAPI 捕捉並回傳
    return await auth_service.register_user(user_data)


async def _login(auth_service: AuthService, username: str, password: str) -> User:
    user = await auth_service.authenticate_user(username=username, password=password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="不正確的帳號或密碼",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: UserLogin,
    db = Depends(get_db)
):
    """
    JSON 登入，回傳 Access Token 與使用者資料
    """
    auth_service = AuthService(db)
    user = await _login(auth_service, credentials.username, credentials.password)
    access_token = auth_service.create_login_token(user)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.post("/auth/token", response_model=Token)
async def login_for_access_token(
    # (重要) 使用 OAuth2PasswordRequestForm 會強制 API 只接受 form-data
    # 格式為 username=...&password=...
    form_data: OAuth2PasswordRequestForm = Depends(),
    db = Depends(get_db)
):
    """
    OpenAPI 文件 (Authorize 按鈕) 使用的 form-data 登入
    """
    auth_service = AuthService(db)
    user = await _login(auth_service, form_data.username, form_data.password)
    return {"access_token": auth_service.create_login_token(user), "token_type": "bearer"}


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    # Token 為無狀態，由前端丟棄即可
    logger.info(f"使用者登出: {current_user.username}")
    return {"message": "已登出"}


@router.get("/auth/user", response_model=UserWithStatsOut)
async def get_authenticated_user(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """目前登入者的資料 + 統計數字"""
    return await UserService(db).get_profile(current_user.user_id)
