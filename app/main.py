import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.database import init_db, use_file_storage
from app.routers import (
    auth_router, user_router, post_router,
    social_router, message_router, notification_router,
    tag_router, admin_router
)

# --- 匯入所有 Model 檔案 ---
# 都在應用程式啟動時被 SQLAlchemy 註冊。
from app.models import user
from app.models import post
from app.models import comment
from app.models import engagement
from app.models import social
from app.models import message
from app.models import notification
from app.models import assessment


# 設定基礎日誌
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__) # 建立一個 logger 實例


@asynccontextmanager
async def lifespan(app: FastAPI):
    # JSON 檔案後端不需要建表
    if not use_file_storage():
        await init_db()
        logger.info("資料表已建立")
    yield


app = FastAPI(title="Ovra API", lifespan=lifespan)

# --- 設定 CORS (跨來源資源共用) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"], # 允許所有 HTTP 方法
    allow_headers=["*"], # 允許所有 HTTP 標頭
)

# --- 錯誤格式：一律回傳 {"message": ...} ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # 欄位驗證失敗視為 400 (附上各欄位的錯誤)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "輸入資料格式錯誤", "errors": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"未預期的錯誤: {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "伺服器內部錯誤"},
    )

# --- 根路徑 ---
@app.get("/")
def read_root():
    return {"status": "success", "message": "Backend is running!"}

# --- 載入 API 路由 (全部在 /api 底下) ---
app.include_router(auth_router.router, prefix="/api")
app.include_router(user_router.router, prefix="/api")
app.include_router(post_router.router, prefix="/api")
app.include_router(social_router.router, prefix="/api")
app.include_router(message_router.router, prefix="/api")
app.include_router(notification_router.router, prefix="/api")
app.include_router(tag_router.router, prefix="/api")
app.include_router(admin_router.router, prefix="/api")
