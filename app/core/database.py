from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

# 建立非同步引擎
engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True, # 每次從連線池取連線前，先 PING 一次，確保連線有效
    echo=settings.DB_ECHO,
)

# 建立非同步 Session
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# 建立 ORM Model 基底類別
Base = declarative_base()


def utcnow() -> datetime:
    """所有時間欄位的預設值 (含微秒，確保同一秒內的排序穩定)"""
    return datetime.now(timezone.utc)


def use_file_storage() -> bool:
    return settings.STORAGE_BACKEND == "file"


# (重要) 取得 DB Session 的 Dependency
async def get_db():
    """FastAPI Dependency: 取得非同步資料庫 session (或 JSON 檔案儲存)"""
    if use_file_storage():
        from app.repositories.file_storage import get_file_storage
        yield get_file_storage()
        return

    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """建立所有資料表 (已存在的表不會被修改)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
