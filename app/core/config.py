# app/core/config.py
# 應用程式設定 (資料庫連線字串、JWT 秘鑰、儲存後端等)
from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # 資料庫設定 (Postgres: postgresql+asyncpg://...，本機/測試: sqlite+aiosqlite://...)
    DATABASE_URL: str = "sqlite+aiosqlite:///./ovra.db"
    DB_ECHO: bool = False

    # 儲存後端: "database" 或 "file" (輕量部署用的 JSON 檔案)
    STORAGE_BACKEND: str = "database"
    FILE_STORAGE_DIR: str = "./data"

    # JWT 設定
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    # 存取令牌過期時間（分鐘），預設一週
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # 密碼雜湊成本
    BCRYPT_ROUNDS: int = 12

    # 情緒分析 (選用)，未設定 API key 時停用
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    SENTIMENT_MODEL: str = "gpt-4o-mini"

    CORS_ORIGINS: List[str] = ["*"]

    # 環境變數檔案
    class Config:
        env_file = ".env"

# 建立設定實例
settings = Settings()
