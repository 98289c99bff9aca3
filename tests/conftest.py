import os

# 設定必須在匯入 app 之前完成 (Settings 在匯入時讀取環境變數)
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["STORAGE_BACKEND"] = "database"
os.environ["OPENAI_API_KEY"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import Base, get_db
from app.models.user import User
from app.repositories.base import repository_for
from app.repositories.file_storage import FileStorage
from app.repositories.user_repo import UserRepository

TEST_PASSWORD = "secret123"


@pytest.fixture
async def db_engine():
    """每個測試一個全新的 in-memory SQLite"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    TestingSessionLocal = sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def file_storage(tmp_path):
    return FileStorage(str(tmp_path / "data"))


@pytest.fixture(params=["database", "file"])
def storage(request, db_session, file_storage):
    """同一組測試分別跑在 資料庫 與 JSON 檔案 兩種後端"""
    return db_session if request.param == "database" else file_storage


@pytest.fixture
def make_user(storage):
    async def _make_user(username: str, **fields):
        user = User(username=username, password_hash="not-a-real-hash", **fields)
        return await repository_for(UserRepository, storage).create_user(user)
    return _make_user


def _client_for(backend):
    async def override_get_db():
        yield backend
    app.dependency_overrides[get_db] = override_get_db
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client(db_session):
    async with _client_for(db_session) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def file_client(file_storage):
    async with _client_for(file_storage) as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_and_login(ac: AsyncClient, username: str, password: str = TEST_PASSWORD):
    """註冊並登入，回傳 (user_id, Authorization header)"""
    res = await ac.post("/api/register", json={"username": username, "password": password})
    assert res.status_code == 201, res.text
    login = await ac.post("/api/login", json={"username": username, "password": password})
    assert login.status_code == 200, login.text
    return res.json()["user_id"], {"Authorization": f"Bearer {login.json()['access_token']}"}


@pytest.fixture
def signup(client):
    async def _signup(username: str):
        return await register_and_login(client, username)
    return _signup


@pytest.fixture
def file_signup(file_client):
    async def _signup(username: str):
        return await register_and_login(file_client, username)
    return _signup
