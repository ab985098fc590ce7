import os
import tempfile
from typing import AsyncGenerator

import bcrypt

# Settings() is instantiated on import, so the environment must be ready first.
_tmp_dir = tempfile.mkdtemp(prefix="cryptonews-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "uploads")
os.environ["AUTH_BACKEND"] = "database"
os.environ["REACTION_MODE"] = "toggle"
os.environ["ADMIN_EMAIL"] = "static-admin@cryptonews.test"
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.hashpw(b"static-password", bcrypt.gensalt()).decode()

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from cryptonews.config import settings
from cryptonews.core.security import get_password_hash
from cryptonews.database import Base, get_db
from cryptonews.main import app
from cryptonews.models.user import User
from cryptonews.schemas.article import ArticleCreate
from cryptonews.services.article import ArticleService
from cryptonews.services.auth import Principal

TEST_DATABASE_URL = settings.DATABASE_URL
PASSWORD = "password"

engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
TestingSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

@pytest.fixture(autouse=True)
async def setup_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield

@pytest.fixture
def session_factory() -> async_sessionmaker:
    """Opens sessions independent of the one the client uses."""
    return TestingSessionLocal

@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session

@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def create_user(db_session: AsyncSession, email: str, role: str = "reader", name: str = "Tester") -> User:
    user = User(email=email, name=name, role=role, hashed_password=get_password_hash(PASSWORD))
    db_session.add(user)
    await db_session.commit()
    return user

async def login(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Requests must carry credentials explicitly; drop the cookie the login set
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}

def principal_for(user: User) -> Principal:
    return Principal(id=user.id, email=user.email, role=user.role, name=user.name)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin@cryptonews.test", role="admin", name="Admin")

@pytest.fixture
async def author_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "author@cryptonews.test", role="author", name="Satoshi")

@pytest.fixture
async def reader_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "reader@cryptonews.test", role="reader", name="Reader")

@pytest.fixture
async def admin_token_headers(client: AsyncClient, admin_user: User) -> dict:
    return await login(client, admin_user.email)

@pytest.fixture
async def author_token_headers(client: AsyncClient, author_user: User) -> dict:
    return await login(client, author_user.email)

@pytest.fixture
async def reader_token_headers(client: AsyncClient, reader_user: User) -> dict:
    return await login(client, reader_user.email)

@pytest.fixture
def make_article(db_session: AsyncSession):
    async def _make(principal: Principal = None, **overrides):
        data = {
            "title": "Bitcoin Hits New High",
            "content": "Bitcoin rallied past its previous record on strong ETF inflows.",
            "featured_image": "https://cdn.cryptonews.test/btc.png",
            "category": "Market Analysis",
            "status": "published",
        }
        data.update(overrides)
        return await ArticleService(db_session).create_article(ArticleCreate(**data), principal)
    return _make

@pytest.fixture
def author_principal(author_user: User) -> Principal:
    return principal_for(author_user)
