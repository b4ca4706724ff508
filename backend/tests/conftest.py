"""Pytest configuration and fixtures."""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.database import Base, get_db
from app.models.user import User
from app.auth.security import hash_password, create_access_token
from main import app


@pytest.fixture
async def test_db():
    """Create test database."""
    TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    AsyncSessionLocal = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def client(test_db):
    """Create test client bound to the test database session."""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(test_db):
    """Factory fixture for persisted users."""
    async def _create_user(
        email="user@example.com",
        name="Test User",
        user_role="user",
        is_provider=False,
        signal_fee=None,
        status="active",
    ):
        user = User(
            name=name,
            email=email,
            password_hash=hash_password("Test1234a"),
            status=status,
            user_role=user_role,
            is_provider=is_provider,
            provider_display_name=name if is_provider else None,
            signal_fee=signal_fee,
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _create_user


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user."""
    def _auth_headers(user):
        token = create_access_token(data={"sub": user.uuid, "email": user.email, "role": user.user_role})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
async def provider(create_user):
    """A signal provider charging £5.00 per month."""
    return await create_user(
        email="provider@example.com",
        name="Signal Provider",
        is_provider=True,
        signal_fee=500,
    )
