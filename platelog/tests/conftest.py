"""
Pytest configuration and fixtures.

Provides shared fixtures for testing including:
- In-memory SQLite database sessions
- Mock plate recognizer
- HTTP client wired to the test session
"""

import os

# Settings are read lazily, but main.py reads them at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RECOGNIZER_BACKEND", "mock")
os.environ.setdefault("LOG_FORMAT", "text")

from typing import AsyncIterator

import cv2
import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from platelog.core import security
from platelog.core.security import ADMIN_SUBJECT, create_access_token
from platelog.infrastructure.db.models import Base
from platelog.infrastructure.db.session import get_session
from platelog.infrastructure.recognition.recognizer import (
    MockPlateRecognizer,
    get_plate_recognizer,
)

# One shared connection so every session sees the same in-memory database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_API_KEY = os.environ["API_KEY"]


@pytest.fixture(scope="function")
async def db_session() -> AsyncIterator[AsyncSession]:
    """Create a test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Give every test a fresh rate limit window."""
    security._rate_limiter = None
    yield
    security._rate_limiter = None


@pytest.fixture
def mock_recognizer() -> MockPlateRecognizer:
    """Recognizer that reads nothing until a test sets ``result``."""
    return MockPlateRecognizer()


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Create sample image bytes for testing."""
    img = np.zeros((480, 640, 3), dtype=np.uint8)
    # White rectangle standing in for a plate
    cv2.rectangle(img, (100, 150), (300, 200), (255, 255, 255), -1)
    _, buffer = cv2.imencode(".jpg", img)
    return buffer.tobytes()


@pytest.fixture
def api_headers() -> dict[str, str]:
    return {"X-API-Key": TEST_API_KEY}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = create_access_token({"sub": ADMIN_SUBJECT})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(
    db_session: AsyncSession,
    mock_recognizer: MockPlateRecognizer,
) -> AsyncIterator[AsyncClient]:
    """HTTP client whose requests share the test database session."""
    from platelog.main import app

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_plate_recognizer] = lambda: mock_recognizer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
