"""Pytest fixtures for DEFROST backend tests."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from defrost.config import Settings
from defrost.core.geo import Position
from defrost.database import create_session_maker, get_db, init_db
from defrost.dependencies import Services, create_services
from defrost.main import app
from defrost.rate_limit import limiter
from defrost.schemas.report import Report, ReportCategory

# In-memory SQLite shared across sessions through a single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Lower Manhattan
USER_POSITION = Position(latitude=40.7128, longitude=-74.0060)
# Midtown, about 3.3 miles from the user
NEARBY = (40.7580, -73.9855)
# The Bronx, about 10 miles from the user
FAR_AWAY = (40.8448, -73.9242)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        feed_snapshot_limit=100,
        location_distance_filter_meters=100.0,
        notification_webhook_url=None,
        debug=True,
    )


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return create_session_maker(async_engine)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def services(test_settings, session_maker) -> AsyncGenerator[Services, None]:
    """Application services with the pipeline consumer running."""
    services = create_services(test_settings, session_maker)
    services.pipeline.start()
    yield services
    await services.pipeline.stop()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, services: Services
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database override."""

    async def override_get_db():
        yield db_session

    app.state.services = services
    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sink() -> MagicMock:
    """Notification sink that records every request."""
    return MagicMock()


@pytest.fixture
def make_report() -> Callable[..., Report]:
    """Factory for reports at given coordinates."""

    def _make(
        report_id: str,
        latitude: float = NEARBY[0],
        longitude: float = NEARBY[1],
        category: ReportCategory = ReportCategory.CHECKPOINT,
        location_label: str = "DOWNTOWN_5TH_AVE",
        **kwargs,
    ) -> Report:
        return Report(
            id=report_id,
            created_at=kwargs.pop("created_at", datetime(2026, 1, 18, 10, 0, tzinfo=UTC)),
            category=category,
            location_label=location_label,
            latitude=latitude,
            longitude=longitude,
            narrative=kwargs.pop("narrative", "Mobile checkpoint near subway entrance."),
            **kwargs,
        )

    return _make


@pytest.fixture
def report_payload() -> dict:
    """Valid report submission body."""
    return {
        "category": "CHECKPOINT",
        "location_label": "DOWNTOWN_5TH_AVE",
        "latitude": NEARBY[0],
        "longitude": NEARBY[1],
        "narrative": "Mobile checkpoint set up near subway entrance.",
    }
