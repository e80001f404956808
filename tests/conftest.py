# tests/conftest.py
import os

# Must be set before order_guard.database builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_UNBLOCK_SWEEP_MINUTES", "0")

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from order_guard.core.config import Settings
from order_guard.database import Base
from order_guard.models import PlatformIntegration, PlatformInventory
from order_guard.services.notification_service import EmailNotificationService

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        AUTO_UNBLOCK_SWEEP_MINUTES=0,
        SMTP_HOST="",
        NOTIFICATION_EMAILS="ops@example.com",
    )


@pytest.fixture(scope="function")
async def test_engine():
    """Create a fresh in-memory database for each test function."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Provide a database session for tests"""
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def notifier():
    """Email notifier that records calls instead of talking to SMTP"""
    mock = AsyncMock(spec=EmailNotificationService)
    mock.send_block_alert.return_value = True
    mock.send_unblock_alert.return_value = True
    return mock


@pytest.fixture
def make_inventory(db_session):
    """Factory inserting a PlatformInventory row and returning it."""

    async def _make(
        product_id="SKU-1",
        platform="shopify",
        stock=10,
        reserved=0,
        blocked=False,
        block_reason=None,
        auto_unblock_date=None,
    ):
        row = PlatformInventory(
            product_id=product_id,
            platform=platform,
            stock_quantity=stock,
            reserved_quantity=reserved,
            available_quantity=stock - reserved,
            is_order_blocked=blocked,
            order_block_reason=block_reason,
            auto_unblock_date=auto_unblock_date,
        )
        db_session.add(row)
        await db_session.commit()
        return row

    return _make


@pytest.fixture
def make_integration(db_session):
    """Factory inserting a PlatformIntegration row (blocking policy for one platform)."""

    async def _make(platform="shopify", **overrides):
        values = dict(
            auto_block_low_stock=False,
            low_stock_threshold=10,
            auto_block_out_of_stock=True,
            notify_on_order_block=False,
        )
        values.update(overrides)
        row = PlatformIntegration(platform=platform, **values)
        db_session.add(row)
        await db_session.commit()
        return row

    return _make
