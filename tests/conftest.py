"""Test fixtures and configuration."""

import logging
import os
import sys

# Set ENVIRONMENT for pydantic settings before any application module loads
os.environ["ENVIRONMENT"] = "testing"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
import pytest_asyncio
import structlog
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from user_service.database import Base, Database
from user_service.logger import get_logger

logger = get_logger(__name__)


def get_test_db_url(tmp_path) -> str:
    """Use TEST_DATABASE_URL when provided, else a throwaway SQLite file per test."""
    return os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'user_service_test.db'}"


# --- Structlog Configuration for Tests ---
@pytest.fixture(autouse=True, scope="session")
def configure_structlog_for_tests():
    """Configure structlog for proper capsys capture in tests."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
        foreign_pre_chain=processors[:-1],
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    yield

    structlog.reset_defaults()


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test engine with a freshly created schema.

    The schema is dropped and recreated for every test so tests never see
    each other's rows, whichever backend TEST_DATABASE_URL selects.
    """
    from user_service import models  # noqa: F401

    engine = create_async_engine(get_test_db_url(tmp_path), echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    except Exception as e:
        logger.error(
            "Schema cleanup failed",
            error=str(e),
            error_type=type(e).__name__,
        )
    await engine.dispose()


@pytest.fixture
def database(db_engine) -> Database:
    return Database(db_engine)


@pytest_asyncio.fixture(scope="function")
async def db(database: Database):
    """A session independent from the ones the API opens per request."""
    async with database.session() as session:
        yield session


@pytest.fixture
def app(database: Database):
    from user_service.main import create_app

    return create_app(database=database)


@pytest_asyncio.fixture(scope="function")
async def public_client(app):
    """Create async test client without auth headers."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def test_user(db: AsyncSession):
    """A committed user whose plaintext password is ``DEFAULT_PASSWORD``."""
    from tests.factories import UserFactory

    return await UserFactory.create_async(db, name="Test User", email="test-user@example.com")


@pytest_asyncio.fixture(scope="function")
async def client(app, test_user):
    """Create async test client authenticated as ``test_user``."""
    from user_service.security import create_access_token

    token = create_access_token(test_user.id)
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as client_instance:
        yield client_instance
