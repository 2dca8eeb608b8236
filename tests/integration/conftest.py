"""Session-scoped fixtures for integration tests."""

import logging
import warnings
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from alembic import command
from alembic.config import Config
from mockforge.db import PostgresRecordStore
from mockforge.db.migrations import get_alembic_config

logger = logging.getLogger(__name__)

_IMAGE = "postgres:16"


@pytest.fixture(scope="session")
def postgres_container() -> Generator[DockerContainer, None, None]:
    """Start a PostgreSQL container for the session."""
    logger.info("Starting %s for integration tests", _IMAGE)
    container = DockerContainer(_IMAGE).with_exposed_ports(5432).with_env("POSTGRES_PASSWORD", "postgres")
    container.start()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        # postgres restarts once after initdb, so the ready line shows up twice
        wait_for_logs(container, lambda logs: logs.count("ready to accept connections") >= 2, timeout=60)
    yield container
    container.stop()


@pytest.fixture(scope="session")
def test_db_url(postgres_container: DockerContainer) -> str:
    """Async connection URL for the test database."""
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://postgres:postgres@{host}:{port}/postgres"


@pytest.fixture(scope="session")
def alembic_config(test_db_url: str) -> Config:
    """Alembic config pointed at the test database."""
    return get_alembic_config(test_db_url)


@pytest.fixture(scope="session")
def _run_migrations(alembic_config: Config) -> Generator[None, None, None]:
    """Run migrations once per session, cleanup on teardown."""
    command.upgrade(alembic_config, "head")
    yield
    command.downgrade(alembic_config, "base")


@pytest_asyncio.fixture
async def engine(_run_migrations: None, test_db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test engine so each event loop gets its own connection pool."""
    engine = create_async_engine(test_db_url, future=True)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def pg_store(engine: AsyncEngine) -> AsyncGenerator[PostgresRecordStore, None]:
    store = PostgresRecordStore(engine)
    await store.ensure_ready()
    yield store
    async with engine.begin() as conn:
        await conn.execute(text("TRUNCATE projects, resources, records"))
