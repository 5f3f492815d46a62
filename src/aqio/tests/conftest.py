"""
Core pytest configuration for the entire test suite.

Provides the essentials shared by every kind of test: application logging and
an isolated SQLite database per test (a fresh file under `tmp_path`, schema
created and default categories seeded). Domain fixtures (entity builders,
repositories) live in `test_fixtures/` and are registered globally below.
"""

from __future__ import annotations

import logging

# -------------------------------
# Early logging tuning
# -------------------------------
# Set before importing modules that might initialize these loggers, so pytest
# collection stays quiet.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

from pathlib import Path
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from aqio.config.settings import Settings
from aqio.core.logging.builder import setup_logging
from aqio.database.schema import create_schema
from aqio.database.session import create_engine_from_url, create_session_factory
from aqio.repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)


def make_test_settings(**overrides) -> Settings:
    """Settings for tests: console logging only, never reads a developer's .env."""
    values = {
        "ENV": "testing",
        "TESTING": True,
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "LOG_TO_STDOUT": True,
        "LOG_USE_QUEUE": False,
        "SEED_DEFAULT_CATEGORIES": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# The `autouse=True` part means pytest applies this fixture without tests asking for it.
@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Install the application's dictConfig logging once for the whole session."""
    setup_logging(make_test_settings(LOG_LEVEL="INFO"))
    yield


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture()
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    A private SQLite file per test, with foreign keys enforced and the schema created.

    A file (not `:memory:`) so every pooled connection sees the same database.
    """
    engine = create_engine_from_url(sqlite_url(tmp_path / "aqio_test.db"), foreign_keys=True)
    await create_schema(engine, seed=True)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(async_engine)


@pytest.fixture()
def repository_factory(async_engine: AsyncEngine) -> RepositoryFactory:
    return RepositoryFactory(async_engine)


# Repository and entity fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    build_event,
    build_invitation,
    build_registration,
    build_user,
    category_repository,
    create_company,
    create_event,
    create_user,
    created_event,
    created_user,
    event_repository,
    faker_instance,
    invitation_repository,
    registration_repository,
    user_repository,
)
