"""
Engine and session factory construction.

Nothing here runs at import time: callers (the repository factory, the app
lifespan, the test fixtures) decide which URL to connect to and own the engine
they create.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from aqio.config.settings import Settings, get_settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key enforcement off, per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_url(url: str, *, echo: bool = False, foreign_keys: bool = True) -> AsyncEngine:
    """
    Create the AsyncEngine for `url`.

    For SQLite URLs a connect listener turns on foreign key enforcement, which the
    foreign-key diagnostics in the repositories depend on.
    """
    engine = create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # Enables connection health checks
    )
    if engine.dialect.name == "sqlite" and foreign_keys:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_engine_from_settings(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()
    return create_engine_from_url(
        settings.EFFECTIVE_DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,
        foreign_keys=settings.SQLITE_FOREIGN_KEYS,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows are read inside the transaction, entities are plain dataclasses
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


__all__ = [
    "create_engine_from_url",
    "create_engine_from_settings",
    "create_session_factory",
]
