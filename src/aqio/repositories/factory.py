"""
Repository factory.

One factory owns one `AsyncEngine` and the `async_sessionmaker` built on it;
every repository it hands out shares that session factory (and one
`ForeignKeyDiagnostic`). Repositories are created on first request and cached.
Building the factory or a repository never opens a connection.

Usage:
    factory = RepositoryFactory.from_settings(get_settings())
    users = factory.user_repository()
    ...
    await factory.dispose()
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from aqio.config.settings import Settings
from aqio.database.session import create_engine_from_settings, create_session_factory

from .diagnostics import ForeignKeyDiagnostic
from .event_category_repository import SqliteEventCategoryRepository
from .event_repository import SqliteEventRepository
from .invitation_repository import SqliteEventInvitationRepository
from .registration_repository import SqliteEventRegistrationRepository
from .user_repository import SqliteUserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllRepositories:
    """Every repository, sharing one engine."""

    user: SqliteUserRepository
    event: SqliteEventRepository
    event_category: SqliteEventCategoryRepository
    invitation: SqliteEventInvitationRepository
    registration: SqliteEventRegistrationRepository

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "AllRepositories":
        return RepositoryFactory(engine).all_repositories()


class RepositoryFactory:
    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._diagnostic = ForeignKeyDiagnostic(self._session_factory)
        self._user: SqliteUserRepository | None = None
        self._event: SqliteEventRepository | None = None
        self._event_category: SqliteEventCategoryRepository | None = None
        self._invitation: SqliteEventInvitationRepository | None = None
        self._registration: SqliteEventRegistrationRepository | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RepositoryFactory":
        engine = create_engine_from_settings(settings)
        logger.info("repository_factory.created", extra={"dialect": engine.dialect.name})
        return cls(engine)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    def user_repository(self) -> SqliteUserRepository:
        if self._user is None:
            self._user = SqliteUserRepository(self._session_factory, self._diagnostic)
        return self._user

    def event_repository(self) -> SqliteEventRepository:
        if self._event is None:
            self._event = SqliteEventRepository(self._session_factory, self._diagnostic)
        return self._event

    def event_category_repository(self) -> SqliteEventCategoryRepository:
        if self._event_category is None:
            self._event_category = SqliteEventCategoryRepository(self._session_factory)
        return self._event_category

    def invitation_repository(self) -> SqliteEventInvitationRepository:
        if self._invitation is None:
            self._invitation = SqliteEventInvitationRepository(self._session_factory, self._diagnostic)
        return self._invitation

    def registration_repository(self) -> SqliteEventRegistrationRepository:
        if self._registration is None:
            self._registration = SqliteEventRegistrationRepository(self._session_factory, self._diagnostic)
        return self._registration

    def all_repositories(self) -> AllRepositories:
        return AllRepositories(
            user=self.user_repository(),
            event=self.event_repository(),
            event_category=self.event_category_repository(),
            invitation=self.invitation_repository(),
            registration=self.registration_repository(),
        )

    async def dispose(self) -> None:
        """Close every pooled connection of the shared engine."""
        await self._engine.dispose()
        logger.info("repository_factory.disposed")


__all__ = ["AllRepositories", "RepositoryFactory"]
