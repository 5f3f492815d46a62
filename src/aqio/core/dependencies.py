"""
FastAPI dependencies.

The `RepositoryFactory` is built once in the app lifespan and parked on
`app.state.repositories`; route handlers ask for the repository or service
they need and never see the engine.
"""

from fastapi import Depends, Request

from aqio.config.settings import Settings, get_settings
from aqio.domain.pagination import PaginationParams
from aqio.exceptions.domain import DomainError
from aqio.repositories.factory import RepositoryFactory
from aqio.repositories.interfaces import (
    EventCategoryRepository,
    EventInvitationRepository,
    EventRegistrationRepository,
    EventRepository,
    UserRepository,
)
from aqio.services import (
    EventApplicationService,
    EventCategoryApplicationService,
    InvitationApplicationService,
    RegistrationApplicationService,
    UserApplicationService,
)


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_pagination(
    offset: int = 0,
    limit: int | None = None,
    settings: Settings = Depends(get_app_settings),
) -> PaginationParams:
    """Query-string pagination; a missing `limit` falls back to `DEFAULT_PAGE_SIZE`."""
    return PaginationParams.new(offset, settings.DEFAULT_PAGE_SIZE if limit is None else limit)


def get_repository_factory(request: Request) -> RepositoryFactory:
    factory = getattr(request.app.state, "repositories", None)
    if factory is None:
        raise DomainError.system_unavailable("Repositories are not initialised", component="database")
    return factory


def get_user_repository(factory: RepositoryFactory = Depends(get_repository_factory)) -> UserRepository:
    return factory.user_repository()


def get_event_repository(factory: RepositoryFactory = Depends(get_repository_factory)) -> EventRepository:
    return factory.event_repository()


def get_event_category_repository(
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> EventCategoryRepository:
    return factory.event_category_repository()


def get_invitation_repository(
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> EventInvitationRepository:
    return factory.invitation_repository()


def get_registration_repository(
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> EventRegistrationRepository:
    return factory.registration_repository()


def get_user_service(repo: UserRepository = Depends(get_user_repository)) -> UserApplicationService:
    return UserApplicationService(repo)


def get_event_service(repo: EventRepository = Depends(get_event_repository)) -> EventApplicationService:
    return EventApplicationService(repo)


def get_event_category_service(
    repo: EventCategoryRepository = Depends(get_event_category_repository),
) -> EventCategoryApplicationService:
    return EventCategoryApplicationService(repo)


def get_invitation_service(
    repo: EventInvitationRepository = Depends(get_invitation_repository),
) -> InvitationApplicationService:
    return InvitationApplicationService(repo)


def get_registration_service(
    repo: EventRegistrationRepository = Depends(get_registration_repository),
) -> RegistrationApplicationService:
    return RegistrationApplicationService(repo)
