"""
Repository contracts.

Services depend on these protocols, never on a concrete storage class. Every
method is async, returns domain types, and reports failures as `DomainError`.
Absence of a row is `None` (or an empty list), not an error; the exceptions are
`update`/`delete`, which raise `NotFoundError` for a missing id.
"""

import uuid
from typing import Protocol, runtime_checkable

from aqio.domain.entities import (
    Event,
    EventCategory,
    EventInvitation,
    EventRegistration,
    InvitationStatus,
    User,
)
from aqio.domain.pagination import EventFilter, PaginatedResult, PaginationParams


@runtime_checkable
class UserRepository(Protocol):
    async def find_by_id(self, user_id: uuid.UUID) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...

    async def find_by_keycloak_id(self, keycloak_id: str) -> User | None: ...

    async def create(self, user: User) -> User: ...

    async def update(self, user: User) -> User: ...

    async def delete(self, user_id: uuid.UUID) -> None: ...

    async def list_all(self, pagination: PaginationParams) -> PaginatedResult[User]: ...

    async def exists(self, user_id: uuid.UUID) -> bool: ...

    async def email_exists(self, email: str) -> bool: ...


@runtime_checkable
class EventCategoryRepository(Protocol):
    async def find_by_id(self, category_id: str) -> EventCategory | None: ...

    async def list_active(self) -> list[EventCategory]: ...

    async def list_all(self) -> list[EventCategory]: ...

    async def create(self, category: EventCategory) -> EventCategory: ...

    async def update(self, category: EventCategory) -> EventCategory: ...

    async def delete(self, category_id: str) -> None: ...


@runtime_checkable
class EventRepository(Protocol):
    async def find_by_id(self, event_id: uuid.UUID) -> Event | None: ...

    async def find_by_filter(
        self, event_filter: EventFilter, pagination: PaginationParams
    ) -> PaginatedResult[Event]: ...

    async def find_by_organizer(
        self, organizer_id: uuid.UUID, pagination: PaginationParams
    ) -> PaginatedResult[Event]: ...

    async def find_by_category(self, category_id: str) -> list[Event]: ...

    async def create(self, event: Event) -> Event: ...

    async def update(self, event: Event) -> Event: ...

    async def delete(self, event_id: uuid.UUID) -> None: ...

    async def list_all(self, pagination: PaginationParams) -> PaginatedResult[Event]: ...

    async def exists(self, event_id: uuid.UUID) -> bool: ...


@runtime_checkable
class EventInvitationRepository(Protocol):
    async def find_by_id(self, invitation_id: uuid.UUID) -> EventInvitation | None: ...

    async def find_by_event_id(self, event_id: uuid.UUID) -> list[EventInvitation]: ...

    async def find_by_user_id(self, user_id: uuid.UUID) -> list[EventInvitation]: ...

    async def find_by_token(self, token: str) -> EventInvitation | None: ...

    async def find_by_email(self, email: str) -> list[EventInvitation]: ...

    async def create(self, invitation: EventInvitation) -> EventInvitation: ...

    async def update(self, invitation: EventInvitation) -> EventInvitation: ...

    async def update_status(self, invitation_id: uuid.UUID, status: InvitationStatus) -> None: ...

    async def delete(self, invitation_id: uuid.UUID) -> None: ...

    async def exists(self, invitation_id: uuid.UUID) -> bool: ...

    async def user_invited_to_event(self, user_id: uuid.UUID, event_id: uuid.UUID) -> bool: ...

    async def email_invited_to_event(self, email: str, event_id: uuid.UUID) -> bool: ...


@runtime_checkable
class EventRegistrationRepository(Protocol):
    async def find_by_id(self, registration_id: uuid.UUID) -> EventRegistration | None: ...

    async def find_by_event_id(self, event_id: uuid.UUID) -> list[EventRegistration]: ...

    async def find_by_user_id(self, user_id: uuid.UUID) -> list[EventRegistration]: ...

    async def find_by_event_and_user(
        self, event_id: uuid.UUID, user_id: uuid.UUID
    ) -> EventRegistration | None: ...

    async def create(self, registration: EventRegistration) -> EventRegistration: ...

    async def update(self, registration: EventRegistration) -> EventRegistration: ...

    async def delete(self, registration_id: uuid.UUID) -> None: ...


__all__ = [
    "UserRepository",
    "EventCategoryRepository",
    "EventRepository",
    "EventInvitationRepository",
    "EventRegistrationRepository",
]
