"""Event and event-category use cases."""

import dataclasses
import logging
import uuid

from aqio.domain.entities import Event, EventCategory, utcnow
from aqio.domain.pagination import EventFilter, PaginatedResult, PaginationParams
from aqio.domain.services import EventService
from aqio.exceptions.domain import DomainError
from aqio.repositories.interfaces import EventCategoryRepository, EventRepository

logger = logging.getLogger(__name__)


class EventApplicationService:
    """
    Orchestrates event use cases over an `EventRepository`.

    Ownership rule: only the organizer may update or delete an event, and an
    event that has already started cannot be deleted.
    """

    def __init__(self, event_repository: EventRepository, event_service: EventService | None = None):
        self.event_repository = event_repository
        self.event_service = event_service or EventService()

    async def create_event(self, event: Event, organizer_id: uuid.UUID) -> Event:
        event = dataclasses.replace(event, organizer_id=organizer_id)
        self.event_service.validate_event(event)
        created = await self.event_repository.create(event)
        logger.info("service.event.created", extra={"event_id": str(created.id), "organizer_id": str(organizer_id)})
        return created

    async def get_event_by_id(self, event_id: uuid.UUID) -> Event:
        event = await self.event_repository.find_by_id(event_id)
        if event is None:
            raise DomainError.not_found("Event", event_id)
        return event

    async def list_events(self, event_filter: EventFilter, pagination: PaginationParams) -> PaginatedResult[Event]:
        return await self.event_repository.find_by_filter(event_filter, pagination)

    async def update_event(self, event_id: uuid.UUID, changes: Event, organizer_id: uuid.UUID) -> Event:
        existing = await self.get_event_by_id(event_id)
        if existing.organizer_id != organizer_id:
            raise DomainError.forbidden("Only the event organizer can update this event")

        updated = dataclasses.replace(
            changes,
            id=existing.id,
            organizer_id=existing.organizer_id,
            created_at=existing.created_at,
            updated_at=utcnow(),
        )
        self.event_service.validate_event(updated)
        return await self.event_repository.update(updated)

    async def delete_event(self, event_id: uuid.UUID, organizer_id: uuid.UUID) -> None:
        existing = await self.get_event_by_id(event_id)
        if existing.organizer_id != organizer_id:
            raise DomainError.forbidden("Only the event organizer can delete this event")
        if existing.has_started():
            raise DomainError.business_rule("Cannot delete an event that has already started")
        await self.event_repository.delete(event_id)
        logger.info("service.event.deleted", extra={"event_id": str(event_id)})

    async def get_events_by_organizer(
        self, organizer_id: uuid.UUID, pagination: PaginationParams
    ) -> PaginatedResult[Event]:
        return await self.event_repository.find_by_organizer(organizer_id, pagination)

    async def check_event_capacity(self, event_id: uuid.UUID) -> int | None:
        event = await self.get_event_by_id(event_id)
        return event.max_attendees


class EventCategoryApplicationService:
    def __init__(self, category_repository: EventCategoryRepository):
        self.category_repository = category_repository

    async def get_category_by_id(self, category_id: str) -> EventCategory:
        category = await self.category_repository.find_by_id(category_id)
        if category is None:
            raise DomainError.not_found("EventCategory", category_id)
        return category

    async def list_active_categories(self) -> list[EventCategory]:
        return await self.category_repository.list_active()

    async def list_all_categories(self) -> list[EventCategory]:
        return await self.category_repository.list_all()

    async def create_category(self, category: EventCategory) -> EventCategory:
        return await self.category_repository.create(category)

    async def update_category(self, category: EventCategory) -> EventCategory:
        return await self.category_repository.update(category)

    async def delete_category(self, category_id: str) -> None:
        await self.category_repository.delete(category_id)
