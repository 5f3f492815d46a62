import uuid
from datetime import timedelta

import pytest

from aqio.domain.entities import Event, EventStatus, utcnow
from aqio.domain.pagination import EventFilter, PaginationParams
from aqio.exceptions.domain import BusinessRuleViolation, NotFoundError, UnauthorizedError, ValidationError
from aqio.services.events import EventApplicationService, EventCategoryApplicationService


@pytest.fixture
def event_service(event_repository) -> EventApplicationService:
    return EventApplicationService(event_repository)


@pytest.fixture
def category_service(category_repository) -> EventCategoryApplicationService:
    return EventCategoryApplicationService(category_repository)


@pytest.mark.asyncio
class TestEventApplicationService:
    """
    Tests covering the event use cases.

    Rationale:
      - The organizer passed to create_event owns the event regardless of what the payload says.
      - Only the organizer may change or delete an event; a started event cannot be deleted.
    """

    async def test_create_sets_organizer(self, event_service, build_event, created_user):
        event = await event_service.create_event(build_event(uuid.uuid4()), created_user.id)
        assert event.organizer_id == created_user.id
        assert (await event_service.get_event_by_id(event.id)).organizer_id == created_user.id

    async def test_update_by_organizer(self, event_service, created_event: Event):
        changes = Event(
            title="Updated title",
            description=created_event.description,
            category_id="workshop",
            start_date=created_event.start_date,
            end_date=created_event.end_date,
            organizer_id=uuid.uuid4(),
            status=EventStatus.PUBLISHED,
        )

        updated = await event_service.update_event(created_event.id, changes, created_event.organizer_id)

        assert updated.id == created_event.id
        assert updated.organizer_id == created_event.organizer_id
        stored = await event_service.get_event_by_id(created_event.id)
        assert stored.title == "Updated title"
        assert stored.category_id == "workshop"

    async def test_update_by_someone_else_is_forbidden(self, event_service, created_event: Event):
        with pytest.raises(UnauthorizedError) as exc_info:
            await event_service.update_event(created_event.id, created_event, uuid.uuid4())

        error = exc_info.value
        assert error.forbidden is True
        assert error.http_status() == 403
        assert error.message == "Only the event organizer can update this event"

    async def test_delete_by_someone_else_is_forbidden(self, event_service, created_event: Event):
        with pytest.raises(UnauthorizedError):
            await event_service.delete_event(created_event.id, uuid.uuid4())

    async def test_cannot_delete_started_event(self, event_service, create_event, created_user):
        start = utcnow() - timedelta(hours=1)
        started = await create_event(start_date=start, end_date=start + timedelta(hours=3))

        with pytest.raises(BusinessRuleViolation) as exc_info:
            await event_service.delete_event(started.id, created_user.id)
        assert exc_info.value.message == "Cannot delete an event that has already started"

    async def test_delete(self, event_service, created_event: Event):
        await event_service.delete_event(created_event.id, created_event.organizer_id)
        with pytest.raises(NotFoundError):
            await event_service.get_event_by_id(created_event.id)

    async def test_list_and_capacity(self, event_service, create_event, created_user):
        event = await create_event(max_attendees=25)
        await create_event()

        page = await event_service.list_events(EventFilter(organizer_id=created_user.id), PaginationParams())
        assert page.total_count == 2
        assert (await event_service.get_events_by_organizer(created_user.id, PaginationParams())).total_count == 2
        assert await event_service.check_event_capacity(event.id) == 25

    async def test_invalid_event(self, event_service, build_event, created_user):
        with pytest.raises(ValidationError):
            await event_service.create_event(build_event(created_user.id, title=""), created_user.id)


@pytest.mark.asyncio
class TestEventCategoryApplicationService:
    async def test_list_and_get(self, category_service):
        assert len(await category_service.list_active_categories()) == 6
        assert (await category_service.get_category_by_id("training")).name == "Training"

    async def test_get_missing(self, category_service):
        with pytest.raises(NotFoundError) as exc_info:
            await category_service.get_category_by_id("rowing")
        assert exc_info.value.entity == "EventCategory"
