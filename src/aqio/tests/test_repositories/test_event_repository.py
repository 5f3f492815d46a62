import uuid
from datetime import timedelta

import pytest
from sqlalchemy import update

from aqio.domain.entities import Event, EventStatus, LocationType, User, utcnow
from aqio.domain.pagination import EventFilter, PaginationParams
from aqio.exceptions.domain import DataIntegrityError, NotFoundError, ValidationError
from aqio.models import EventModel
from aqio.repositories.event_repository import SqliteEventRepository


@pytest.mark.asyncio
class TestEventRepositoryCreate:
    """
    Tests covering SqliteEventRepository.create().

    Rationale:
      - Events carry JSON columns (co-organizers, custom fields) and enum columns
        that must survive the round trip through text storage.
      - An event references both a category and an organizer. When the insert
        fails on a foreign key, the category is reported first.
    """

    async def test_round_trip(self, event_repository: SqliteEventRepository, build_event, created_user: User):
        """
        Behavior:
          - Every column written by create() comes back from find_by_id().
        """
        co_organizers = [uuid.uuid4(), uuid.uuid4()]
        event = build_event(
            created_user.id,
            location_type=LocationType.HYBRID,
            virtual_link="https://meet.example.org/smolt",
            co_organizers=co_organizers,
            custom_fields={"boat_tour": True, "max_boat_seats": 12},
            max_attendees=40,
            allow_waitlist=True,
            status=EventStatus.PUBLISHED,
        )
        await event_repository.create(event)

        found = await event_repository.find_by_id(event.id)
        assert found is not None
        assert found.title == event.title
        assert found.organizer_id == created_user.id
        assert found.co_organizers == co_organizers
        assert found.custom_fields == {"boat_tour": True, "max_boat_seats": 12}
        assert found.location_type is LocationType.HYBRID
        assert found.status is EventStatus.PUBLISHED
        assert found.max_attendees == 40
        assert found.allow_waitlist is True
        assert found.start_date == event.start_date
        assert found.end_date - found.start_date == timedelta(hours=2)

    async def test_unknown_category_is_reported_before_unknown_organizer(self, event_repository, build_event):
        """
        Behavior:
          - Both references dangle; the diagnostic checks category_id first and reports it.

        Importance:
          - The order is fixed so the client always sees the same field for the same input.
        """
        event = build_event(uuid.uuid4(), category_id="aquaponics")

        with pytest.raises(ValidationError) as exc_info:
            await event_repository.create(event)

        error = exc_info.value
        assert error.field == "category_id"
        assert error.constraint == "foreign_key"
        assert error.value == "aquaponics"
        assert error.message == (
            "The event category 'aquaponics' does not exist or is not active. "
            "Please choose one of the available categories."
        )

    async def test_unknown_organizer(self, event_repository, build_event):
        organizer_id = uuid.uuid4()

        with pytest.raises(ValidationError) as exc_info:
            await event_repository.create(build_event(organizer_id))

        error = exc_info.value
        assert error.field == "organizer_id"
        assert error.value == str(organizer_id)
        assert error.http_status() == 400

    async def test_invalid_event_is_rejected_before_storage(self, event_repository, build_event, created_user):
        start = utcnow()
        with pytest.raises(ValidationError) as exc_info:
            await event_repository.create(build_event(created_user.id, start_date=start, end_date=start))
        assert exc_info.value.field == "dates"


@pytest.mark.asyncio
class TestEventRepositoryQueries:
    async def test_find_by_filter(self, event_repository, create_event):
        """
        Behavior:
          - title_contains matches case-insensitively.
          - Several set fields combine with AND.
        """
        base = utcnow().replace(microsecond=0) + timedelta(days=10)
        salmon = await create_event(title="Salmon Health Day", start_date=base, end_date=base + timedelta(hours=2))
        await create_event(
            title="Trout and salmon feed",
            status=EventStatus.PUBLISHED,
            start_date=base + timedelta(days=1),
            end_date=base + timedelta(days=1, hours=2),
        )
        await create_event(title="Net pen maintenance", start_date=base, end_date=base + timedelta(hours=1))

        result = await event_repository.find_by_filter(EventFilter(title_contains="SALMON"), PaginationParams())
        assert result.total_count == 2
        assert {e.title for e in result.items} == {"Salmon Health Day", "Trout and salmon feed"}

        drafts = await event_repository.find_by_filter(
            EventFilter(title_contains="salmon", status=EventStatus.DRAFT), PaginationParams()
        )
        assert [e.id for e in drafts.items] == [salmon.id]

    async def test_title_filter_wildcards_are_literal(self, event_repository, create_event):
        await create_event(title="Smolt quality workshop")
        discount = await create_event(title="50% off feed_trials")

        percent = await event_repository.find_by_filter(EventFilter(title_contains="%"), PaginationParams())
        assert [e.id for e in percent.items] == [discount.id]

        # "t_q" would match "Smolt quality" if the underscore were a wildcard
        underscored = await event_repository.find_by_filter(EventFilter(title_contains="t_q"), PaginationParams())
        assert underscored.total_count == 0

    async def test_find_by_filter_date_window(self, event_repository, create_event):
        base = utcnow().replace(microsecond=0) + timedelta(days=30)
        early = await create_event(start_date=base, end_date=base + timedelta(hours=1))
        await create_event(start_date=base + timedelta(days=5), end_date=base + timedelta(days=5, hours=1))

        result = await event_repository.find_by_filter(
            EventFilter(start_date_from=base - timedelta(hours=1), start_date_to=base + timedelta(days=1)),
            PaginationParams(),
        )
        assert [e.id for e in result.items] == [early.id]

    async def test_find_by_filter_rejects_invalid_filter(self, event_repository):
        with pytest.raises(ValidationError):
            await event_repository.find_by_filter(EventFilter(title_contains="  "), PaginationParams())

    async def test_latest_start_first(self, event_repository, create_event):
        base = utcnow().replace(microsecond=0) + timedelta(days=3)
        events = [
            await create_event(start_date=base + timedelta(days=offset), end_date=base + timedelta(days=offset, hours=1))
            for offset in (0, 2, 1)
        ]

        page = await event_repository.list_all(PaginationParams())
        assert [e.id for e in page.items] == [events[1].id, events[2].id, events[0].id]

    async def test_last_page_is_short(self, event_repository, create_event):
        for _ in range(5):
            await create_event()

        page = await event_repository.list_all(PaginationParams.new(3, 3))
        assert len(page.items) == 2
        assert page.total_count == 5
        assert page.has_next is False

    async def test_find_by_organizer_pages(self, event_repository, create_event, create_user):
        other = await create_user()
        for _ in range(3):
            await create_event()
        await create_event(organizer_id=other.id)

        page = await event_repository.find_by_organizer(other.id, PaginationParams.new(0, 10))
        assert page.total_count == 1
        assert page.items[0].organizer_id == other.id

    async def test_find_by_category(self, event_repository, create_event):
        workshop = await create_event(category_id="workshop")
        await create_event()

        found = await event_repository.find_by_category("workshop")
        assert [e.id for e in found] == [workshop.id]
        assert await event_repository.find_by_category("meeting") == []

    async def test_corrupt_co_organizers_raise_data_integrity(
        self, event_repository, created_event: Event, repository_factory
    ):
        """
        Behavior:
          - A co_organizers column holding broken JSON fails to decode.
          - The caller gets DataIntegrityError naming the column.
        """
        async with repository_factory.session_factory() as session:
            async with session.begin():
                await session.execute(
                    update(EventModel.__table__)
                    .where(EventModel.__table__.c.id == str(created_event.id))
                    .values(co_organizers="[not json")
                )

        with pytest.raises(DataIntegrityError) as exc_info:
            await event_repository.find_by_id(created_event.id)
        assert exc_info.value.field == "co_organizers"


@pytest.mark.asyncio
class TestEventRepositoryWrite:
    async def test_update(self, event_repository, created_event: Event):
        created_event.title = "Rescheduled: lice workshop"
        created_event.status = EventStatus.CANCELLED
        updated = await event_repository.update(created_event)

        found = await event_repository.find_by_id(created_event.id)
        assert found.title == "Rescheduled: lice workshop"
        assert found.status is EventStatus.CANCELLED
        assert found.updated_at >= updated.created_at

    async def test_update_to_unknown_category_is_diagnosed(self, event_repository, created_event: Event):
        created_event.category_id = "gone"
        with pytest.raises(ValidationError) as exc_info:
            await event_repository.update(created_event)
        assert exc_info.value.field == "category_id"

    async def test_update_missing(self, event_repository, build_event, created_user):
        event = build_event(created_user.id)
        with pytest.raises(NotFoundError) as exc_info:
            await event_repository.update(event)
        assert exc_info.value.entity == "Event"

    async def test_delete(self, event_repository, created_event: Event):
        await event_repository.delete(created_event.id)
        assert await event_repository.find_by_id(created_event.id) is None

    async def test_delete_missing(self, event_repository):
        with pytest.raises(NotFoundError):
            await event_repository.delete(uuid.uuid4())
