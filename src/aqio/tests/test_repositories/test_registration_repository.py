import uuid
from datetime import timedelta

import pytest

from aqio.domain.entities import Event, RegistrationSource, RegistrationStatus, User, utcnow
from aqio.exceptions.domain import ConflictError, NotFoundError, ValidationError
from aqio.repositories.registration_repository import SqliteEventRegistrationRepository


@pytest.mark.asyncio
class TestRegistrationRepositoryCreate:
    """
    Tests covering SqliteEventRegistrationRepository.create().

    Rationale:
      - One registration per (event, user); a repeat is a conflict on user_id.
      - Dangling references are diagnosed in the order event, user, invitation.
    """

    async def test_register_user(
        self,
        registration_repository: SqliteEventRegistrationRepository,
        build_registration,
        created_event: Event,
        created_user: User,
    ):
        registration = build_registration(
            created_event.id,
            user_id=created_user.id,
            guest_count=2,
            guest_names=["Kari", "Per"],
            custom_responses={"diet": "vegetarian", "boat_tour": True},
        )
        await registration_repository.create(registration)

        found = await registration_repository.find_by_event_and_user(created_event.id, created_user.id)
        assert found is not None
        assert found.id == registration.id
        assert found.guest_names == ["Kari", "Per"]
        assert found.custom_responses == {"diet": "vegetarian", "boat_tour": True}
        assert found.status is RegistrationStatus.REGISTERED
        assert found.registration_source is RegistrationSource.DIRECT

    async def test_register_external_guest(self, registration_repository, build_registration, created_event):
        registration = build_registration(
            created_event.id, registrant_email="ext@lakseoppdrett.no", registrant_name="External Guest"
        )
        await registration_repository.create(registration)

        found = await registration_repository.find_by_id(registration.id)
        assert found.user_id is None
        assert found.registrant_name == "External Guest"

    async def test_second_registration_conflicts(
        self, registration_repository, build_registration, created_event, created_user
    ):
        await registration_repository.create(build_registration(created_event.id, user_id=created_user.id))

        with pytest.raises(ConflictError) as exc_info:
            await registration_repository.create(build_registration(created_event.id, user_id=created_user.id))

        error = exc_info.value
        assert error.field == "user_id"
        assert error.message == "You are already registered for this event."
        assert error.http_status() == 409

    async def test_user_and_email_identity_violates_check(
        self, registration_repository, build_registration, created_event, created_user
    ):
        registration = build_registration(
            created_event.id,
            user_id=created_user.id,
            registrant_email="dup@fjord.no",
            registrant_name="Dup",
        )
        with pytest.raises(ValidationError) as exc_info:
            await registration_repository.create(registration)
        assert exc_info.value.field == "registrant_identity"

    async def test_unknown_event_is_diagnosed(self, registration_repository, build_registration, created_user):
        event_id = uuid.uuid4()
        with pytest.raises(ValidationError) as exc_info:
            await registration_repository.create(build_registration(event_id, user_id=created_user.id))

        error = exc_info.value
        assert error.field == "event_id"
        assert error.message == (
            f"The event with ID '{event_id}' does not exist. Registrations must belong to an existing event."
        )

    async def test_unknown_user_is_diagnosed(self, registration_repository, build_registration, created_event):
        """
        Behavior:
          - The event exists, so the violation is pinned on user_id rather than event_id.
        """
        user_id = uuid.uuid4()
        with pytest.raises(ValidationError) as exc_info:
            await registration_repository.create(build_registration(created_event.id, user_id=user_id))

        error = exc_info.value
        assert error.field == "user_id"
        assert str(user_id) in error.message
        assert await registration_repository.find_by_event_id(created_event.id) == []

    async def test_unknown_invitation_is_diagnosed(
        self, registration_repository, build_registration, created_event, created_user
    ):
        invitation_id = uuid.uuid4()
        with pytest.raises(ValidationError) as exc_info:
            await registration_repository.create(
                build_registration(created_event.id, user_id=created_user.id, invitation_id=invitation_id)
            )
        assert exc_info.value.field == "invitation_id"
        assert exc_info.value.message == f"The invitation with ID '{invitation_id}' does not exist."


@pytest.mark.asyncio
class TestRegistrationRepositoryQueriesAndWrites:
    async def test_event_registrations_in_arrival_order(
        self, registration_repository, build_registration, created_event, create_user
    ):
        base = utcnow()
        late = build_registration(created_event.id, user_id=(await create_user()).id, registered_at=base)
        early = build_registration(
            created_event.id, user_id=(await create_user()).id, registered_at=base - timedelta(minutes=30)
        )
        for registration in (late, early):
            await registration_repository.create(registration)

        found = await registration_repository.find_by_event_id(created_event.id)
        assert [r.id for r in found] == [early.id, late.id]

    async def test_user_registrations_most_recent_first(
        self, registration_repository, build_registration, create_event, created_user
    ):
        base = utcnow()
        first_event, second_event = await create_event(), await create_event()
        older = build_registration(first_event.id, user_id=created_user.id, registered_at=base - timedelta(days=1))
        newer = build_registration(second_event.id, user_id=created_user.id, registered_at=base)
        for registration in (older, newer):
            await registration_repository.create(registration)

        found = await registration_repository.find_by_user_id(created_user.id)
        assert [r.id for r in found] == [newer.id, older.id]
        assert await registration_repository.find_by_event_and_user(first_event.id, uuid.uuid4()) is None

    async def test_update(self, registration_repository, build_registration, created_event, created_user):
        registration = await registration_repository.create(
            build_registration(created_event.id, user_id=created_user.id)
        )
        registration.status = RegistrationStatus.CANCELLED
        registration.cancelled_at = utcnow()
        await registration_repository.update(registration)

        found = await registration_repository.find_by_id(registration.id)
        assert found.status is RegistrationStatus.CANCELLED
        assert found.cancelled_at is not None

    async def test_update_with_negative_guests_is_rejected(
        self, registration_repository, build_registration, created_event, created_user
    ):
        registration = await registration_repository.create(
            build_registration(created_event.id, user_id=created_user.id)
        )
        registration.guest_count = -1
        with pytest.raises(ValidationError) as exc_info:
            await registration_repository.update(registration)
        assert exc_info.value.field == "guest_count"

    async def test_delete(self, registration_repository, build_registration, created_event, created_user):
        registration = await registration_repository.create(
            build_registration(created_event.id, user_id=created_user.id)
        )
        await registration_repository.delete(registration.id)
        assert await registration_repository.find_by_id(registration.id) is None
        with pytest.raises(NotFoundError):
            await registration_repository.delete(registration.id)
