import uuid
from datetime import timedelta

import pytest

from aqio.domain.entities import (
    Event,
    EventCategory,
    EventInvitation,
    EventRegistration,
    User,
    utcnow,
)
from aqio.domain.pagination import MAX_PAGE_SIZE, EventFilter, PaginatedResult, PaginationParams
from aqio.exceptions.domain import ValidationError


def make_event(**overrides) -> Event:
    start = utcnow() + timedelta(days=1)
    data = {
        "title": "Lice counting workshop",
        "description": "Hands-on session",
        "category_id": "workshop",
        "start_date": start,
        "end_date": start + timedelta(hours=3),
        "organizer_id": uuid.uuid4(),
    }
    data.update(overrides)
    return Event(**data)


class TestUserValidation:
    def test_valid_user(self):
        User(keycloak_id="kc-1", email="ola@fjord.no", name="Ola Nordmann").validate()

    @pytest.mark.parametrize(
        "overrides, field, message",
        [
            ({"name": "   "}, "name", "Name cannot be empty"),
            ({"name": "x" * 101}, "name", "Name cannot exceed 100 characters"),
            ({"email": ""}, "email", "Email cannot be empty"),
            ({"email": "not-an-email"}, "email", "Invalid email format"),
            ({"keycloak_id": " "}, "keycloak_id", "Keycloak ID cannot be empty"),
        ],
    )
    def test_invalid_user(self, overrides, field, message):
        data = {"keycloak_id": "kc-1", "email": "ola@fjord.no", "name": "Ola"}
        data.update(overrides)
        with pytest.raises(ValidationError) as exc_info:
            User(**data).validate()
        assert exc_info.value.field == field
        assert exc_info.value.message == message


class TestEventValidation:
    def test_valid_event(self):
        make_event().validate()

    def test_end_must_follow_start(self):
        start = utcnow()
        with pytest.raises(ValidationError) as exc_info:
            make_event(start_date=start, end_date=start).validate()
        assert exc_info.value.field == "dates"

    def test_title_length(self):
        with pytest.raises(ValidationError) as exc_info:
            make_event(title="t" * 201).validate()
        assert exc_info.value.message == "Title cannot exceed 200 characters"

    def test_negative_capacity(self):
        with pytest.raises(ValidationError) as exc_info:
            make_event(max_attendees=-1).validate()
        assert exc_info.value.field == "max_attendees"

    def test_has_started(self):
        event = make_event()
        assert event.has_started() is False
        assert event.has_started(event.start_date) is True


class TestInvitationValidation:
    def test_user_target(self):
        EventInvitation(event_id=uuid.uuid4(), inviter_id=uuid.uuid4(), invited_user_id=uuid.uuid4()).validate()

    def test_email_target_needs_name(self):
        invitation = EventInvitation(event_id=uuid.uuid4(), inviter_id=uuid.uuid4(), invited_email="kari@fjord.no")
        with pytest.raises(ValidationError) as exc_info:
            invitation.validate()
        assert exc_info.value.field == "invitation_target"

    def test_email_and_name_target(self):
        EventInvitation(
            event_id=uuid.uuid4(), inviter_id=uuid.uuid4(), invited_email="kari@fjord.no", invited_name="Kari"
        ).validate()

    @pytest.mark.parametrize("email", ["   ", "kari.fjord.no"])
    def test_malformed_email(self, email):
        invitation = EventInvitation(
            event_id=uuid.uuid4(), inviter_id=uuid.uuid4(), invited_email=email, invited_name="Kari"
        )
        with pytest.raises(ValidationError) as exc_info:
            invitation.validate()
        assert exc_info.value.field == "invited_email"
        assert exc_info.value.message == "Invalid email format"

    def test_blank_name(self):
        invitation = EventInvitation(
            event_id=uuid.uuid4(), inviter_id=uuid.uuid4(), invited_email="kari@fjord.no", invited_name="  "
        )
        with pytest.raises(ValidationError) as exc_info:
            invitation.validate()
        assert exc_info.value.field == "invited_name"

    def test_is_expired(self):
        now = utcnow()
        invitation = EventInvitation(event_id=uuid.uuid4(), inviter_id=uuid.uuid4(), expires_at=now)
        assert invitation.is_expired(now) is True
        assert invitation.is_expired(now - timedelta(seconds=1)) is False
        invitation.expires_at = None
        assert invitation.is_expired(now) is False


class TestRegistrationValidation:
    def test_identity_required(self):
        with pytest.raises(ValidationError) as exc_info:
            EventRegistration(event_id=uuid.uuid4(), registrant_email="a@b.no").validate()
        assert exc_info.value.field == "registrant_identity"

    @pytest.mark.parametrize(
        "identity",
        [
            {"user_id": uuid.uuid4()},
            {"external_contact_id": uuid.uuid4()},
            {"registrant_email": "a@b.no", "registrant_name": "A"},
        ],
    )
    def test_identity_forms(self, identity):
        EventRegistration(event_id=uuid.uuid4(), **identity).validate()

    def test_negative_guest_count(self):
        with pytest.raises(ValidationError) as exc_info:
            EventRegistration(event_id=uuid.uuid4(), user_id=uuid.uuid4(), guest_count=-2).validate()
        assert exc_info.value.field == "guest_count"
        assert exc_info.value.value == "-2"


class TestCategoryValidation:
    def test_blank_id(self):
        with pytest.raises(ValidationError) as exc_info:
            EventCategory(id=" ", name="Conference").validate()
        assert exc_info.value.field == "id"


class TestPagination:
    def test_defaults(self):
        params = PaginationParams()
        assert (params.offset, params.limit) == (0, 50)

    @pytest.mark.parametrize(
        "offset, limit, field",
        [(-1, 10, "offset"), (0, 0, "limit"), (0, MAX_PAGE_SIZE + 1, "limit")],
    )
    def test_invalid(self, offset, limit, field):
        with pytest.raises(ValidationError) as exc_info:
            PaginationParams.new(offset, limit)
        assert exc_info.value.field == field

    def test_has_next(self):
        params = PaginationParams.new(0, 2)
        assert PaginatedResult.of(["a", "b"], 3, params).has_next is True
        assert PaginatedResult.of(["a", "b"], 2, params).has_next is False

    def test_filter_title_bounds(self):
        with pytest.raises(ValidationError):
            EventFilter(title_contains="  ").validate()
        with pytest.raises(ValidationError):
            EventFilter(title_contains="x" * 101).validate()
        EventFilter(title_contains="salmon").validate()

    def test_filter_date_range(self):
        now = utcnow()
        with pytest.raises(ValidationError) as exc_info:
            EventFilter(start_date_from=now, start_date_to=now - timedelta(days=1)).validate()
        assert exc_info.value.field == "start_date_from"
