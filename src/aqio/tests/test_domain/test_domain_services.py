import uuid
from datetime import timedelta

import pytest

from aqio.domain.entities import (
    Event,
    EventInvitation,
    EventRegistration,
    EventStatus,
    InvitationStatus,
    RegistrationStatus,
    User,
    utcnow,
)
from aqio.domain.services import EventService, InvitationService, RegistrationService, UserService
from aqio.exceptions.domain import BusinessRuleViolation


def make_event(**overrides) -> Event:
    start = utcnow() + timedelta(days=3)
    data = {
        "title": "Smolt production seminar",
        "description": "Talks and lunch",
        "category_id": "conf",
        "start_date": start,
        "end_date": start + timedelta(hours=6),
        "organizer_id": uuid.uuid4(),
    }
    data.update(overrides)
    return Event(**data)


def make_invitation(**overrides) -> EventInvitation:
    data = {"event_id": uuid.uuid4(), "inviter_id": uuid.uuid4(), "invited_user_id": uuid.uuid4()}
    data.update(overrides)
    return EventInvitation(**data)


def make_registration(**overrides) -> EventRegistration:
    data = {"event_id": uuid.uuid4(), "user_id": uuid.uuid4()}
    data.update(overrides)
    return EventRegistration(**data)


class TestEventService:
    service = EventService()

    def test_can_register_for_upcoming_event(self):
        self.service.can_register_for_event(make_event())

    def test_cannot_register_after_start(self):
        event = make_event()
        with pytest.raises(BusinessRuleViolation) as exc_info:
            self.service.can_register_for_event(event, now=event.start_date + timedelta(minutes=1))
        assert exc_info.value.message == "Cannot register for an event that has already started"

    def test_cannot_register_for_cancelled_event(self):
        with pytest.raises(BusinessRuleViolation) as exc_info:
            self.service.can_register_for_event(make_event(status=EventStatus.CANCELLED))
        assert exc_info.value.message == "Cannot register for a cancelled event"

    def test_available_spots(self):
        assert self.service.calculate_available_spots(make_event(), 10) is None
        assert self.service.calculate_available_spots(make_event(max_attendees=10), 4) == 6
        assert self.service.calculate_available_spots(make_event(max_attendees=10), 12) == 0

    def test_waitlist(self):
        assert self.service.should_add_to_waitlist(make_event(), 1000) is False
        assert self.service.should_add_to_waitlist(make_event(max_attendees=2), 5) is False
        assert self.service.should_add_to_waitlist(make_event(max_attendees=2, allow_waitlist=True), 1) is False
        assert self.service.should_add_to_waitlist(make_event(max_attendees=2, allow_waitlist=True), 2) is True


class TestInvitationService:
    service = InvitationService()

    def test_token_is_unique_hex(self):
        first, second = self.service.generate_invitation_token(), self.service.generate_invitation_token()
        assert first != second
        assert len(first) == 32
        int(first, 16)

    def test_calculate_expiry(self):
        expiry = self.service.calculate_expiry(7)
        assert timedelta(days=6, hours=23) < expiry - utcnow() <= timedelta(days=7)

    def test_mark_as_sent_then_opened(self):
        invitation = make_invitation()
        self.service.mark_as_sent(invitation)
        assert invitation.status == InvitationStatus.SENT
        assert invitation.sent_at is not None
        self.service.mark_as_opened(invitation)
        assert invitation.status == InvitationStatus.OPENED
        assert invitation.opened_at is not None

    def test_opening_a_pending_invitation_changes_nothing(self):
        invitation = make_invitation()
        self.service.mark_as_opened(invitation)
        assert invitation.status == InvitationStatus.PENDING
        assert invitation.opened_at is None

    def test_accept_pending(self):
        invitation = make_invitation()
        self.service.accept(invitation)
        assert invitation.status == InvitationStatus.ACCEPTED
        assert invitation.responded_at is not None

    def test_cannot_respond_twice(self):
        invitation = make_invitation()
        self.service.decline(invitation)
        with pytest.raises(BusinessRuleViolation) as exc_info:
            self.service.accept(invitation)
        assert exc_info.value.message == "Can only respond to pending invitations"

    def test_cannot_respond_when_expired(self):
        invitation = make_invitation(expires_at=utcnow() - timedelta(hours=1))
        with pytest.raises(BusinessRuleViolation) as exc_info:
            self.service.accept(invitation)
        assert exc_info.value.message == "Invitation has expired"

    @pytest.mark.parametrize("status", [InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.CANCELLED])
    def test_final_statuses_cannot_change(self, status):
        with pytest.raises(BusinessRuleViolation) as exc_info:
            self.service.ensure_status_can_change(make_invitation(status=status))
        assert exc_info.value.message == f"Invitation is already {status.value}"

    def test_open_statuses_can_change(self):
        self.service.ensure_status_can_change(make_invitation(status=InvitationStatus.SENT))


class TestRegistrationService:
    service = RegistrationService()

    def test_waitlist_position(self):
        assert self.service.calculate_waitlist_position(0) == 1
        assert self.service.calculate_waitlist_position(4) == 5

    def test_register_or_waitlist(self):
        registration = make_registration()
        self.service.register_for_event(registration, should_waitlist=True)
        assert registration.status == RegistrationStatus.WAITLISTED
        assert registration.waitlist_added_at is not None

        registration = make_registration()
        self.service.register_for_event(registration, should_waitlist=False)
        assert registration.status == RegistrationStatus.REGISTERED

    def test_cancel_once(self):
        registration = make_registration()
        self.service.cancel(registration)
        assert registration.cancelled_at is not None
        with pytest.raises(BusinessRuleViolation, match="already cancelled"):
            self.service.cancel(registration)

    def test_promote_from_waitlist(self):
        registration = make_registration(status=RegistrationStatus.WAITLISTED, waitlist_position=3)
        self.service.promote_from_waitlist(registration)
        assert registration.status == RegistrationStatus.REGISTERED
        assert registration.waitlist_position is None

    def test_promote_requires_waitlisted(self):
        with pytest.raises(BusinessRuleViolation):
            self.service.promote_from_waitlist(make_registration())

    def test_check_in_and_no_show_require_registered(self):
        registration = make_registration(status=RegistrationStatus.CANCELLED)
        with pytest.raises(BusinessRuleViolation, match="checked in"):
            self.service.check_in(registration)
        with pytest.raises(BusinessRuleViolation, match="no-show"):
            self.service.mark_no_show(registration)

    def test_check_in(self):
        registration = make_registration()
        self.service.check_in(registration)
        assert registration.status == RegistrationStatus.ATTENDED
        assert registration.checked_in_at is not None

    def test_cannot_cancel_after_attending(self):
        registration = make_registration(status=RegistrationStatus.ATTENDED)
        with pytest.raises(BusinessRuleViolation) as exc_info:
            self.service.cancel(registration)
        assert exc_info.value.message == "Registration is already attended"

    def test_transition_uses_the_matching_guard(self):
        registration = make_registration(status=RegistrationStatus.WAITLISTED, waitlist_position=2)
        self.service.transition(registration, RegistrationStatus.REGISTERED)
        assert registration.waitlist_position is None

        self.service.transition(registration, RegistrationStatus.ATTENDED)
        assert registration.checked_in_at is not None

        with pytest.raises(BusinessRuleViolation):
            self.service.transition(registration, RegistrationStatus.WAITLISTED)
        assert registration.status == RegistrationStatus.ATTENDED


class TestUserService:
    def test_activate_and_deactivate(self):
        service = UserService()
        user = User(keycloak_id="kc", email="a@b.no", name="A", is_active=False)
        service.activate(user)
        assert user.is_active is True
        service.deactivate(user)
        assert user.is_active is False
