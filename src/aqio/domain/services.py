"""
Storage-free domain services.

These hold the rules that operate on a single entity (or an entity plus a count
supplied by the caller): registration windows, invitation responses, waitlist
placement and registration status transitions. Rule violations raise
`BusinessRuleViolation`; nothing here touches a repository.
"""

import uuid
from datetime import datetime, timedelta

from aqio.exceptions.domain import DomainError

from .entities import (
    Event,
    EventInvitation,
    EventRegistration,
    EventStatus,
    InvitationStatus,
    RegistrationStatus,
    User,
    utcnow,
)


class EventService:
    def validate_event(self, event: Event) -> None:
        event.validate()

    def can_register_for_event(self, event: Event, now: datetime | None = None) -> None:
        """Raise when the event no longer accepts registrations."""
        now = now or utcnow()
        if now > event.start_date:
            raise DomainError.business_rule("Cannot register for an event that has already started")
        if event.status == EventStatus.CANCELLED:
            raise DomainError.business_rule("Cannot register for a cancelled event")

    def calculate_available_spots(self, event: Event, current_registrations: int) -> int | None:
        """Remaining capacity, never below zero. None means the event is unlimited."""
        if event.max_attendees is None:
            return None
        return max(event.max_attendees - current_registrations, 0)

    def should_add_to_waitlist(self, event: Event, current_registrations: int) -> bool:
        if not event.allow_waitlist or event.max_attendees is None:
            return False
        return current_registrations >= event.max_attendees


_FINAL_INVITATION_STATUSES = (InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.CANCELLED)
_FINAL_REGISTRATION_STATUSES = (RegistrationStatus.CANCELLED, RegistrationStatus.ATTENDED, RegistrationStatus.NO_SHOW)


class InvitationService:
    def validate_invitation(self, invitation: EventInvitation) -> None:
        invitation.validate()

    def ensure_status_can_change(self, invitation: EventInvitation) -> None:
        """Accepted, declined and cancelled invitations are final."""
        if invitation.status in _FINAL_INVITATION_STATUSES:
            raise DomainError.business_rule(f"Invitation is already {invitation.status.value}")

    def can_respond(self, invitation: EventInvitation, now: datetime | None = None) -> None:
        if invitation.status != InvitationStatus.PENDING:
            raise DomainError.business_rule("Can only respond to pending invitations")
        if invitation.is_expired(now):
            raise DomainError.business_rule("Invitation has expired")

    def generate_invitation_token(self) -> str:
        return uuid.uuid4().hex

    def calculate_expiry(self, days_from_now: int) -> datetime:
        return utcnow() + timedelta(days=days_from_now)

    def mark_as_sent(self, invitation: EventInvitation) -> None:
        now = utcnow()
        invitation.status = InvitationStatus.SENT
        invitation.sent_at = now
        invitation.updated_at = now

    def mark_as_opened(self, invitation: EventInvitation) -> None:
        # Opening only counts once the invitation has actually gone out.
        if invitation.status not in (InvitationStatus.SENT, InvitationStatus.DELIVERED):
            return
        now = utcnow()
        invitation.status = InvitationStatus.OPENED
        invitation.opened_at = now
        invitation.updated_at = now

    def accept(self, invitation: EventInvitation) -> None:
        self._respond(invitation, InvitationStatus.ACCEPTED)

    def decline(self, invitation: EventInvitation) -> None:
        self._respond(invitation, InvitationStatus.DECLINED)

    def _respond(self, invitation: EventInvitation, status: InvitationStatus) -> None:
        self.can_respond(invitation)
        now = utcnow()
        invitation.status = status
        invitation.responded_at = now
        invitation.updated_at = now


class RegistrationService:
    def calculate_waitlist_position(self, existing_waitlist_count: int) -> int:
        return existing_waitlist_count + 1

    def register_for_event(self, registration: EventRegistration, should_waitlist: bool) -> None:
        now = utcnow()
        if should_waitlist:
            registration.status = RegistrationStatus.WAITLISTED
            registration.waitlist_added_at = now
        else:
            registration.status = RegistrationStatus.REGISTERED
        registration.registered_at = now
        registration.updated_at = now

    def ensure_status_can_change(self, registration: EventRegistration) -> None:
        """Cancelled, attended and no-show registrations are final."""
        if registration.status in _FINAL_REGISTRATION_STATUSES:
            raise DomainError.business_rule(f"Registration is already {registration.status.value}")

    def transition(self, registration: EventRegistration, status: RegistrationStatus) -> None:
        """Move `registration` to `status` through the guard that owns that move."""
        if status == RegistrationStatus.CANCELLED:
            self.cancel(registration)
        elif status == RegistrationStatus.ATTENDED:
            self.check_in(registration)
        elif status == RegistrationStatus.NO_SHOW:
            self.mark_no_show(registration)
        elif status == RegistrationStatus.REGISTERED and registration.status == RegistrationStatus.WAITLISTED:
            self.promote_from_waitlist(registration)
        else:
            self.ensure_status_can_change(registration)
            registration.status = status
            registration.updated_at = utcnow()

    def cancel(self, registration: EventRegistration) -> None:
        self.ensure_status_can_change(registration)
        now = utcnow()
        registration.status = RegistrationStatus.CANCELLED
        registration.cancelled_at = now
        registration.updated_at = now

    def promote_from_waitlist(self, registration: EventRegistration) -> None:
        if registration.status != RegistrationStatus.WAITLISTED:
            raise DomainError.business_rule("Only waitlisted registrations can be promoted")
        registration.status = RegistrationStatus.REGISTERED
        registration.waitlist_position = None
        registration.waitlist_added_at = None
        registration.updated_at = utcnow()

    def check_in(self, registration: EventRegistration) -> None:
        if registration.status != RegistrationStatus.REGISTERED:
            raise DomainError.business_rule("Only registered participants can be checked in")
        now = utcnow()
        registration.status = RegistrationStatus.ATTENDED
        registration.checked_in_at = now
        registration.updated_at = now

    def mark_no_show(self, registration: EventRegistration) -> None:
        if registration.status != RegistrationStatus.REGISTERED:
            raise DomainError.business_rule("Only registered participants can be marked as no-show")
        registration.status = RegistrationStatus.NO_SHOW
        registration.updated_at = utcnow()


class UserService:
    def validate_user(self, user: User) -> None:
        user.validate()

    def activate(self, user: User) -> None:
        user.is_active = True
        user.updated_at = utcnow()

    def deactivate(self, user: User) -> None:
        user.is_active = False
        user.updated_at = utcnow()


__all__ = [
    "EventService",
    "InvitationService",
    "RegistrationService",
    "UserService",
]
