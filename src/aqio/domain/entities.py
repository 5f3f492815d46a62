"""
Domain entities and their closed enum vocabularies.

Entities are plain dataclasses with no knowledge of storage. Each one knows how
to validate itself; validation failures raise `ValidationError` naming the
offending field.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from aqio.exceptions.domain import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =================================================================================================================
# Enums
# =================================================================================================================


class LocationType(str, Enum):
    PHYSICAL = "physical"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class UserRole(str, Enum):
    ADMIN = "admin"
    ORGANIZER = "organizer"
    PARTICIPANT = "participant"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    OPENED = "opened"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"


class InvitationMethod(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    MANUAL = "manual"
    BULK_IMPORT = "bulk_import"


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"
    ATTENDED = "attended"
    NO_SHOW = "no_show"


class RegistrationSource(str, Enum):
    INVITATION = "invitation"
    DIRECT = "direct"
    WAITLIST_PROMOTION = "waitlist_promotion"


# =================================================================================================================
# Entities
# =================================================================================================================


@dataclass
class User:
    keycloak_id: str
    email: str
    name: str
    company_id: uuid.UUID | None = None
    role: UserRole = UserRole.PARTICIPANT
    is_active: bool = True
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def validate(self) -> None:
        name = self.name.strip()
        if not name:
            raise ValidationError("name", "Name cannot be empty")
        if len(name) > 100:
            raise ValidationError("name", "Name cannot exceed 100 characters")

        email = self.email.strip()
        if not email:
            raise ValidationError("email", "Email cannot be empty")
        if "@" not in email or "." not in email:
            raise ValidationError("email", "Invalid email format", value=self.email)

        if not self.keycloak_id.strip():
            raise ValidationError("keycloak_id", "Keycloak ID cannot be empty")


@dataclass
class EventCategory:
    id: str
    name: str
    description: str | None = None
    color_hex: str | None = None
    icon_name: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def validate(self) -> None:
        if not self.id.strip():
            raise ValidationError("id", "Category ID cannot be empty")
        if not self.name.strip():
            raise ValidationError("name", "Category name cannot be empty")


@dataclass
class Event:
    title: str
    description: str
    category_id: str
    start_date: datetime
    end_date: datetime
    organizer_id: uuid.UUID
    location_type: LocationType = LocationType.PHYSICAL
    timezone: str = "UTC"
    location_name: str | None = None
    address: str | None = None
    virtual_link: str | None = None
    virtual_access_code: str | None = None
    co_organizers: list[uuid.UUID] = field(default_factory=list)
    is_private: bool = False
    requires_approval: bool = False
    max_attendees: int | None = None
    allow_guests: bool = False
    max_guests_per_person: int | None = None
    registration_opens: datetime | None = None
    registration_closes: datetime | None = None
    registration_required: bool = True
    allow_waitlist: bool = False
    send_reminders: bool = True
    collect_dietary_info: bool = False
    collect_accessibility_info: bool = False
    image_url: str | None = None
    custom_fields: dict[str, Any] | None = None
    status: EventStatus = EventStatus.DRAFT
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def validate(self) -> None:
        title = self.title.strip()
        if not title:
            raise ValidationError("title", "Title cannot be empty")
        if len(title) > 200:
            raise ValidationError("title", "Title cannot exceed 200 characters")
        if not self.description.strip():
            raise ValidationError("description", "Description cannot be empty")
        if self.start_date >= self.end_date:
            raise ValidationError("dates", "End date must be after start date")
        if self.max_attendees is not None and self.max_attendees < 0:
            raise ValidationError("max_attendees", "Maximum attendees cannot be negative")

    def has_started(self, now: datetime | None = None) -> bool:
        return self.start_date <= (now or utcnow())


@dataclass
class EventInvitation:
    event_id: uuid.UUID
    inviter_id: uuid.UUID
    invited_user_id: uuid.UUID | None = None
    invited_contact_id: uuid.UUID | None = None
    invited_email: str | None = None
    invited_name: str | None = None
    invitation_method: InvitationMethod = InvitationMethod.EMAIL
    personal_message: str | None = None
    status: InvitationStatus = InvitationStatus.PENDING
    sent_at: datetime | None = None
    opened_at: datetime | None = None
    responded_at: datetime | None = None
    invitation_token: str | None = None
    expires_at: datetime | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def validate(self) -> None:
        if self.invited_user_id is None and (self.invited_email is None or self.invited_name is None):
            raise ValidationError(
                "invitation_target",
                "Must specify either invited_user_id or both invited_email and invited_name",
            )
        if self.invited_email is not None:
            if not self.invited_email.strip() or "@" not in self.invited_email:
                raise ValidationError("invited_email", "Invalid email format", value=self.invited_email)
        if self.invited_name is not None and not self.invited_name.strip():
            raise ValidationError("invited_name", "Invited name cannot be empty")

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at is not None and self.expires_at <= (now or utcnow())


@dataclass
class EventRegistration:
    event_id: uuid.UUID
    invitation_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    external_contact_id: uuid.UUID | None = None
    registrant_email: str | None = None
    registrant_name: str | None = None
    registrant_phone: str | None = None
    registrant_company: str | None = None
    status: RegistrationStatus = RegistrationStatus.REGISTERED
    registration_source: RegistrationSource = RegistrationSource.DIRECT
    guest_count: int = 0
    guest_names: list[str] = field(default_factory=list)
    dietary_restrictions: str | None = None
    accessibility_needs: str | None = None
    special_requests: str | None = None
    custom_responses: dict[str, Any] | None = None
    registered_at: datetime = field(default_factory=utcnow)
    cancelled_at: datetime | None = None
    checked_in_at: datetime | None = None
    waitlist_position: int | None = None
    waitlist_added_at: datetime | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def validate(self) -> None:
        has_identity = (
            self.user_id is not None
            or self.external_contact_id is not None
            or bool(self.registrant_email and self.registrant_name)
        )
        if not has_identity:
            raise ValidationError(
                "registrant_identity",
                "Must specify user_id, external_contact_id, or both registrant_email and registrant_name",
            )
        if self.guest_count < 0:
            raise ValidationError("guest_count", "Guest count cannot be negative", value=str(self.guest_count))


__all__ = [
    "utcnow",
    "LocationType",
    "EventStatus",
    "UserRole",
    "InvitationStatus",
    "InvitationMethod",
    "RegistrationStatus",
    "RegistrationSource",
    "User",
    "EventCategory",
    "Event",
    "EventInvitation",
    "EventRegistration",
]
