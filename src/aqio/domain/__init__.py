from .entities import (
    Event,
    EventCategory,
    EventInvitation,
    EventRegistration,
    EventStatus,
    InvitationMethod,
    InvitationStatus,
    LocationType,
    RegistrationSource,
    RegistrationStatus,
    User,
    UserRole,
    utcnow,
)
from .pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, EventFilter, PaginatedResult, PaginationParams
from .services import EventService, InvitationService, RegistrationService, UserService

__all__ = [
    "Event",
    "EventCategory",
    "EventInvitation",
    "EventRegistration",
    "EventStatus",
    "InvitationMethod",
    "InvitationStatus",
    "LocationType",
    "RegistrationSource",
    "RegistrationStatus",
    "User",
    "UserRole",
    "utcnow",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "EventFilter",
    "PaginatedResult",
    "PaginationParams",
    "EventService",
    "InvitationService",
    "RegistrationService",
    "UserService",
]
