"""Registration use cases, including status transitions and attendance counts."""

import uuid

from aqio.domain.entities import EventRegistration, RegistrationStatus
from aqio.domain.services import RegistrationService
from aqio.exceptions.domain import ConflictError, DomainError
from aqio.repositories.interfaces import EventRegistrationRepository

_ATTENDING = (RegistrationStatus.REGISTERED, RegistrationStatus.ATTENDED)


class RegistrationApplicationService:
    def __init__(
        self,
        registration_repository: EventRegistrationRepository,
        registration_service: RegistrationService | None = None,
    ):
        self.registration_repository = registration_repository
        self.registration_service = registration_service or RegistrationService()

    async def get_registration_by_id(self, registration_id: uuid.UUID) -> EventRegistration:
        registration = await self.registration_repository.find_by_id(registration_id)
        if registration is None:
            raise DomainError.not_found("EventRegistration", registration_id)
        return registration

    async def get_registrations_by_event(self, event_id: uuid.UUID) -> list[EventRegistration]:
        return await self.registration_repository.find_by_event_id(event_id)

    async def get_registrations_by_user(self, user_id: uuid.UUID) -> list[EventRegistration]:
        return await self.registration_repository.find_by_user_id(user_id)

    async def get_registration_by_event_and_user(
        self, event_id: uuid.UUID, user_id: uuid.UUID
    ) -> EventRegistration | None:
        return await self.registration_repository.find_by_event_and_user(event_id, user_id)

    async def create_registration(self, registration: EventRegistration) -> EventRegistration:
        if registration.user_id is not None:
            existing = await self.registration_repository.find_by_event_and_user(
                registration.event_id, registration.user_id
            )
            if existing is not None:
                raise ConflictError(
                    "User is already registered for this event",
                    field="user_id",
                    conflicting_value=str(registration.user_id),
                )
        return await self.registration_repository.create(registration)

    async def update_registration(self, registration: EventRegistration) -> EventRegistration:
        return await self.registration_repository.update(registration)

    async def update_registration_status(
        self, registration_id: uuid.UUID, status: RegistrationStatus
    ) -> EventRegistration:
        """
        Move a registration to `status`.

        Cancelled, attended and no-show registrations are final; cancelling and
        checking in stamp cancelled_at and checked_in_at.

        Raises:
            NotFoundError: no registration with that id.
            BusinessRuleViolation: the move is not allowed from the current status.
        """
        registration = await self.get_registration_by_id(registration_id)
        self.registration_service.transition(registration, status)
        return await self.registration_repository.update(registration)

    async def cancel_registration(self, registration_id: uuid.UUID) -> EventRegistration:
        return await self.update_registration_status(registration_id, RegistrationStatus.CANCELLED)

    async def check_in_registration(self, registration_id: uuid.UUID) -> EventRegistration:
        return await self.update_registration_status(registration_id, RegistrationStatus.ATTENDED)

    async def mark_no_show(self, registration_id: uuid.UUID) -> EventRegistration:
        return await self.update_registration_status(registration_id, RegistrationStatus.NO_SHOW)

    async def promote_from_waitlist(self, registration_id: uuid.UUID) -> EventRegistration:
        registration = await self.get_registration_by_id(registration_id)
        self.registration_service.promote_from_waitlist(registration)
        return await self.registration_repository.update(registration)

    async def delete_registration(self, registration_id: uuid.UUID) -> None:
        await self.registration_repository.delete(registration_id)

    async def get_event_attendance_count(self, event_id: uuid.UUID) -> int:
        registrations = await self.get_registrations_by_event(event_id)
        return sum(1 for r in registrations if r.status in _ATTENDING)

    async def get_event_waitlist_count(self, event_id: uuid.UUID) -> int:
        registrations = await self.get_registrations_by_event(event_id)
        return sum(1 for r in registrations if r.status == RegistrationStatus.WAITLISTED)
