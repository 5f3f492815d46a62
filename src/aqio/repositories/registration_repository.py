"""Event registration repository (registrations and waitlist entries)."""

import dataclasses
import uuid
from typing import Any, Mapping

from aqio.domain.entities import EventRegistration, utcnow
from aqio.exceptions.mapper import DiagnoseFn
from aqio.models import EventRegistrationModel

from .base_repository import BaseRepository, to_storage_datetime, to_storage_id, to_storage_json
from .diagnostics import ForeignKeyDiagnostic
from .row_mapping import (
    get_datetime,
    get_int,
    get_json,
    get_optional_datetime,
    get_optional_int,
    get_optional_json,
    get_optional_string,
    get_optional_uuid,
    get_registration_source,
    get_registration_status,
    get_uuid,
)


class SqliteEventRegistrationRepository(BaseRepository[EventRegistration]):
    table = EventRegistrationModel.__table__
    entity_name = "EventRegistration"

    def __init__(self, session_factory, diagnostic: ForeignKeyDiagnostic | None = None):
        super().__init__(session_factory)
        self.diagnostic = diagnostic or ForeignKeyDiagnostic(session_factory)

    def _to_entity(self, row: Mapping[str, Any]) -> EventRegistration:
        return EventRegistration(
            id=get_uuid(row, "id"),
            event_id=get_uuid(row, "event_id"),
            invitation_id=get_optional_uuid(row, "invitation_id"),
            user_id=get_optional_uuid(row, "user_id"),
            external_contact_id=get_optional_uuid(row, "external_contact_id"),
            registrant_email=get_optional_string(row, "registrant_email"),
            registrant_name=get_optional_string(row, "registrant_name"),
            registrant_phone=get_optional_string(row, "registrant_phone"),
            registrant_company=get_optional_string(row, "registrant_company"),
            status=get_registration_status(row, "status"),
            registration_source=get_registration_source(row, "registration_source"),
            guest_count=get_int(row, "guest_count"),
            guest_names=get_json(row, "guest_names", list[str]),
            dietary_restrictions=get_optional_string(row, "dietary_restrictions"),
            accessibility_needs=get_optional_string(row, "accessibility_needs"),
            special_requests=get_optional_string(row, "special_requests"),
            custom_responses=get_optional_json(row, "custom_responses", dict[str, Any]),
            registered_at=get_datetime(row, "registered_at"),
            cancelled_at=get_optional_datetime(row, "cancelled_at"),
            checked_in_at=get_optional_datetime(row, "checked_in_at"),
            waitlist_position=get_optional_int(row, "waitlist_position"),
            waitlist_added_at=get_optional_datetime(row, "waitlist_added_at"),
            created_at=get_datetime(row, "created_at"),
            updated_at=get_datetime(row, "updated_at"),
        )

    def _to_values(self, registration: EventRegistration) -> dict[str, Any]:
        return {
            "id": to_storage_id(registration.id),
            "event_id": to_storage_id(registration.event_id),
            "invitation_id": to_storage_id(registration.invitation_id),
            "user_id": to_storage_id(registration.user_id),
            "external_contact_id": to_storage_id(registration.external_contact_id),
            "registrant_email": registration.registrant_email,
            "registrant_name": registration.registrant_name,
            "registrant_phone": registration.registrant_phone,
            "registrant_company": registration.registrant_company,
            "status": registration.status.value,
            "registration_source": registration.registration_source.value,
            "guest_count": registration.guest_count,
            "guest_names": to_storage_json(registration.guest_names),
            "dietary_restrictions": registration.dietary_restrictions,
            "accessibility_needs": registration.accessibility_needs,
            "special_requests": registration.special_requests,
            "custom_responses": to_storage_json(registration.custom_responses),
            "registered_at": to_storage_datetime(registration.registered_at),
            "cancelled_at": to_storage_datetime(registration.cancelled_at),
            "checked_in_at": to_storage_datetime(registration.checked_in_at),
            "waitlist_position": registration.waitlist_position,
            "waitlist_added_at": to_storage_datetime(registration.waitlist_added_at),
            "created_at": to_storage_datetime(registration.created_at),
            "updated_at": to_storage_datetime(registration.updated_at),
        }

    def _diagnose(self, values: Mapping[str, Any]) -> DiagnoseFn | None:
        candidates = [
            ("event_id", values.get("event_id"), self.diagnostic.check_event_exists),
            ("user_id", values.get("user_id"), self.diagnostic.check_user_exists),
            ("invitation_id", values.get("invitation_id"), self.diagnostic.check_invitation_exists),
        ]

        async def diagnose():
            return await self.diagnostic.diagnose_foreign_key_violation("registration", candidates)

        return diagnose

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def find_by_id(self, registration_id: uuid.UUID) -> EventRegistration | None:
        return await self._fetch_one(self.table.c.id == to_storage_id(registration_id))

    async def find_by_event_id(self, event_id: uuid.UUID) -> list[EventRegistration]:
        """Registrations for one event, in the order they arrived."""
        return await self._fetch_all(
            self.table.c.event_id == to_storage_id(event_id), order_by=(self.table.c.registered_at.asc(),)
        )

    async def find_by_user_id(self, user_id: uuid.UUID) -> list[EventRegistration]:
        """A user's registrations, most recent first."""
        return await self._fetch_all(
            self.table.c.user_id == to_storage_id(user_id), order_by=(self.table.c.registered_at.desc(),)
        )

    async def find_by_event_and_user(self, event_id: uuid.UUID, user_id: uuid.UUID) -> EventRegistration | None:
        return await self._fetch_one(
            self.table.c.event_id == to_storage_id(event_id),
            self.table.c.user_id == to_storage_id(user_id),
        )

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def create(self, registration: EventRegistration) -> EventRegistration:
        registration.validate()
        return await self._insert(registration)

    async def update(self, registration: EventRegistration) -> EventRegistration:
        registration = dataclasses.replace(registration, updated_at=utcnow())
        registration.validate()
        values = self._to_values(registration)
        del values["created_at"]
        await self._update(registration.id, values)
        return registration

    async def delete(self, registration_id: uuid.UUID) -> None:
        await self._delete(registration_id)


__all__ = ["SqliteEventRegistrationRepository"]
