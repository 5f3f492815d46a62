"""Event invitation repository."""

import dataclasses
import uuid
from typing import Any, Mapping

from aqio.domain.entities import EventInvitation, InvitationStatus, utcnow
from aqio.exceptions.mapper import DiagnoseFn
from aqio.models import EventInvitationModel

from .base_repository import BaseRepository, normalize_email, to_storage_datetime, to_storage_id
from .diagnostics import ForeignKeyDiagnostic
from .row_mapping import (
    get_datetime,
    get_invitation_method,
    get_invitation_status,
    get_optional_datetime,
    get_optional_string,
    get_optional_uuid,
    get_uuid,
)

# Responding is what sets responded_at
_RESPONSE_STATUSES = (InvitationStatus.ACCEPTED, InvitationStatus.DECLINED)


class SqliteEventInvitationRepository(BaseRepository[EventInvitation]):
    table = EventInvitationModel.__table__
    entity_name = "EventInvitation"

    def __init__(self, session_factory, diagnostic: ForeignKeyDiagnostic | None = None):
        super().__init__(session_factory)
        self.diagnostic = diagnostic or ForeignKeyDiagnostic(session_factory)

    def _to_entity(self, row: Mapping[str, Any]) -> EventInvitation:
        return EventInvitation(
            id=get_uuid(row, "id"),
            event_id=get_uuid(row, "event_id"),
            invited_user_id=get_optional_uuid(row, "invited_user_id"),
            invited_contact_id=get_optional_uuid(row, "invited_contact_id"),
            invited_email=get_optional_string(row, "invited_email"),
            invited_name=get_optional_string(row, "invited_name"),
            inviter_id=get_uuid(row, "inviter_id"),
            invitation_method=get_invitation_method(row, "invitation_method"),
            personal_message=get_optional_string(row, "personal_message"),
            status=get_invitation_status(row, "status"),
            sent_at=get_optional_datetime(row, "sent_at"),
            opened_at=get_optional_datetime(row, "opened_at"),
            responded_at=get_optional_datetime(row, "responded_at"),
            invitation_token=get_optional_string(row, "invitation_token"),
            expires_at=get_optional_datetime(row, "expires_at"),
            created_at=get_datetime(row, "created_at"),
            updated_at=get_datetime(row, "updated_at"),
        )

    def _to_values(self, invitation: EventInvitation) -> dict[str, Any]:
        return {
            "id": to_storage_id(invitation.id),
            "event_id": to_storage_id(invitation.event_id),
            "invited_user_id": to_storage_id(invitation.invited_user_id),
            "invited_contact_id": to_storage_id(invitation.invited_contact_id),
            "invited_email": invitation.invited_email,
            "invited_name": invitation.invited_name,
            "inviter_id": to_storage_id(invitation.inviter_id),
            "invitation_method": invitation.invitation_method.value,
            "personal_message": invitation.personal_message,
            "status": invitation.status.value,
            "sent_at": to_storage_datetime(invitation.sent_at),
            "opened_at": to_storage_datetime(invitation.opened_at),
            "responded_at": to_storage_datetime(invitation.responded_at),
            "invitation_token": invitation.invitation_token,
            "expires_at": to_storage_datetime(invitation.expires_at),
            "created_at": to_storage_datetime(invitation.created_at),
            "updated_at": to_storage_datetime(invitation.updated_at),
        }

    def _diagnose(self, values: Mapping[str, Any]) -> DiagnoseFn | None:
        candidates = [
            ("event_id", values.get("event_id"), self.diagnostic.check_event_exists),
            ("inviter_id", values.get("inviter_id"), self.diagnostic.check_user_exists),
            ("invited_user_id", values.get("invited_user_id"), self.diagnostic.check_user_exists),
        ]

        async def diagnose():
            return await self.diagnostic.diagnose_foreign_key_violation("invitation", candidates)

        return diagnose

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def find_by_id(self, invitation_id: uuid.UUID) -> EventInvitation | None:
        return await self._fetch_one(self.table.c.id == to_storage_id(invitation_id))

    async def find_by_event_id(self, event_id: uuid.UUID) -> list[EventInvitation]:
        return await self._fetch_all(
            self.table.c.event_id == to_storage_id(event_id), order_by=(self.table.c.created_at.desc(),)
        )

    async def find_by_user_id(self, user_id: uuid.UUID) -> list[EventInvitation]:
        return await self._fetch_all(
            self.table.c.invited_user_id == to_storage_id(user_id), order_by=(self.table.c.created_at.desc(),)
        )

    async def find_by_token(self, token: str) -> EventInvitation | None:
        return await self._fetch_one(self.table.c.invitation_token == token)

    async def find_by_email(self, email: str) -> list[EventInvitation]:
        return await self._fetch_all(
            self.table.c.invited_email == normalize_email(email), order_by=(self.table.c.created_at.desc(),)
        )

    async def exists(self, invitation_id: uuid.UUID) -> bool:
        return await self._exists(self.table.c.id == to_storage_id(invitation_id))

    async def user_invited_to_event(self, user_id: uuid.UUID, event_id: uuid.UUID) -> bool:
        return await self._exists(
            self.table.c.invited_user_id == to_storage_id(user_id),
            self.table.c.event_id == to_storage_id(event_id),
        )

    async def email_invited_to_event(self, email: str, event_id: uuid.UUID) -> bool:
        return await self._exists(
            self.table.c.invited_email == normalize_email(email),
            self.table.c.event_id == to_storage_id(event_id),
        )

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def create(self, invitation: EventInvitation) -> EventInvitation:
        invitation = dataclasses.replace(invitation, invited_email=normalize_email(invitation.invited_email))
        invitation.validate()
        return await self._insert(invitation)

    async def update(self, invitation: EventInvitation) -> EventInvitation:
        invitation = dataclasses.replace(
            invitation, invited_email=normalize_email(invitation.invited_email), updated_at=utcnow()
        )
        invitation.validate()
        values = self._to_values(invitation)
        del values["created_at"]
        await self._update(invitation.id, values)
        return invitation

    async def update_status(self, invitation_id: uuid.UUID, status: InvitationStatus) -> None:
        """
        Set the status of one invitation.

        Always stamps updated_at; accepting or declining also stamps responded_at.
        """
        now = to_storage_datetime(utcnow())
        values: dict[str, Any] = {"status": status.value, "updated_at": now}
        if status in _RESPONSE_STATUSES:
            values["responded_at"] = now

        await self._update(invitation_id, values)

    async def delete(self, invitation_id: uuid.UUID) -> None:
        await self._delete(invitation_id)


__all__ = ["SqliteEventInvitationRepository"]
