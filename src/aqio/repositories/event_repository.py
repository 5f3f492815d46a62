"""
Event repository.

Besides plain CRUD it supports filtered, paged search (`find_by_filter`) over
title, category, organizer, visibility, status, location type and a start-date
window. Co-organizers and custom fields are stored as JSON text.
"""

import dataclasses
import logging
import uuid
from typing import Any, Mapping

from sqlalchemy.sql.elements import ColumnElement

from aqio.domain.entities import Event, utcnow
from aqio.domain.pagination import EventFilter, PaginatedResult, PaginationParams
from aqio.exceptions.mapper import DiagnoseFn
from aqio.models import EventModel

from .base_repository import BaseRepository, to_storage_datetime, to_storage_id, to_storage_json
from .diagnostics import ForeignKeyDiagnostic
from .row_mapping import (
    get_bool,
    get_datetime,
    get_event_status,
    get_json,
    get_location_type,
    get_optional_datetime,
    get_optional_int,
    get_optional_json,
    get_optional_string,
    get_string,
    get_uuid,
)

logger = logging.getLogger(__name__)


class SqliteEventRepository(BaseRepository[Event]):
    """Repository for Event entities."""

    table = EventModel.__table__
    entity_name = "Event"

    def __init__(self, session_factory, diagnostic: ForeignKeyDiagnostic | None = None):
        super().__init__(session_factory)
        self.diagnostic = diagnostic or ForeignKeyDiagnostic(session_factory)

    # =================================================================================================================
    # Row mapping
    # =================================================================================================================

    def _to_entity(self, row: Mapping[str, Any]) -> Event:
        return Event(
            id=get_uuid(row, "id"),
            title=get_string(row, "title"),
            description=get_string(row, "description"),
            category_id=get_string(row, "category_id"),
            start_date=get_datetime(row, "start_date"),
            end_date=get_datetime(row, "end_date"),
            timezone=get_string(row, "timezone"),
            location_type=get_location_type(row, "location_type"),
            location_name=get_optional_string(row, "location_name"),
            address=get_optional_string(row, "address"),
            virtual_link=get_optional_string(row, "virtual_link"),
            virtual_access_code=get_optional_string(row, "virtual_access_code"),
            organizer_id=get_uuid(row, "organizer_id"),
            co_organizers=get_json(row, "co_organizers", list[uuid.UUID]),
            is_private=get_bool(row, "is_private"),
            requires_approval=get_bool(row, "requires_approval"),
            max_attendees=get_optional_int(row, "max_attendees"),
            allow_guests=get_bool(row, "allow_guests"),
            max_guests_per_person=get_optional_int(row, "max_guests_per_person"),
            registration_opens=get_optional_datetime(row, "registration_opens"),
            registration_closes=get_optional_datetime(row, "registration_closes"),
            registration_required=get_bool(row, "registration_required"),
            allow_waitlist=get_bool(row, "allow_waitlist"),
            send_reminders=get_bool(row, "send_reminders"),
            collect_dietary_info=get_bool(row, "collect_dietary_info"),
            collect_accessibility_info=get_bool(row, "collect_accessibility_info"),
            image_url=get_optional_string(row, "image_url"),
            custom_fields=get_optional_json(row, "custom_fields", dict[str, Any]),
            status=get_event_status(row, "status"),
            created_at=get_datetime(row, "created_at"),
            updated_at=get_datetime(row, "updated_at"),
        )

    def _to_values(self, event: Event) -> dict[str, Any]:
        return {
            "id": to_storage_id(event.id),
            "title": event.title,
            "description": event.description,
            "category_id": event.category_id,
            "start_date": to_storage_datetime(event.start_date),
            "end_date": to_storage_datetime(event.end_date),
            "timezone": event.timezone,
            "location_type": event.location_type.value,
            "location_name": event.location_name,
            "address": event.address,
            "virtual_link": event.virtual_link,
            "virtual_access_code": event.virtual_access_code,
            "organizer_id": to_storage_id(event.organizer_id),
            "co_organizers": to_storage_json([str(co) for co in event.co_organizers]),
            "is_private": event.is_private,
            "requires_approval": event.requires_approval,
            "max_attendees": event.max_attendees,
            "allow_guests": event.allow_guests,
            "max_guests_per_person": event.max_guests_per_person,
            "registration_opens": to_storage_datetime(event.registration_opens),
            "registration_closes": to_storage_datetime(event.registration_closes),
            "registration_required": event.registration_required,
            "allow_waitlist": event.allow_waitlist,
            "send_reminders": event.send_reminders,
            "collect_dietary_info": event.collect_dietary_info,
            "collect_accessibility_info": event.collect_accessibility_info,
            "image_url": event.image_url,
            "custom_fields": to_storage_json(event.custom_fields),
            "status": event.status.value,
            "created_at": to_storage_datetime(event.created_at),
            "updated_at": to_storage_datetime(event.updated_at),
        }

    def _diagnose(self, values: Mapping[str, Any]) -> DiagnoseFn | None:
        candidates = [
            ("category_id", values.get("category_id"), self.diagnostic.check_category_exists),
            ("organizer_id", values.get("organizer_id"), self.diagnostic.check_user_exists),
        ]

        async def diagnose():
            return await self.diagnostic.diagnose_foreign_key_violation("event", candidates)

        return diagnose

    def _filter_criteria(self, event_filter: EventFilter) -> list[ColumnElement[bool]]:
        c = self.table.c
        criteria: list[ColumnElement[bool]] = []
        if event_filter.title_contains is not None:
            criteria.append(c.title.icontains(event_filter.title_contains.strip(), autoescape=True))
        if event_filter.category_id is not None:
            criteria.append(c.category_id == event_filter.category_id)
        if event_filter.organizer_id is not None:
            criteria.append(c.organizer_id == to_storage_id(event_filter.organizer_id))
        if event_filter.is_private is not None:
            criteria.append(c.is_private.is_(event_filter.is_private))
        if event_filter.status is not None:
            criteria.append(c.status == event_filter.status.value)
        if event_filter.location_type is not None:
            criteria.append(c.location_type == event_filter.location_type.value)
        if event_filter.start_date_from is not None:
            criteria.append(c.start_date >= to_storage_datetime(event_filter.start_date_from))
        if event_filter.start_date_to is not None:
            criteria.append(c.start_date <= to_storage_datetime(event_filter.start_date_to))
        return criteria

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def find_by_id(self, event_id: uuid.UUID) -> Event | None:
        return await self._fetch_one(self.table.c.id == to_storage_id(event_id))

    async def find_by_filter(self, event_filter: EventFilter, pagination: PaginationParams) -> PaginatedResult[Event]:
        """Page through events matching every set field of `event_filter`, latest start first."""
        event_filter.validate()
        criteria = self._filter_criteria(event_filter)
        logger.debug(
            "repo.find_by_filter",
            extra={"model": self.entity_name, "criteria_count": len(criteria), "offset": pagination.offset},
        )
        return await self._paginate(pagination, *criteria, order_by=(self.table.c.start_date.desc(),))

    async def find_by_organizer(self, organizer_id: uuid.UUID, pagination: PaginationParams) -> PaginatedResult[Event]:
        return await self._paginate(
            pagination,
            self.table.c.organizer_id == to_storage_id(organizer_id),
            order_by=(self.table.c.start_date.desc(),),
        )

    async def find_by_category(self, category_id: str) -> list[Event]:
        return await self._fetch_all(
            self.table.c.category_id == category_id, order_by=(self.table.c.start_date.desc(),)
        )

    async def list_all(self, pagination: PaginationParams) -> PaginatedResult[Event]:
        return await self._paginate(pagination, order_by=(self.table.c.start_date.desc(),))

    async def exists(self, event_id: uuid.UUID) -> bool:
        return await self._exists(self.table.c.id == to_storage_id(event_id))

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def create(self, event: Event) -> Event:
        """
        Validate and insert an event.

        Raises:
            ValidationError: invalid fields, an unknown or inactive category or organizer,
                             or a CHECK violation (location type, status).
        """
        event.validate()
        return await self._insert(event)

    async def update(self, event: Event) -> Event:
        event = dataclasses.replace(event, updated_at=utcnow())
        event.validate()
        values = self._to_values(event)
        del values["created_at"]
        await self._update(event.id, values)
        return event

    async def delete(self, event_id: uuid.UUID) -> None:
        await self._delete(event_id)


__all__ = ["SqliteEventRepository"]
