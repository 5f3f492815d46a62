"""Event category repository. Categories are keyed by short text ids ('conf', 'workshop', ...)."""

from typing import Any, Mapping

from aqio.domain.entities import EventCategory
from aqio.models import EventCategoryModel

from .base_repository import BaseRepository, to_storage_datetime
from .row_mapping import get_bool, get_datetime, get_optional_string, get_string


class SqliteEventCategoryRepository(BaseRepository[EventCategory]):
    table = EventCategoryModel.__table__
    entity_name = "EventCategory"

    def _to_entity(self, row: Mapping[str, Any]) -> EventCategory:
        return EventCategory(
            id=get_string(row, "id"),
            name=get_string(row, "name"),
            description=get_optional_string(row, "description"),
            color_hex=get_optional_string(row, "color_hex"),
            icon_name=get_optional_string(row, "icon_name"),
            is_active=get_bool(row, "is_active"),
            created_at=get_datetime(row, "created_at"),
        )

    def _to_values(self, category: EventCategory) -> dict[str, Any]:
        return {
            "id": category.id,
            "name": category.name,
            "description": category.description,
            "color_hex": category.color_hex,
            "icon_name": category.icon_name,
            "is_active": category.is_active,
            "created_at": to_storage_datetime(category.created_at),
        }

    async def find_by_id(self, category_id: str) -> EventCategory | None:
        return await self._fetch_one(self.table.c.id == category_id)

    async def list_active(self) -> list[EventCategory]:
        return await self._fetch_all(self.table.c.is_active.is_(True), order_by=(self.table.c.name,))

    async def list_all(self) -> list[EventCategory]:
        return await self._fetch_all(order_by=(self.table.c.name,))

    async def create(self, category: EventCategory) -> EventCategory:
        category.validate()
        return await self._insert(category)

    async def update(self, category: EventCategory) -> EventCategory:
        category.validate()
        values = self._to_values(category)
        del values["created_at"]
        await self._update(category.id, values)
        return category

    async def delete(self, category_id: str) -> None:
        await self._delete(category_id)


__all__ = ["SqliteEventCategoryRepository"]
