"""Pagination and filtering value objects shared by repositories and services."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from aqio.exceptions.domain import ValidationError

from .entities import EventStatus, LocationType

T = TypeVar("T")

MAX_PAGE_SIZE = 1000
DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class PaginationParams:
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def new(cls, offset: int, limit: int) -> "PaginationParams":
        """Build validated pagination parameters."""
        if offset < 0:
            raise ValidationError("offset", "Offset must be non-negative", value=str(offset))
        if limit <= 0 or limit > MAX_PAGE_SIZE:
            raise ValidationError("limit", f"Limit must be between 1 and {MAX_PAGE_SIZE}", value=str(limit))
        return cls(offset=offset, limit=limit)


@dataclass
class PaginatedResult(Generic[T]):
    items: list[T]
    total_count: int
    offset: int
    limit: int

    @property
    def has_next(self) -> bool:
        return self.offset + self.limit < self.total_count

    @classmethod
    def of(cls, items: list[T], total_count: int, pagination: PaginationParams) -> "PaginatedResult[T]":
        return cls(items=items, total_count=total_count, offset=pagination.offset, limit=pagination.limit)


@dataclass
class EventFilter:
    title_contains: str | None = None
    category_id: str | None = None
    organizer_id: uuid.UUID | None = None
    is_private: bool | None = None
    status: EventStatus | None = None
    location_type: LocationType | None = None
    start_date_from: datetime | None = None
    start_date_to: datetime | None = None

    def validate(self) -> None:
        if self.title_contains is not None:
            length = len(self.title_contains.strip())
            if length == 0 or length > 100:
                raise ValidationError("title_contains", "Title filter must be between 1 and 100 characters")
        if (
            self.start_date_from is not None
            and self.start_date_to is not None
            and self.start_date_from > self.start_date_to
        ):
            raise ValidationError("start_date_from", "start_date_from must not be after start_date_to")


__all__ = [
    "MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
    "PaginationParams",
    "PaginatedResult",
    "EventFilter",
]
