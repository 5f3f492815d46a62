"""
Base repository class providing the storage plumbing shared by every repository.

Each concrete repository binds one table and knows how to turn an entity into
column values (`_to_values`) and a row back into an entity (`_to_entity`).
Everything else lives here:

  - one session and one transaction per operation (`_transaction`)
  - error translation: every operation runs inside `db_error_handler`, so callers
    only ever see `DomainError`
  - generic select / count / insert / update / delete helpers
  - structured logging (`repo.<operation>.<stage>` events with duration_ms)

Rows are read through `result.mappings()` and decoded with the row mapping
getters, so a malformed stored value surfaces as `DataIntegrityError` naming
the column instead of as a crash.
"""

import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, ClassVar, Generic, Iterable, Mapping, TypeVar

from sqlalchemy import Table, delete, exists, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from aqio.domain.pagination import PaginatedResult, PaginationParams
from aqio.exceptions.domain import DomainError
from aqio.exceptions.mapper import DiagnoseFn, db_error_handler

EntityT = TypeVar("EntityT")

logger = logging.getLogger(__name__)


# =================================================================================================================
# Value encoding helpers
# =================================================================================================================


def to_storage_datetime(value: datetime | None) -> datetime | None:
    """
    Normalize a datetime to naive UTC before binding.

    SQLite has no timezone-aware column type: SQLAlchemy stores the wall-clock
    value as text, so every timestamp is converted to UTC first. Naive input is
    taken to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def to_storage_id(value: uuid.UUID | str | None) -> str | None:
    return None if value is None else str(value)


def to_storage_json(value: Any) -> str | None:
    # UUIDs and datetimes inside documents are written as strings
    return None if value is None else json.dumps(value, default=str)


def normalize_email(email: str | None) -> str | None:
    return None if email is None else email.strip().lower()


# =================================================================================================================
# BaseRepository
# =================================================================================================================


class BaseRepository(ABC, Generic[EntityT]):
    """
    Abstract generic base for the SQLite repositories.

    Subclasses set `table` and `entity_name` and implement `_to_entity` and
    `_to_values`. The session factory is shared (one per `RepositoryFactory`);
    repositories themselves hold no connection state.
    """

    table: ClassVar[Table]
    entity_name: ClassVar[str]

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # -------------------------------
    # Entity <-> row
    # -------------------------------

    @abstractmethod
    def _to_entity(self, row: Mapping[str, Any]) -> EntityT: ...

    @abstractmethod
    def _to_values(self, entity: EntityT) -> dict[str, Any]: ...

    def _diagnose(self, values: Mapping[str, Any]) -> DiagnoseFn | None:
        """Return a foreign-key diagnosis for `values`, if this entity has references."""
        return None

    # -------------------------------
    # Transaction scope
    # -------------------------------

    @asynccontextmanager
    async def _transaction(
        self,
        *,
        values: Mapping[str, Any] | None = None,
        diagnose: DiagnoseFn | None = None,
    ) -> AsyncIterator[AsyncSession]:
        """
        Open a session, begin a transaction and translate any failure.

        The transaction commits when the block exits normally and rolls back on any
        exception; the error handler sits outside the session so the foreign-key
        diagnosis runs after the rollback, on a fresh session.
        """
        async with db_error_handler(self.entity_name, table=self.table.name, values=values, diagnose=diagnose):
            async with self.session_factory() as session:
                async with session.begin():
                    yield session

    # -------------------------------
    # Reads
    # -------------------------------

    async def _fetch_one(self, *criteria: ColumnElement[bool]) -> EntityT | None:
        async with self._transaction() as session:
            result = await session.execute(select(self.table).where(*criteria))
            row = result.mappings().first()
            entity = None if row is None else self._to_entity(row)
        logger.debug(
            "repo.fetch_one",
            extra={"model": self.entity_name, "operation": "fetch_one", "found": entity is not None},
        )
        return entity

    async def _fetch_all(
        self,
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] = (),
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[EntityT]:
        stmt = select(self.table).where(*criteria).order_by(*order_by)
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._transaction() as session:
            result = await session.execute(stmt)
            entities = [self._to_entity(row) for row in result.mappings().all()]
        logger.debug(
            "repo.fetch_all",
            extra={"model": self.entity_name, "operation": "fetch_all", "count": len(entities)},
        )
        return entities

    async def _count(self, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.table).where(*criteria)
        async with self._transaction() as session:
            return int((await session.execute(stmt)).scalar_one())

    async def _exists(self, *criteria: ColumnElement[bool]) -> bool:
        stmt = select(exists().where(*criteria))
        async with self._transaction() as session:
            return bool((await session.execute(stmt)).scalar())

    async def _paginate(
        self,
        pagination: PaginationParams,
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] = (),
    ) -> PaginatedResult[EntityT]:
        """Return one page plus the total number of matching rows."""
        total = await self._count(*criteria)
        items = await self._fetch_all(
            *criteria, order_by=order_by, offset=pagination.offset, limit=pagination.limit
        )
        return PaginatedResult.of(items, total, pagination)

    # -------------------------------
    # Writes
    # -------------------------------

    async def _insert(self, entity: EntityT) -> EntityT:
        """
        Insert `entity` and return it as stored.

        Logging:
        - DEBUG: start event with the provided column names (not values).
        - INFO: success event with the new id and duration_ms.
        Constraint violations are logged and translated by the error handler.
        """
        values = self._to_values(entity)
        logger.debug(
            "repo.create.start",
            extra={"model": self.entity_name, "operation": "create", "provided_keys": sorted(values)},
        )
        start = time.perf_counter()
        async with self._transaction(values=values, diagnose=self._diagnose(values)) as session:
            await session.execute(insert(self.table).values(**values))
        logger.info(
            "repo.create.success",
            extra={
                "model": self.entity_name,
                "operation": "create",
                "id": values.get("id"),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def _update(self, entity_id: Any, values: dict[str, Any]) -> None:
        """Update the row with primary key `entity_id`; a missing row raises NotFoundError."""
        key = to_storage_id(entity_id)
        values = {k: v for k, v in values.items() if k != "id"}
        start = time.perf_counter()
        async with self._transaction(values=values, diagnose=self._diagnose(values)) as session:
            result = await session.execute(update(self.table).where(self.table.c.id == key).values(**values))
            if result.rowcount == 0:
                logger.info("repo.update.not_found", extra={"model": self.entity_name, "id": key})
                raise DomainError.not_found(self.entity_name, key)
        logger.info(
            "repo.update.success",
            extra={
                "model": self.entity_name,
                "operation": "update",
                "id": key,
                "updated_keys": sorted(values),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )

    async def _delete(self, entity_id: Any) -> None:
        """Delete the row with primary key `entity_id`; a missing row raises NotFoundError."""
        key = to_storage_id(entity_id)
        async with self._transaction() as session:
            result = await session.execute(delete(self.table).where(self.table.c.id == key))
            if result.rowcount == 0:
                logger.info("repo.delete.not_found", extra={"model": self.entity_name, "id": key})
                raise DomainError.not_found(self.entity_name, key)
        logger.info("repo.delete.success", extra={"model": self.entity_name, "operation": "delete", "id": key})


__all__ = [
    "BaseRepository",
    "to_storage_datetime",
    "to_storage_id",
    "to_storage_json",
]
