"""
User repository for handling user-specific database operations.

Extends BaseRepository with user lookups (email, identity-provider id), paged
listing and existence checks. Emails are normalized (trimmed, lower-cased) on
write and on lookup, so `John@Example.com` and `john@example.com` are the same
account.
"""

import dataclasses
import logging
import uuid
from typing import Any, Mapping

from aqio.domain.entities import User, utcnow
from aqio.domain.pagination import PaginatedResult, PaginationParams
from aqio.exceptions.mapper import DiagnoseFn
from aqio.models import UserModel

from .base_repository import BaseRepository, normalize_email, to_storage_datetime, to_storage_id
from .diagnostics import ForeignKeyDiagnostic
from .row_mapping import (
    get_bool,
    get_datetime,
    get_optional_uuid,
    get_string,
    get_user_role,
    get_uuid,
)

logger = logging.getLogger(__name__)


class SqliteUserRepository(BaseRepository[User]):
    """Repository for User entities."""

    table = UserModel.__table__
    entity_name = "User"

    def __init__(self, session_factory, diagnostic: ForeignKeyDiagnostic | None = None):
        super().__init__(session_factory)
        self.diagnostic = diagnostic or ForeignKeyDiagnostic(session_factory)

    # =================================================================================================================
    # Row mapping
    # =================================================================================================================

    def _to_entity(self, row: Mapping[str, Any]) -> User:
        return User(
            id=get_uuid(row, "id"),
            keycloak_id=get_string(row, "keycloak_id"),
            email=get_string(row, "email"),
            name=get_string(row, "name"),
            company_id=get_optional_uuid(row, "company_id"),
            role=get_user_role(row, "role"),
            is_active=get_bool(row, "is_active"),
            created_at=get_datetime(row, "created_at"),
            updated_at=get_datetime(row, "updated_at"),
        )

    def _to_values(self, user: User) -> dict[str, Any]:
        return {
            "id": to_storage_id(user.id),
            "keycloak_id": user.keycloak_id,
            "email": user.email,
            "name": user.name,
            "company_id": to_storage_id(user.company_id),
            "role": user.role.value,
            "is_active": user.is_active,
            "created_at": to_storage_datetime(user.created_at),
            "updated_at": to_storage_datetime(user.updated_at),
        }

    def _diagnose(self, values: Mapping[str, Any]) -> DiagnoseFn | None:
        company_id = values.get("company_id")
        if company_id is None:
            return None

        async def diagnose():
            return await self.diagnostic.diagnose_foreign_key_violation(
                "user",
                [("company_id", company_id, self.diagnostic.check_company_exists)],
            )

        return diagnose

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        return await self._fetch_one(self.table.c.id == to_storage_id(user_id))

    async def find_by_email(self, email: str) -> User | None:
        return await self._fetch_one(self.table.c.email == normalize_email(email))

    async def find_by_keycloak_id(self, keycloak_id: str) -> User | None:
        return await self._fetch_one(self.table.c.keycloak_id == keycloak_id)

    async def list_all(self, pagination: PaginationParams) -> PaginatedResult[User]:
        """Page through users, newest first."""
        return await self._paginate(pagination, order_by=(self.table.c.created_at.desc(),))

    async def exists(self, user_id: uuid.UUID) -> bool:
        return await self._exists(self.table.c.id == to_storage_id(user_id))

    async def email_exists(self, email: str) -> bool:
        return await self._exists(self.table.c.email == normalize_email(email))

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def create(self, user: User) -> User:
        """
        Validate and insert a user.

        Raises:
            ValidationError: invalid fields, an unknown company, or a CHECK violation.
            ConflictError: the email or identity-provider id is already registered.
        """
        user = dataclasses.replace(user, email=normalize_email(user.email))
        user.validate()
        return await self._insert(user)

    async def update(self, user: User) -> User:
        user = dataclasses.replace(user, email=normalize_email(user.email), updated_at=utcnow())
        user.validate()
        values = self._to_values(user)
        del values["created_at"]
        await self._update(user.id, values)
        return user

    async def delete(self, user_id: uuid.UUID) -> None:
        await self._delete(user_id)


__all__ = ["SqliteUserRepository"]
