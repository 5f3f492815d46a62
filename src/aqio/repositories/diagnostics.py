"""
Foreign-key diagnostic.

SQLite reports every foreign-key violation as the same bare text
("FOREIGN KEY constraint failed") without naming the column. When a write fails
that way, the repository hands the candidate references of the rejected row to
`ForeignKeyDiagnostic`, which probes each one in priority order and returns a
`ValidationError` naming the first reference that does not resolve.

The probes run on their own session, after the failed transaction has rolled
back. They only read.
"""

import logging
import uuid
from typing import Any, Awaitable, Callable, Sequence

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from aqio.exceptions.domain import DomainError, ValidationError
from aqio.models import (
    CompanyModel,
    EventCategoryModel,
    EventInvitationModel,
    EventModel,
    UserModel,
)

logger = logging.getLogger(__name__)

Probe = Callable[[Any], Awaitable[bool]]
Candidate = tuple[str, Any, Probe]

FOREIGN_KEY = "foreign_key"

# (entity type, field) -> template; {id} is the referenced value
FOREIGN_KEY_MESSAGES: dict[tuple[str, str], str] = {
    ("user", "company_id"): (
        "The company with ID '{id}' does not exist or is not active. "
        "Please create the company first or leave the company field empty."
    ),
    ("event", "category_id"): (
        "The event category '{id}' does not exist or is not active. "
        "Please choose one of the available categories."
    ),
    ("event", "organizer_id"): (
        "The organizer with ID '{id}' does not exist or is not active. "
        "Events must be organized by an active user."
    ),
    ("invitation", "event_id"): "The event with ID '{id}' does not exist. Invitations must belong to an existing event.",
    ("invitation", "inviter_id"): "The inviting user with ID '{id}' does not exist or is not active.",
    ("invitation", "invited_user_id"): (
        "The invited user with ID '{id}' does not exist or is not active. "
        "Invite them by email instead."
    ),
    ("registration", "event_id"): "The event with ID '{id}' does not exist. Registrations must belong to an existing event.",
    ("registration", "user_id"): "The user with ID '{id}' does not exist or is not active.",
    ("registration", "invitation_id"): "The invitation with ID '{id}' does not exist.",
}

_GENERIC_MESSAGE = "The referenced {field_spaced} with ID '{id}' does not exist."


def create_user_friendly_foreign_key_error(entity_type: str, field: str, value: Any) -> ValidationError:
    """Build the ValidationError for a reference `field` on `entity_type` that points at nothing."""
    value_str = str(value)
    template = FOREIGN_KEY_MESSAGES.get((entity_type, field))
    if template is not None:
        message = template.format(id=value_str)
    else:
        field_spaced = field.removesuffix("_id").replace("_", " ")
        message = _GENERIC_MESSAGE.format(field_spaced=field_spaced, id=value_str)
    return DomainError.validation_constraint(field, message, constraint=FOREIGN_KEY, value=value_str)


class ForeignKeyDiagnostic:
    """Existence probes for the referenced tables, plus the priority walk over them."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _exists(self, *criteria) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(select(exists().where(*criteria)))
            return bool(result.scalar())

    # -------------------------------
    # Probes
    # -------------------------------

    async def check_event_exists(self, event_id: uuid.UUID | str) -> bool:
        table = EventModel.__table__
        return await self._exists(table.c.id == str(event_id))

    async def check_user_exists(self, user_id: uuid.UUID | str) -> bool:
        """True only for an existing, active user."""
        table = UserModel.__table__
        return await self._exists(table.c.id == str(user_id), table.c.is_active.is_(True))

    async def check_invitation_exists(self, invitation_id: uuid.UUID | str) -> bool:
        table = EventInvitationModel.__table__
        return await self._exists(table.c.id == str(invitation_id))

    async def check_category_exists(self, category_id: str) -> bool:
        """True only for an existing, active category."""
        table = EventCategoryModel.__table__
        return await self._exists(table.c.id == category_id, table.c.is_active.is_(True))

    async def check_company_exists(self, company_id: uuid.UUID | str) -> bool:
        """True only for an existing, active company."""
        table = CompanyModel.__table__
        return await self._exists(table.c.id == str(company_id), table.c.is_active.is_(True))

    # -------------------------------
    # Diagnosis
    # -------------------------------

    async def diagnose_foreign_key_violation(
        self,
        entity_type: str,
        candidates: Sequence[Candidate],
    ) -> DomainError:
        """
        Walk `(field, value, probe)` candidates in order and report the first dangling one.

        Candidates whose value is None are skipped (an absent optional reference
        cannot violate a foreign key). If every probe passes, the violation came
        from somewhere the caller did not list and a BusinessRuleViolation is
        returned instead.
        """
        checked: list[str] = []
        for field, value, probe in candidates:
            if value is None:
                continue
            checked.append(field)
            if not await probe(value):
                logger.info(
                    "diagnostic.foreign_key.identified",
                    extra={"entity_type": entity_type, "field": field},
                )
                return create_user_friendly_foreign_key_error(entity_type, field, value)

        logger.warning(
            "diagnostic.foreign_key.unidentified",
            extra={"entity_type": entity_type, "checked": checked},
        )
        return DomainError.business_rule(
            "Foreign key constraint violation: Unknown referenced entity does not exist "
            f"(checked: {', '.join(checked) or 'none'})"
        )


__all__ = [
    "FOREIGN_KEY_MESSAGES",
    "ForeignKeyDiagnostic",
    "create_user_friendly_foreign_key_error",
]
