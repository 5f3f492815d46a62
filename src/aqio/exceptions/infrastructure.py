"""
Storage-layer error taxonomy.

These errors are created inside the SQLite repositories when a storage call fails
and are converted to `DomainError`s by `aqio.exceptions.mapper.to_domain_error`
before leaving the repository. Nothing outside the repository layer catches them.

Constraint variants already carry the user-facing message produced by
`aqio.exceptions.constraint_messages`; the raw engine text is kept on
`raw_message` for DEBUG logs only.
"""

from .domain import DomainError
from .row_conversion import RowConversionError


class InfrastructureError(Exception):
    """Base for storage failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConnectionFailedError(InfrastructureError):
    pass


class MigrationFailedError(InfrastructureError):
    pass


class TransactionError(InfrastructureError):
    pass


class UuidParsingError(InfrastructureError):
    def __init__(self, message: str, *, value: str | None = None):
        super().__init__(message)
        self.value = value


class DateTimeError(InfrastructureError):
    pass


class JsonError(InfrastructureError):
    pass


class QueryError(InfrastructureError):
    pass


class InternalError(InfrastructureError):
    pass


class DomainPassthroughError(InfrastructureError):
    """A domain error raised inside a storage operation (e.g. entity validation)."""

    def __init__(self, error: DomainError):
        super().__init__(error.message)
        self.error = error


# =================================================================================================================
# Constraint violations
# =================================================================================================================


class ConstraintViolationError(InfrastructureError):
    """Base for integrity/constraint violations reported by the engine."""

    def __init__(self, message: str, *, table: str | None = None, raw_message: str | None = None):
        super().__init__(message)
        self.table = table
        self.raw_message = raw_message


class ForeignKeyConstraintError(ConstraintViolationError):
    """Foreign key violated. SQLite does not say which one; see the FK diagnostic."""


class UniqueConstraintError(ConstraintViolationError):
    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        field: str | None = None,
        value: str | None = None,
        raw_message: str | None = None,
    ):
        super().__init__(message, table=table, raw_message=raw_message)
        self.field = field
        self.value = value


class CheckConstraintError(ConstraintViolationError):
    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        field: str | None = None,
        constraint: str | None = None,
        raw_message: str | None = None,
    ):
        super().__init__(message, table=table, raw_message=raw_message)
        self.field = field
        self.constraint = constraint


class NotNullConstraintError(ConstraintViolationError):
    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        field: str | None = None,
        raw_message: str | None = None,
    ):
        super().__init__(message, table=table, raw_message=raw_message)
        self.field = field


class RowConversionFailedError(InfrastructureError):
    def __init__(self, error: RowConversionError):
        super().__init__(error.message)
        self.error = error


__all__ = [
    "InfrastructureError",
    "ConnectionFailedError",
    "MigrationFailedError",
    "TransactionError",
    "UuidParsingError",
    "DateTimeError",
    "JsonError",
    "QueryError",
    "InternalError",
    "DomainPassthroughError",
    "ConstraintViolationError",
    "ForeignKeyConstraintError",
    "UniqueConstraintError",
    "CheckConstraintError",
    "NotNullConstraintError",
    "RowConversionFailedError",
]
