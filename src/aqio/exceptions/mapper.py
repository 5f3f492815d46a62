"""
Translate storage failures into domain errors.

Two steps, both in this module:

  1. `to_infrastructure_error(exc, ...)` interprets a raw SQLAlchemy/driver
     exception (or a row decoding failure) and returns the matching
     `InfrastructureError`. Constraint violations are classified, parsed and
     given their user-facing message here.
  2. `to_domain_error(error)` is a total mapping from every
     `InfrastructureError` variant to exactly one `DomainError`.

Repositories do not call these directly; they wrap each storage operation in
`db_error_handler`, which applies both steps (plus the foreign-key diagnostic
when one is supplied) and raises the resulting `DomainError`.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Mapping

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    InvalidRequestError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError as PoolTimeoutError,
)

from .constraint_messages import (
    CHECK,
    NOT_NULL,
    UNIQUE,
    check_constraint_field,
    create_user_friendly_constraint_message,
    parse_check_constraint_error,
    parse_not_null_constraint_error,
    parse_unique_constraint_error,
)
from .domain import DomainError
from .infrastructure import (
    CheckConstraintError,
    ConnectionFailedError,
    DateTimeError,
    DomainPassthroughError,
    ForeignKeyConstraintError,
    InfrastructureError,
    InternalError,
    JsonError,
    MigrationFailedError,
    NotNullConstraintError,
    QueryError,
    RowConversionFailedError,
    TransactionError,
    UniqueConstraintError,
    UuidParsingError,
)
from .integrity_classifier import classify_integrity_error
from .row_conversion import RowConversionError

logger = logging.getLogger(__name__)

DiagnoseFn = Callable[[], Awaitable[DomainError]]

_FOREIGN_KEY_MESSAGE = "A referenced record does not exist."


# -----------------------
# Raw exception -> InfrastructureError
# -----------------------


def _raw_message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _stringify(value: Any) -> str | None:
    return None if value is None else str(value)


def _map_integrity_error(
    exc: IntegrityError,
    table: str | None,
    values: Mapping[str, Any] | None,
) -> InfrastructureError:
    exc_cls, constraint_name = classify_integrity_error(exc)
    raw = _raw_message(exc)

    if exc_cls is UniqueConstraintError:
        parsed_table, field, value = parse_unique_constraint_error(raw)
        parsed_table = parsed_table or table
        if value is None and field and values:
            value = _stringify(values.get(field))
        message = create_user_friendly_constraint_message(parsed_table, field, UNIQUE, raw)
        logger.info(
            "mapper.duplicate_detected",
            extra={"table": parsed_table, "fields": [field] if field else None, "constraint": constraint_name},
        )
        return UniqueConstraintError(message, table=parsed_table, field=field, value=value, raw_message=raw)

    if exc_cls is NotNullConstraintError:
        parsed_table, field = parse_not_null_constraint_error(raw)
        parsed_table = parsed_table or table
        message = create_user_friendly_constraint_message(parsed_table, field, NOT_NULL, raw)
        logger.info("mapper.not_null_violation", extra={"table": parsed_table, "fields": [field] if field else None})
        return NotNullConstraintError(message, table=parsed_table, field=field, raw_message=raw)

    if exc_cls is CheckConstraintError:
        constraint = parse_check_constraint_error(raw) or constraint_name
        parsed_table, field = check_constraint_field(constraint, table)
        message = create_user_friendly_constraint_message(parsed_table, field, CHECK, raw)
        # raw engine text at DEBUG only
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"table": parsed_table, "raw": raw, "constraint": constraint},
        )
        return CheckConstraintError(
            message, table=parsed_table, field=field, constraint=constraint, raw_message=raw
        )

    if exc_cls is ForeignKeyConstraintError:
        logger.info("mapper.foreign_key_violation", extra={"table": table, "constraint": constraint_name})
        return ForeignKeyConstraintError(_FOREIGN_KEY_MESSAGE, table=table, raw_message=raw)

    logger.warning("mapper.unknown_integrity_error", extra={"table": table, "constraint": constraint_name})
    logger.debug("mapper.unknown_integrity_raw", extra={"table": table, "raw": raw})
    return InternalError(f"Unclassified integrity error on {table or 'database'}")


def _map_operational_error(exc: OperationalError) -> InfrastructureError:
    raw = _raw_message(exc).lower()
    if "unable to open" in raw or "connect" in raw:
        return ConnectionFailedError(_raw_message(exc))
    if "locked" in raw or "busy" in raw or "transaction" in raw:
        return TransactionError(_raw_message(exc))
    return QueryError(_raw_message(exc))


def _map_value_error(exc: ValueError) -> InfrastructureError:
    text = str(exc)
    lowered = text.lower()
    if "uuid" in lowered or "hexadecimal" in lowered:
        return UuidParsingError(text)
    if "json" in lowered:
        return JsonError(text)
    if "date" in lowered or "time" in lowered:
        return DateTimeError(text)
    return InternalError(text)


def to_infrastructure_error(
    exc: BaseException,
    *,
    table: str | None = None,
    values: Mapping[str, Any] | None = None,
) -> InfrastructureError:
    """
    Convert any exception raised during a storage operation into an InfrastructureError.

    Args:
        exc: the exception raised by SQLAlchemy, the driver, or the row decoder.
        table: the table the repository operates on; used when the engine text does not name one.
        values: the values bound for the statement; used to report the conflicting value of a
                unique violation (SQLite does not include it in the message).
    """
    if isinstance(exc, InfrastructureError):
        return exc
    if isinstance(exc, DomainError):
        return DomainPassthroughError(exc)
    if isinstance(exc, RowConversionError):
        return RowConversionFailedError(exc)

    if isinstance(exc, IntegrityError):
        return _map_integrity_error(exc, table, values)
    if isinstance(exc, (InterfaceError, DisconnectionError, PoolTimeoutError)):
        return ConnectionFailedError(_raw_message(exc))
    if isinstance(exc, OperationalError):
        return _map_operational_error(exc)
    if isinstance(exc, (DBAPIError, StatementError)):
        return QueryError(_raw_message(exc))
    if isinstance(exc, InvalidRequestError):
        return TransactionError(str(exc))
    if isinstance(exc, SQLAlchemyError):
        return InternalError(str(exc))
    if isinstance(exc, ValueError):
        return _map_value_error(exc)

    return InternalError(str(exc))


# -----------------------
# InfrastructureError -> DomainError
# -----------------------


def to_domain_error(error: InfrastructureError) -> DomainError:
    """
    Total mapping from storage vocabulary to business vocabulary.

    - wrapped domain errors pass through unchanged
    - connection/migration/transaction/query/internal failures -> SystemUnavailableError
    - UUID/datetime/JSON/row decoding failures -> DataIntegrityError
    - constraint violations -> ConflictError / ValidationError with field and value context
    """
    if isinstance(error, DomainPassthroughError):
        return error.error

    if isinstance(error, ConnectionFailedError):
        return DomainError.system_unavailable("Database connection failed. Please try again later.", "database")
    if isinstance(error, MigrationFailedError):
        return DomainError.system_unavailable("Database schema is not up to date.", "database_migrations")
    if isinstance(error, TransactionError):
        return DomainError.system_unavailable(
            "The database could not complete the transaction. Please try again.", "database_transaction"
        )
    if isinstance(error, QueryError):
        return DomainError.system_unavailable("The database could not process the request.", "database")

    if isinstance(error, UuidParsingError):
        return DomainError.data_integrity(
            "Stored identifier is not a valid UUID", expected="UUID", actual=error.value
        )
    if isinstance(error, DateTimeError):
        return DomainError.data_integrity("Stored timestamp is not a valid datetime", expected="datetime")
    if isinstance(error, JsonError):
        return DomainError.data_integrity("Stored JSON document could not be decoded", expected="JSON")
    if isinstance(error, RowConversionFailedError):
        return DomainError.data_integrity(error.message, field=error.error.field, actual=error.error.value)

    if isinstance(error, UniqueConstraintError):
        return DomainError.unique_constraint(error.message, field=error.field, value=error.value)
    if isinstance(error, CheckConstraintError):
        return DomainError.validation_constraint(
            error.field or "record", error.message, constraint=error.constraint or CHECK
        )
    if isinstance(error, NotNullConstraintError):
        return DomainError.required_field(error.field or "record", error.message)
    if isinstance(error, ForeignKeyConstraintError):
        return DomainError.validation_constraint("reference", error.message, constraint="foreign_key")

    if isinstance(error, InternalError):
        return DomainError.system_unavailable("An internal database error occurred.", "database")

    # Subclasses added without a mapping still have to come out as a DomainError.
    logger.warning("mapper.unmapped_infrastructure_error", extra={"error_type": type(error).__name__})
    return DomainError.system_unavailable("An internal database error occurred.", "database")


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------


@asynccontextmanager
async def db_error_handler(
    model_name: str,
    *,
    table: str | None = None,
    values: Mapping[str, Any] | None = None,
    diagnose: DiagnoseFn | None = None,
):
    """
    Usage:
        async with db_error_handler("User", table="users", values=values, diagnose=...):
            ... storage calls and row decoding ...

    Any exception raised inside the block is converted to an InfrastructureError
    and then raised as the matching DomainError. A foreign-key violation is handed
    to `diagnose` (when given) so the caller learns which reference is dangling.
    Rolling back is the job of the session/transaction context inside the block.
    """
    try:
        yield
    except DomainError:
        raise
    except Exception as exc:
        infra = to_infrastructure_error(exc, table=table, values=values)

        if isinstance(infra, ForeignKeyConstraintError) and diagnose is not None:
            try:
                diagnosed = await diagnose()
            except DomainError as diag_exc:
                diagnosed = diag_exc
            logger.info(
                "mapper.foreign_key_diagnosed",
                extra={"model": model_name, "error_type": type(diagnosed).__name__, "field": diagnosed.field},
            )
            raise diagnosed from exc

        if isinstance(infra, (InternalError, QueryError, ConnectionFailedError, TransactionError)):
            # Unexpected failures keep their stack trace in the logs.
            logger.exception("Storage error for %s", model_name, extra={"model": model_name})

        raise to_domain_error(infra) from exc


__all__ = [
    "to_infrastructure_error",
    "to_domain_error",
    "db_error_handler",
]
