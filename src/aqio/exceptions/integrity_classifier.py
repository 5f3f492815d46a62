"""
Classify a SQLAlchemy IntegrityError into a constraint category.

The classifier only answers "what kind of constraint failed". Pulling table and
column names out of the engine text and turning them into user-facing messages
is the job of `constraint_messages`; assembling the final infrastructure error
is the job of `mapper.to_infrastructure_error`.

Two strategies, in order:
  1. Engine error codes: SQLite extended result codes (`sqlite_errorcode` on the
     sqlite3 exception, Python 3.11+) or a Postgres SQLSTATE (`pgcode`).
  2. Substring matching on the engine message, for drivers that expose neither.
"""

import logging
from enum import Enum
from typing import Type

from sqlalchemy.exc import IntegrityError

from .infrastructure import (
    CheckConstraintError,
    ConstraintViolationError,
    ForeignKeyConstraintError,
    NotNullConstraintError,
    UniqueConstraintError,
)

logger = logging.getLogger(__name__)


# https://www.sqlite.org/rescode.html
class SqliteErrorCodes(int, Enum):
    CONSTRAINT = 19
    CONSTRAINT_CHECK = 275
    CONSTRAINT_FOREIGNKEY = 787
    CONSTRAINT_NOTNULL = 1299
    CONSTRAINT_PRIMARYKEY = 1555
    CONSTRAINT_UNIQUE = 2067


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


SQLITE_CODE_EXCEPTION_MAP = {
    SqliteErrorCodes.CONSTRAINT_UNIQUE: UniqueConstraintError,
    SqliteErrorCodes.CONSTRAINT_PRIMARYKEY: UniqueConstraintError,
    SqliteErrorCodes.CONSTRAINT_NOTNULL: NotNullConstraintError,
    SqliteErrorCodes.CONSTRAINT_FOREIGNKEY: ForeignKeyConstraintError,
    SqliteErrorCodes.CONSTRAINT_CHECK: CheckConstraintError,
}

PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION: NotNullConstraintError,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ForeignKeyConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION: CheckConstraintError,
}

ConstraintClass = Type[ConstraintViolationError]


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _classify_from_sqlite_code(orig) -> ConstraintClass | None:
    code = getattr(orig, "sqlite_errorcode", None)
    if code is None:
        return None

    exception_class = SQLITE_CODE_EXCEPTION_MAP.get(code)
    if exception_class:
        logger.debug(
            "SQLite integrity diagnostic",
            extra={"sqlite_errorcode": code, "sqlite_errorname": getattr(orig, "sqlite_errorname", None)},
        )
        return exception_class

    # Plain SQLITE_CONSTRAINT (19) or an unexpected extended code: let the message decide.
    logger.debug("SQLite integrity code not specific enough", extra={"sqlite_errorcode": code})
    return None


def _classify_from_postgres_diag(orig) -> tuple[ConstraintClass | None, str | None]:
    pgcode = getattr(orig, "pgcode", None)
    if not pgcode:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None

    exception_class = PGCODE_EXCEPTION_MAP.get(pgcode)
    if exception_class:
        logger.debug("Postgres integrity diagnostic", extra={"pgcode": pgcode, "constraint_name": constraint_name})
        return exception_class, constraint_name

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"pgcode": pgcode, "constraint_name": constraint_name},
    )
    return None, constraint_name


def classify_message(msg: str) -> ConstraintClass | None:
    """
    Classify an integrity error from its message text alone.

    Returns None for messages that do not look like any known constraint failure.
    """
    normalized = (msg or "").lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueConstraintError

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return NotNullConstraintError

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ForeignKeyConstraintError

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckConstraintError

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return None


def classify_integrity_error(exc: IntegrityError) -> tuple[ConstraintClass | None, str | None]:
    """
    Classify a SQLAlchemy IntegrityError.

    Returns:
        (constraint exception class or None when unrecognised, constraint name if the driver reports one)
    """
    orig = exc.orig

    exception_class = _classify_from_sqlite_code(orig)
    if exception_class is not None:
        return exception_class, None

    exception_class, constraint_name = _classify_from_postgres_diag(orig)
    if exception_class is not None:
        return exception_class, constraint_name

    return classify_message(str(orig) if orig is not None else str(exc)), constraint_name
