"""
Field-by-field decoding of stored rows.

Every getter takes a row mapping (SQLAlchemy `RowMapping` in the repositories,
any `Mapping` in tests) and a column name, and either returns a typed value or
raises a `RowConversionError` naming the column. There are no silent defaults:
the only leniency is that a blank JSON column decodes to the empty value of its
type.

Usage:
    row = result.mappings().one()
    user_id = get_uuid(row, "id")
    role = get_user_role(row, "role")
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Mapping, TypeVar, get_origin

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from aqio.domain.entities import (
    EventStatus,
    InvitationMethod,
    InvitationStatus,
    LocationType,
    RegistrationSource,
    RegistrationStatus,
    UserRole,
)
from aqio.exceptions.row_conversion import (
    InvalidDateTimeError,
    InvalidEnumError,
    InvalidJsonError,
    InvalidNumberError,
    InvalidUuidError,
    MissingFieldError,
)

Row = Mapping[str, Any]
T = TypeVar("T")
E = TypeVar("E", bound=Enum)

_MISSING = object()


def _raw(row: Row, field: str) -> Any:
    if field not in row:
        return _MISSING
    return row[field]


def _require(row: Row, field: str) -> Any:
    value = _raw(row, field)
    if value is _MISSING:
        raise MissingFieldError(field, "column not present in row")
    if value is None:
        raise MissingFieldError(field, "unexpected NULL")
    return value


def _optional(row: Row, field: str) -> Any:
    value = _raw(row, field)
    if value is _MISSING:
        raise MissingFieldError(field, "column not present in row")
    return value


# =================================================================================================================
# Scalars
# =================================================================================================================


def get_string(row: Row, field: str) -> str:
    return str(_require(row, field))


def get_optional_string(row: Row, field: str) -> str | None:
    value = _optional(row, field)
    return None if value is None else str(value)


def _parse_uuid(field: str, value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise InvalidUuidError(field, value, str(exc)) from exc


def get_uuid(row: Row, field: str) -> uuid.UUID:
    return _parse_uuid(field, _require(row, field))


def get_optional_uuid(row: Row, field: str) -> uuid.UUID | None:
    value = _optional(row, field)
    return None if value is None else _parse_uuid(field, value)


def _parse_datetime(field: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidDateTimeError(field, str(exc)) from exc
    else:
        raise InvalidDateTimeError(field, f"unsupported type {type(value).__name__}")

    # SQLite hands back naive values; everything is stored in UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_datetime(row: Row, field: str) -> datetime:
    return _parse_datetime(field, _require(row, field))


def get_optional_datetime(row: Row, field: str) -> datetime | None:
    value = _optional(row, field)
    return None if value is None else _parse_datetime(field, value)


def get_bool(row: Row, field: str) -> bool:
    value = _require(row, field)
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise InvalidNumberError(field, value)


def _parse_int(field: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InvalidNumberError(field, value) from exc
    raise InvalidNumberError(field, value)


def get_int(row: Row, field: str) -> int:
    return _parse_int(field, _require(row, field))


def get_optional_int(row: Row, field: str) -> int | None:
    value = _optional(row, field)
    return None if value is None else _parse_int(field, value)


# =================================================================================================================
# JSON
# =================================================================================================================


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def _default_for(type_: Any) -> Any:
    return (get_origin(type_) or type_)()


def _decode_json(field: str, value: Any, type_: Any) -> Any:
    try:
        if isinstance(value, (str, bytes)):
            return _adapter(type_).validate_json(value)
        # JSON column types hand back already-decoded values
        return _adapter(type_).validate_python(value)
    except PydanticValidationError as exc:
        errors = exc.errors()
        cause = errors[0]["msg"] if errors else str(exc)
        raise InvalidJsonError(field, cause) from exc


def get_json(row: Row, field: str, type_: type[T] = dict) -> T:
    """
    Decode a JSON text column into `type_` (e.g. `list[uuid.UUID]`, `dict[str, Any]`).

    A blank column yields the empty value of the type (`[]`, `{}`); malformed or
    mistyped JSON raises `InvalidJsonError`.
    """
    value = _require(row, field)
    if isinstance(value, (str, bytes)) and not value.strip():
        return _default_for(type_)
    return _decode_json(field, value, type_)


def get_optional_json(row: Row, field: str, type_: type[T] = dict) -> T | None:
    """Like `get_json`, but NULL or blank yields None."""
    value = _optional(row, field)
    if value is None or (isinstance(value, (str, bytes)) and not value.strip()):
        return None
    return _decode_json(field, value, type_)


# =================================================================================================================
# Enums
# =================================================================================================================


def _get_enum(row: Row, field: str, enum_cls: type[E], *, case_sensitive: bool = False) -> E:
    raw = get_string(row, field)
    candidate = raw if case_sensitive else raw.strip().lower()
    try:
        return enum_cls(candidate)
    except ValueError as exc:
        raise InvalidEnumError(field, raw) from exc


def get_location_type(row: Row, field: str) -> LocationType:
    return _get_enum(row, field, LocationType)


def get_event_status(row: Row, field: str) -> EventStatus:
    return _get_enum(row, field, EventStatus)


def get_user_role(row: Row, field: str) -> UserRole:
    return _get_enum(row, field, UserRole, case_sensitive=True)


def get_invitation_status(row: Row, field: str) -> InvitationStatus:
    return _get_enum(row, field, InvitationStatus)


def get_invitation_method(row: Row, field: str) -> InvitationMethod:
    return _get_enum(row, field, InvitationMethod)


def get_registration_status(row: Row, field: str) -> RegistrationStatus:
    return _get_enum(row, field, RegistrationStatus)


def get_registration_source(row: Row, field: str) -> RegistrationSource:
    return _get_enum(row, field, RegistrationSource)


__all__ = [
    "get_string",
    "get_optional_string",
    "get_uuid",
    "get_optional_uuid",
    "get_datetime",
    "get_optional_datetime",
    "get_bool",
    "get_int",
    "get_optional_int",
    "get_json",
    "get_optional_json",
    "get_location_type",
    "get_event_status",
    "get_user_role",
    "get_invitation_status",
    "get_invitation_method",
    "get_registration_status",
    "get_registration_source",
]
