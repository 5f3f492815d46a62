"""
Errors raised while decoding one stored row into a domain entity.

They only exist for the duration of the decode step: repositories wrap them into
`RowConversionFailedError` (an infrastructure error) straight away.
"""

from typing import Any


class RowConversionError(Exception):
    """Base for row decoding failures. `field` is the column that failed."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    @property
    def value(self) -> str | None:
        """The offending stored value, when the variant keeps one."""
        return None


class MissingFieldError(RowConversionError):
    def __init__(self, field: str, cause: str = "column is missing or NULL"):
        super().__init__(field, f"Missing required field '{field}': {cause}")
        self.cause = cause


class InvalidUuidError(RowConversionError):
    def __init__(self, field: str, value: Any, cause: str):
        super().__init__(field, f"Invalid UUID in field '{field}' with value '{value}': {cause}")
        self._value = str(value)
        self.cause = cause

    @property
    def value(self) -> str:
        return self._value


class InvalidJsonError(RowConversionError):
    def __init__(self, field: str, cause: str):
        super().__init__(field, f"Invalid JSON in field '{field}': {cause}")
        self.cause = cause


class InvalidDateTimeError(RowConversionError):
    def __init__(self, field: str, cause: str):
        super().__init__(field, f"Invalid datetime in field '{field}': {cause}")
        self.cause = cause


class InvalidEnumError(RowConversionError):
    def __init__(self, field: str, value: Any):
        super().__init__(field, f"Invalid enum value '{value}' in field '{field}'")
        self._value = str(value)

    @property
    def value(self) -> str:
        return self._value


class InvalidNumberError(RowConversionError):
    def __init__(self, field: str, value: Any):
        super().__init__(field, f"Invalid number '{value}' in field '{field}'")
        self._value = str(value)

    @property
    def value(self) -> str:
        return self._value


__all__ = [
    "RowConversionError",
    "MissingFieldError",
    "InvalidUuidError",
    "InvalidJsonError",
    "InvalidDateTimeError",
    "InvalidEnumError",
    "InvalidNumberError",
]
