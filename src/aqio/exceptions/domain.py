"""
Business-facing error taxonomy.

`DomainError` is the only error type that crosses the service/API boundary.
Services raise it when a business rule fails, repositories raise it after
translating a storage failure (see `aqio.exceptions.mapper`), and the API layer
turns it into an HTTP response using `http_status()` and `to_payload()`.

Every subclass carries the structured context needed to render both a machine
error code and a human message, so nothing downstream has to re-parse strings.
"""

from typing import Any


class DomainError(Exception):
    """
    Base class for domain errors.

    - message: human-friendly message (safe to show to clients)
    - error_code: stable machine code (e.g. 'DOMAIN_CONFLICT') used by clients
    """

    error_code: str = "DOMAIN_ERROR"

    # Map canonical error_code -> HTTP status.
    # Anything not listed here is treated as an internal error (500).
    ERROR_CODE_TO_STATUS = {
        "DOMAIN_NOT_FOUND": 404,
        "DOMAIN_VALIDATION_ERROR": 400,
        "DOMAIN_CONFLICT": 409,
        "BUSINESS_RULE_VIOLATION": 422,
        "DOMAIN_UNAUTHORIZED": 401,
        "DOMAIN_FORBIDDEN": 403,
        "SYSTEM_UNAVAILABLE": 503,
        "EXTERNAL_SERVICE_ERROR": 503,
        "DATA_INTEGRITY_ERROR": 500,
    }

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    @property
    def field(self) -> str | None:
        """Name of the input field the error refers to, if any."""
        return None

    def details(self) -> dict[str, Any] | None:
        """Extra structured context for the response body (None when there is nothing to add)."""
        return None

    def http_status(self) -> int:
        return self.ERROR_CODE_TO_STATUS.get(self.error_code, 500)

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for HTTP responses.

        Shape:
            {"error": {"code": "...", "message": "...", "field": "...", "details": {...}}}

        `field` and `details` are only present when the error has them.
        """
        body: dict[str, Any] = {"code": self.error_code, "message": self.message}
        if self.field:
            body["field"] = self.field
        details = self.details()
        if details:
            body["details"] = details
        return {"error": body}

    # =================================================================================================================
    # Convenience constructors
    # =================================================================================================================

    @classmethod
    def not_found(cls, entity: str, entity_id: Any) -> "NotFoundError":
        return NotFoundError(entity, "id", str(entity_id))

    @classmethod
    def not_found_by_field(cls, entity: str, field: str, value: Any) -> "NotFoundError":
        return NotFoundError(entity, field, str(value))

    @classmethod
    def validation(cls, field: str, message: str) -> "ValidationError":
        return ValidationError(field, message)

    @classmethod
    def business_rule(cls, message: str) -> "BusinessRuleViolation":
        return BusinessRuleViolation(message)

    @classmethod
    def conflict(cls, message: str) -> "ConflictError":
        return ConflictError(message)

    @classmethod
    def unauthorized(cls, message: str) -> "UnauthorizedError":
        return UnauthorizedError(message)

    @classmethod
    def forbidden(cls, message: str) -> "UnauthorizedError":
        return UnauthorizedError(message, forbidden=True)

    @classmethod
    def unique_constraint(
        cls, message: str, field: str | None = None, value: Any = None
    ) -> "ConflictError":
        return ConflictError(message, field=field, conflicting_value=None if value is None else str(value))

    @classmethod
    def validation_constraint(
        cls,
        field: str,
        message: str,
        constraint: str | None = None,
        value: Any = None,
    ) -> "ValidationError":
        return ValidationError(field, message, constraint=constraint, value=None if value is None else str(value))

    @classmethod
    def required_field(cls, field: str, message: str | None = None) -> "ValidationError":
        return ValidationError(
            field,
            message or f"The field '{field.replace('_', ' ')}' is required and cannot be empty.",
            constraint="not_null",
        )

    @classmethod
    def data_integrity(
        cls,
        message: str,
        field: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ) -> "DataIntegrityError":
        return DataIntegrityError(message, field=field, expected=expected, actual=actual)

    @classmethod
    def system_unavailable(cls, message: str, component: str | None = None) -> "SystemUnavailableError":
        return SystemUnavailableError(message, component=component)

    @classmethod
    def external_service(cls, service: str, message: str) -> "ExternalServiceError":
        return ExternalServiceError(service, message)


class NotFoundError(DomainError):
    """A requested entity does not exist."""

    error_code = "DOMAIN_NOT_FOUND"

    def __init__(self, entity: str, identifier: str, value: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.identifier = identifier
        self.value = value

    def __str__(self) -> str:
        return f"{self.entity} with {self.identifier} = '{self.value}' not found"

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "identifier": self.identifier, "value": self.value}


class ValidationError(DomainError):
    """Input failed a validation rule."""

    error_code = "DOMAIN_VALIDATION_ERROR"

    def __init__(
        self,
        field: str,
        message: str,
        *,
        constraint: str | None = None,
        value: str | None = None,
    ):
        super().__init__(message)
        self._field = field
        self.constraint = constraint
        self.value = value

    @property
    def field(self) -> str:
        return self._field

    def __str__(self) -> str:
        return f"Validation error in {self._field}: {self.message}"

    def details(self) -> dict[str, Any] | None:
        # constraint names are engine details; only the value goes back to the client
        if self.value is None:
            return None
        return {"value": self.value}


class BusinessRuleViolation(DomainError):
    error_code = "BUSINESS_RULE_VIOLATION"

    def __str__(self) -> str:
        return f"Business rule violation: {self.message}"


class ConflictError(DomainError):
    """The operation collides with existing state (duplicates, concurrent edits)."""

    error_code = "DOMAIN_CONFLICT"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        conflicting_value: str | None = None,
    ):
        super().__init__(message)
        self._field = field
        self.conflicting_value = conflicting_value

    @property
    def field(self) -> str | None:
        return self._field

    def __str__(self) -> str:
        return f"Conflict: {self.message}"

    def details(self) -> dict[str, Any] | None:
        if self.conflicting_value is None:
            return None
        return {"conflicting_value": self.conflicting_value}


class UnauthorizedError(DomainError):
    """
    The caller may not perform the operation.

    `forbidden=True` marks an authenticated caller lacking permission (403);
    otherwise the caller is unauthenticated (401).
    """

    error_code = "DOMAIN_UNAUTHORIZED"

    def __init__(self, message: str, *, forbidden: bool = False):
        super().__init__(message)
        self.forbidden = forbidden
        if forbidden:
            self.error_code = "DOMAIN_FORBIDDEN"

    def __str__(self) -> str:
        return f"Unauthorized operation: {self.message}"


class DataIntegrityError(DomainError):
    """Stored data could not be decoded into the domain model."""

    error_code = "DATA_INTEGRITY_ERROR"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        super().__init__(message)
        self._field = field
        self.expected = expected
        self.actual = actual

    @property
    def field(self) -> str | None:
        return self._field

    def __str__(self) -> str:
        return f"Data integrity error: {self.message}"

    def details(self) -> dict[str, Any] | None:
        # `actual` holds stored data; it stays in logs, not in responses
        if self.expected is None:
            return None
        return {"expected": self.expected}


class SystemUnavailableError(DomainError):
    """An operational dependency (usually the database) is not usable right now."""

    error_code = "SYSTEM_UNAVAILABLE"

    def __init__(self, message: str, *, component: str | None = None):
        super().__init__(message)
        self.component = component

    def __str__(self) -> str:
        return f"System unavailable: {self.message}"

    def details(self) -> dict[str, Any] | None:
        if self.component is None:
            return None
        return {"component": self.component}


class ExternalServiceError(DomainError):
    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, service: str, message: str):
        super().__init__(message)
        self.service = service

    def __str__(self) -> str:
        return f"External service '{self.service}' failed: {self.message}"

    def details(self) -> dict[str, Any]:
        return {"service": self.service}


__all__ = [
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "BusinessRuleViolation",
    "ConflictError",
    "UnauthorizedError",
    "DataIntegrityError",
    "SystemUnavailableError",
    "ExternalServiceError",
]
