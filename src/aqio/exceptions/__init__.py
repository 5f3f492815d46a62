# aqio/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── domain.py                  # Business-facing errors (DomainError and subclasses)
# │   ├── infrastructure.py          # Storage-layer errors (InfrastructureError and subclasses)
# │   ├── row_conversion.py          # Row decoding errors (RowConversionError and subclasses)
# │   ├── integrity_classifier.py    # Raw DB integrity error -> constraint category
# │   ├── constraint_messages.py     # Constraint text parsing + user-facing messages
# │   └── mapper.py                  # Raw error -> InfrastructureError -> DomainError

from .domain import (
    BusinessRuleViolation,
    ConflictError,
    DataIntegrityError,
    DomainError,
    ExternalServiceError,
    NotFoundError,
    SystemUnavailableError,
    UnauthorizedError,
    ValidationError,
)

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
