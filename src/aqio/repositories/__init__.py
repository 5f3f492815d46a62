r"""
Repository layer: contracts, SQLite implementations and the factory that wires them.

repositories/
    ├── interfaces.py                   # Protocol per entity (what services depend on)
    ├── base_repository.py              # transaction scope, error translation, generic CRUD helpers
    ├── row_mapping.py                  # typed, failure-reporting column getters
    ├── diagnostics.py                  # foreign-key violation diagnosis
    ├── user_repository.py
    ├── event_category_repository.py
    ├── event_repository.py
    ├── invitation_repository.py
    ├── registration_repository.py
    └── factory.py                      # RepositoryFactory / AllRepositories
"""

from .diagnostics import ForeignKeyDiagnostic
from .event_category_repository import SqliteEventCategoryRepository
from .event_repository import SqliteEventRepository
from .factory import AllRepositories, RepositoryFactory
from .interfaces import (
    EventCategoryRepository,
    EventInvitationRepository,
    EventRegistrationRepository,
    EventRepository,
    UserRepository,
)
from .invitation_repository import SqliteEventInvitationRepository
from .registration_repository import SqliteEventRegistrationRepository
from .user_repository import SqliteUserRepository

__all__ = [
    "AllRepositories",
    "RepositoryFactory",
    "ForeignKeyDiagnostic",
    "UserRepository",
    "EventRepository",
    "EventCategoryRepository",
    "EventInvitationRepository",
    "EventRegistrationRepository",
    "SqliteUserRepository",
    "SqliteEventRepository",
    "SqliteEventCategoryRepository",
    "SqliteEventInvitationRepository",
    "SqliteEventRegistrationRepository",
]
