r"""
Centralized access to all table models.

Importing this package registers every table with `Base.metadata`, which is what
`create_schema()` and the test fixtures rely on.

These classes describe storage only. Repositories query their `__table__`s and
decode rows into the domain entities in `aqio.domain.entities`.
"""

from .user import CompanyModel, UserModel
from .event import EventCategoryModel, EventModel
from .invitation import EventInvitationModel
from .registration import EventRegistrationModel

__all__ = [
    "CompanyModel",
    "UserModel",
    "EventCategoryModel",
    "EventModel",
    "EventInvitationModel",
    "EventRegistrationModel",
]
