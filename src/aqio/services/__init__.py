"""
Application services: use cases composed over the repository protocols.

Services take repositories by protocol, so tests can hand them in-memory fakes
and production code hands them the SQLite implementations from
`RepositoryFactory`.
"""

from .events import EventApplicationService, EventCategoryApplicationService
from .invitations import InvitationApplicationService
from .registrations import RegistrationApplicationService
from .users import UserApplicationService

__all__ = [
    "EventApplicationService",
    "EventCategoryApplicationService",
    "InvitationApplicationService",
    "RegistrationApplicationService",
    "UserApplicationService",
]
