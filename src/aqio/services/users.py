"""User use cases."""

import uuid

from aqio.domain.entities import User
from aqio.domain.pagination import PaginatedResult, PaginationParams
from aqio.domain.services import UserService
from aqio.exceptions.domain import ConflictError, DomainError
from aqio.repositories.interfaces import UserRepository


class UserApplicationService:
    def __init__(self, user_repository: UserRepository, user_service: UserService | None = None):
        self.user_repository = user_repository
        self.user_service = user_service or UserService()

    async def get_user_by_id(self, user_id: uuid.UUID) -> User:
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise DomainError.not_found("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        return await self.user_repository.find_by_email(email)

    async def get_user_by_keycloak_id(self, keycloak_id: str) -> User | None:
        return await self.user_repository.find_by_keycloak_id(keycloak_id)

    async def list_users(self, pagination: PaginationParams) -> PaginatedResult[User]:
        return await self.user_repository.list_all(pagination)

    async def create_user(self, user: User) -> User:
        """
        Register a user.

        The email pre-check gives a clear message for the common case; the UNIQUE
        constraint still catches a concurrent duplicate.
        """
        self.user_service.validate_user(user)
        if await self.user_repository.email_exists(user.email):
            raise ConflictError("Email already exists", field="email", conflicting_value=user.email)
        return await self.user_repository.create(user)

    async def update_user(self, user: User) -> User:
        return await self.user_repository.update(user)

    async def set_active(self, user_id: uuid.UUID, active: bool) -> User:
        user = await self.get_user_by_id(user_id)
        if active:
            self.user_service.activate(user)
        else:
            self.user_service.deactivate(user)
        return await self.user_repository.update(user)

    async def delete_user(self, user_id: uuid.UUID) -> None:
        await self.user_repository.delete(user_id)
