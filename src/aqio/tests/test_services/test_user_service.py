import uuid

import pytest

from aqio.domain.pagination import PaginationParams
from aqio.exceptions.domain import ConflictError, NotFoundError, ValidationError
from aqio.services.users import UserApplicationService


@pytest.fixture
def user_service(user_repository) -> UserApplicationService:
    return UserApplicationService(user_repository)


@pytest.mark.asyncio
class TestUserApplicationService:
    async def test_create_and_get(self, user_service, build_user):
        created = await user_service.create_user(build_user())
        found = await user_service.get_user_by_id(created.id)
        assert found.email == created.email
        assert (await user_service.get_user_by_keycloak_id(created.keycloak_id)).id == created.id

    async def test_duplicate_email_is_caught_before_insert(self, user_service, create_user, build_user):
        """
        Behavior:
          - The service checks email_exists first and raises its own ConflictError.
        """
        existing = await create_user()
        with pytest.raises(ConflictError) as exc_info:
            await user_service.create_user(build_user(email=existing.email))

        assert exc_info.value.message == "Email already exists"
        assert exc_info.value.field == "email"

    async def test_invalid_user(self, user_service, build_user):
        with pytest.raises(ValidationError):
            await user_service.create_user(build_user(email="no-at-sign"))

    async def test_get_missing(self, user_service):
        user_id = uuid.uuid4()
        with pytest.raises(NotFoundError) as exc_info:
            await user_service.get_user_by_id(user_id)
        assert str(exc_info.value) == f"User with id = '{user_id}' not found"

    async def test_deactivate(self, user_service, created_user):
        updated = await user_service.set_active(created_user.id, False)
        assert updated.is_active is False
        assert (await user_service.get_user_by_id(created_user.id)).is_active is False

    async def test_list_and_delete(self, user_service, create_user):
        first = await create_user()
        await create_user()

        assert (await user_service.list_users(PaginationParams())).total_count == 2
        await user_service.delete_user(first.id)
        assert await user_service.get_user_by_email(first.email) is None
