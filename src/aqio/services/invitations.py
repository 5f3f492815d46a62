"""Invitation use cases."""

import uuid

from aqio.domain.entities import EventInvitation, InvitationStatus
from aqio.domain.services import InvitationService
from aqio.exceptions.domain import ConflictError, DomainError
from aqio.repositories.interfaces import EventInvitationRepository


class InvitationApplicationService:
    def __init__(
        self,
        invitation_repository: EventInvitationRepository,
        invitation_service: InvitationService | None = None,
    ):
        self.invitation_repository = invitation_repository
        self.invitation_service = invitation_service or InvitationService()

    async def get_invitation_by_id(self, invitation_id: uuid.UUID) -> EventInvitation:
        invitation = await self.invitation_repository.find_by_id(invitation_id)
        if invitation is None:
            raise DomainError.not_found("EventInvitation", invitation_id)
        return invitation

    async def get_invitations_by_event(self, event_id: uuid.UUID) -> list[EventInvitation]:
        return await self.invitation_repository.find_by_event_id(event_id)

    async def get_invitations_by_user(self, user_id: uuid.UUID) -> list[EventInvitation]:
        return await self.invitation_repository.find_by_user_id(user_id)

    async def create_invitation(self, invitation: EventInvitation) -> EventInvitation:
        """Create an invitation unless the same user or email is already invited to the event."""
        self.invitation_service.validate_invitation(invitation)

        if invitation.invited_user_id is not None and await self.invitation_repository.user_invited_to_event(
            invitation.invited_user_id, invitation.event_id
        ):
            raise ConflictError(
                "User already invited to this event",
                field="invited_user_id",
                conflicting_value=str(invitation.invited_user_id),
            )
        if invitation.invited_email is not None and await self.invitation_repository.email_invited_to_event(
            invitation.invited_email, invitation.event_id
        ):
            raise ConflictError(
                "Email already invited to this event",
                field="invited_email",
                conflicting_value=invitation.invited_email,
            )

        if invitation.invitation_token is None:
            invitation.invitation_token = self.invitation_service.generate_invitation_token()
        return await self.invitation_repository.create(invitation)

    async def update_invitation_status(self, invitation_id: uuid.UUID, status: InvitationStatus) -> None:
        """Set the status of an invitation that has not reached a final status yet."""
        invitation = await self.get_invitation_by_id(invitation_id)
        self.invitation_service.ensure_status_can_change(invitation)
        await self.invitation_repository.update_status(invitation_id, status)

    async def respond(self, invitation_id: uuid.UUID, accept: bool) -> EventInvitation:
        """Accept or decline a pending, unexpired invitation."""
        invitation = await self.get_invitation_by_id(invitation_id)
        if accept:
            self.invitation_service.accept(invitation)
        else:
            self.invitation_service.decline(invitation)
        return await self.invitation_repository.update(invitation)

    async def delete_invitation(self, invitation_id: uuid.UUID) -> None:
        await self.invitation_repository.delete(invitation_id)
