from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from aqio.database.base import Base

# Exactly one way of addressing the invitee: a platform user, an external contact,
# or an email + name pair.
INVITATION_TARGET_CHECK = (
    "(invited_user_id IS NOT NULL AND invited_contact_id IS NULL "
    "AND invited_email IS NULL AND invited_name IS NULL) OR "
    "(invited_user_id IS NULL AND invited_contact_id IS NOT NULL "
    "AND invited_email IS NULL AND invited_name IS NULL) OR "
    "(invited_user_id IS NULL AND invited_contact_id IS NULL "
    "AND invited_email IS NOT NULL AND invited_name IS NOT NULL)"
)


class EventInvitationModel(Base):
    """SQLAlchemy model for event invitations."""
    __tablename__ = "event_invitations"
    __table_args__ = (
        CheckConstraint(INVITATION_TARGET_CHECK, name="invitation_target"),
        CheckConstraint(
            "invitation_method IN ('email', 'sms', 'manual', 'bulk_import')", name="invitation_method"
        ),
        CheckConstraint(
            "status IN ('pending', 'sent', 'delivered', 'opened', 'accepted', 'declined', 'cancelled')",
            name="status",
        ),
        UniqueConstraint("event_id", "invited_user_id", name="uq_event_invitations_event_user"),
        UniqueConstraint("event_id", "invited_contact_id", name="uq_event_invitations_event_contact"),
        UniqueConstraint("event_id", "invited_email", name="uq_event_invitations_event_email"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id", ondelete="CASCADE"), index=True, nullable=False
    )

    invited_user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True
    )
    # External contacts live outside this schema; the id is kept as an opaque reference.
    invited_contact_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    invited_email: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    invited_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    inviter_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    invitation_method: Mapped[str] = mapped_column(String(20), nullable=False, default="email")
    personal_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False, default="pending")
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    invitation_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<EventInvitation(id={self.id!r}, event_id={self.event_id!r}, status={self.status!r})>"
