from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from aqio.database.base import Base

# Exactly one registrant identity: a platform user, an external contact,
# or an email + name pair.
REGISTRANT_IDENTITY_CHECK = (
    "(user_id IS NOT NULL AND external_contact_id IS NULL "
    "AND registrant_email IS NULL AND registrant_name IS NULL) OR "
    "(user_id IS NULL AND external_contact_id IS NOT NULL "
    "AND registrant_email IS NULL AND registrant_name IS NULL) OR "
    "(user_id IS NULL AND external_contact_id IS NULL "
    "AND registrant_email IS NOT NULL AND registrant_name IS NOT NULL)"
)


class EventRegistrationModel(Base):
    """SQLAlchemy model for event registrations (including waitlist entries)."""
    __tablename__ = "event_registrations"
    __table_args__ = (
        CheckConstraint(REGISTRANT_IDENTITY_CHECK, name="registrant_identity"),
        CheckConstraint(
            "status IN ('registered', 'waitlisted', 'cancelled', 'attended', 'no_show')", name="status"
        ),
        CheckConstraint(
            "registration_source IN ('invitation', 'direct', 'waitlist_promotion')", name="registration_source"
        ),
        CheckConstraint("guest_count >= 0", name="guest_count"),
        UniqueConstraint("event_id", "user_id", name="uq_event_registrations_event_user"),
        UniqueConstraint("event_id", "external_contact_id", name="uq_event_registrations_event_contact"),
        UniqueConstraint("event_id", "registrant_email", name="uq_event_registrations_event_email"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id", ondelete="CASCADE"), index=True, nullable=False
    )
    invitation_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("event_invitations.id", ondelete="SET NULL"), nullable=True
    )

    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True
    )
    external_contact_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    registrant_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    registrant_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    registrant_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    registrant_company: Mapped[str | None] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False, default="registered")
    registration_source: Mapped[str] = mapped_column(String(30), nullable=False, default="direct")

    guest_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    guest_names: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    dietary_restrictions: Mapped[str | None] = mapped_column(Text, nullable=True)
    accessibility_needs: Mapped[str | None] = mapped_column(Text, nullable=True)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_responses: Mapped[str | None] = mapped_column(Text, nullable=True)

    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    waitlist_position: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    waitlist_added_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<EventRegistration(id={self.id!r}, event_id={self.event_id!r}, status={self.status!r})>"
