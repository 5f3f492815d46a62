from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from aqio.database.base import Base


class EventCategoryModel(Base):
    """SQLAlchemy model for event categories. Ids are short text keys ('conf', 'workshop', ...)."""
    __tablename__ = "event_categories"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color_hex: Mapped[str | None] = mapped_column(String(7), nullable=True)
    icon_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<EventCategory(id={self.id!r}, name={self.name!r})>"


class EventModel(Base):
    """
    SQLAlchemy model for events.

    `co_organizers` (JSON array of user ids) and `custom_fields` (JSON object)
    are stored as text and decoded by the event repository.
    """
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("location_type IN ('physical', 'virtual', 'hybrid')", name="location_type"),
        CheckConstraint("status IN ('draft', 'published', 'cancelled', 'completed')", name="status"),
        CheckConstraint("end_date > start_date", name="dates"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("event_categories.id"), index=True, nullable=False
    )

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")

    location_type: Mapped[str] = mapped_column(String(20), nullable=False, default="physical")
    location_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    virtual_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    virtual_access_code: Mapped[str | None] = mapped_column(String(100), nullable=True)

    organizer_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    co_organizers: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    requires_approval: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    allow_guests: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_guests_per_person: Mapped[int | None] = mapped_column(Integer, nullable=True)

    registration_opens: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    registration_closes: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    registration_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    allow_waitlist: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    send_reminders: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    collect_dietary_info: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    collect_accessibility_info: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_fields: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False, default="draft")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Event(id={self.id!r}, title={self.title!r}, status={self.status!r})>"
