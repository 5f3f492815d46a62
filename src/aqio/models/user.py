from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from aqio.database.base import Base


class CompanyModel(Base):
    """
    SQLAlchemy model for companies (organizations users belong to).

    Only referenced by users; there is no company repository.
    """
    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("industry_type IN ('Salmon', 'Trout', 'Other')", name="industry_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    org_number: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    industry_type: Mapped[str] = mapped_column(String(20), nullable=False, default="Other")
    industry_type_other: Mapped[str | None] = mapped_column(String(100), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Company(id={self.id!r}, name={self.name!r})>"


class UserModel(Base):
    """
    SQLAlchemy model for platform users.

    Ids are stored as canonical UUID text; the repository decodes them with the
    row mapping helpers.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'organizer', 'participant')", name="role"),
        CheckConstraint("length(trim(name)) > 0", name="name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Identity provider subject; one platform user per external account
    keycloak_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    company_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("companies.id"), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="participant")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r}, role={self.role!r})>"
