"""SQLAlchemy ORM models for registration codes and their redemptions."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class RegistrationCodeModel(Base, TimestampMixin):
    """ORM model for registration_codes table.

    The check constraint backs the usage cap at the database level; the
    repository's conditional increment never reaches it in practice.
    """

    __tablename__ = "registration_codes"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_uses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_registration_codes_code", "code", unique=True),
        CheckConstraint("current_uses >= 0", name="ck_registration_codes_uses_positive"),
        CheckConstraint(
            "max_uses IS NULL OR current_uses <= max_uses",
            name="ck_registration_codes_within_cap",
        ),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<RegistrationCodeModel(id={self.id}, code={self.code}, "
            f"uses={self.current_uses}/{self.max_uses})>"
        )


class RegistrationCodeRedemptionModel(Base):
    """ORM model for registration_code_redemptions table.

    One row per successful redemption. ``released_at`` is set when the
    redemption is given back.
    """

    __tablename__ = "registration_code_redemptions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    code_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("registration_codes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    redeemed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    released_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<RegistrationCodeRedemptionModel(id={self.id}, code_id={self.code_id}, "
            f"user_id={self.user_id})>"
        )
