"""SQLAlchemy ORM model for the user_addresses table.

Written once per user when onboarding completes.
"""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserAddressModel(Base, TimestampMixin):
    """ORM model for user_addresses table."""

    __tablename__ = "user_addresses"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    discord_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    street_address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(64), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    is_validated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    validation_payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    override_code_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("registration_codes.id", ondelete="SET NULL"),
        nullable=True,
    )
    redemption_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserAddressModel(user_id={self.user_id}, validated={self.is_validated})>"
