"""SQLAlchemy ORM model for the tenants table."""

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
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table.

    Notes:
    - parent_tenant_id references tenants.id with RESTRICT delete; a tenant
      with children cannot be removed
    - slug is globally unique (ix_tenants_slug)
    - owner_id and reviewed_by hold external user ids, not foreign keys
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_tenant_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    hierarchy_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    brand_color: Mapped[str] = mapped_column(String(7), nullable=False)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    game_titles: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=list
    )
    approval_status: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reviewer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_tenants_slug", "slug", unique=True),
        CheckConstraint("hierarchy_level >= 0", name="ck_tenants_level"),
        CheckConstraint(
            "parent_tenant_id IS NULL OR parent_tenant_id <> id",
            name="ck_tenants_not_own_parent",
        ),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, slug={self.slug}, parent={self.parent_tenant_id})>"
