"""SQLAlchemy ORM model for the user_roles table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserRoleModel(Base, TimestampMixin):
    """ORM model for user_roles table.

    At most one row per user. A user without a row has the ``user`` role.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserRoleModel(user_id={self.user_id}, role={self.role})>"
