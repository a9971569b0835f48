"""UserRole aggregate for the access context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from access.domain.exceptions import SelfDemotionError
from access.domain.value_objects import PlatformRole, UserId


@dataclass
class UserRole:
    """The single platform role assigned to a user.

    At most one row exists per user; a user without one is a plain
    ``user``. Any role may change to any other, with one exception: a super
    admin cannot move themselves off ``super_admin``.
    """

    user_id: UserId
    role: PlatformRole
    created_at: datetime

    @classmethod
    def default_for(cls, user_id: UserId) -> UserRole:
        """Role implied for a user with no assignment."""
        return cls(user_id=user_id, role=PlatformRole.USER, created_at=datetime.now(UTC))

    def change_to(self, new_role: PlatformRole, actor_id: UserId) -> PlatformRole:
        """Change the role on behalf of an actor.

        Args:
            new_role: Role to assign
            actor_id: User performing the change

        Returns:
            The previous role

        Raises:
            SelfDemotionError: If a super admin targets their own assignment
                with any role other than super_admin
        """
        if (
            actor_id == self.user_id
            and self.role == PlatformRole.SUPER_ADMIN
            and new_role != PlatformRole.SUPER_ADMIN
        ):
            raise SelfDemotionError(
                "You cannot remove your own super admin role"
            )
        old_role = self.role
        self.role = new_role
        return old_role


def sort_by_rank(roles: list[UserRole]) -> list[UserRole]:
    """Order role assignments highest role first, then by user id."""
    return sorted(roles, key=lambda r: (-r.role.rank, r.user_id.value))
