"""PostgreSQL implementation of IRegistrationCodeRepository.

Redemption is a single conditional UPDATE: the usability predicate and the
increment run as one statement, so the row lock serializes concurrent
redemptions and the cap holds without an application-level lock.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import RegistrationCode
from access.domain.value_objects import (
    RedemptionId,
    RegistrationCodeId,
    TenantId,
    UserId,
)
from access.infrastructure.models import (
    RegistrationCodeModel,
    RegistrationCodeRedemptionModel,
)
from access.infrastructure.observability import (
    DefaultRegistrationCodeRepositoryProbe,
    RegistrationCodeRepositoryProbe,
)
from access.ports.exceptions import DuplicateRegistrationCodeError
from access.ports.repositories import IRegistrationCodeRepository


class RegistrationCodeRepository(IRegistrationCodeRepository):
    """Repository for RegistrationCode aggregate persistence to PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: RegistrationCodeRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultRegistrationCodeRepositoryProbe()

    async def save(self, code: RegistrationCode) -> None:
        """Insert or update a code, leaving ``current_uses`` untouched.

        Raises:
            DuplicateRegistrationCodeError: If the code string already exists
        """
        stmt = select(RegistrationCodeModel).where(
            RegistrationCodeModel.id == code.id.value
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = RegistrationCodeModel(
                id=code.id.value,
                code=code.code,
                created_by=code.created_by.value if code.created_by else None,
                current_uses=0,
                created_at=code.created_at,
            )
            self._session.add(model)

        model.tenant_id = code.tenant_id.value if code.tenant_id else None
        model.description = code.description
        model.max_uses = code.max_uses
        model.is_active = code.is_active
        model.expires_at = code.expires_at

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "ix_registration_codes_code" in str(e):
                self._probe.duplicate_code(code.code)
                raise DuplicateRegistrationCodeError(
                    f"Registration code '{code.code}' already exists"
                ) from e
            raise

        self._probe.code_saved(code.id.value)

    async def get_by_id(self, code_id: RegistrationCodeId) -> RegistrationCode | None:
        stmt = select(RegistrationCodeModel).where(
            RegistrationCodeModel.id == code_id.value
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_by_code(self, code: str) -> RegistrationCode | None:
        stmt = select(RegistrationCodeModel).where(
            func.upper(RegistrationCodeModel.code) == code.strip().upper()
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_all(self) -> list[RegistrationCode]:
        stmt = select(RegistrationCodeModel).order_by(
            RegistrationCodeModel.created_at.desc()
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def set_active(
        self, code_ids: Sequence[RegistrationCodeId], active: bool
    ) -> list[RegistrationCodeId]:
        if not code_ids:
            return []
        stmt = (
            update(RegistrationCodeModel)
            .where(RegistrationCodeModel.id.in_([c.value for c in code_ids]))
            .values(is_active=active, updated_at=func.now())
            .returning(RegistrationCodeModel.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return _in_request_order(code_ids, result.scalars().all())

    async def delete_many(
        self, code_ids: Sequence[RegistrationCodeId]
    ) -> list[RegistrationCodeId]:
        if not code_ids:
            return []
        stmt = (
            delete(RegistrationCodeModel)
            .where(RegistrationCodeModel.id.in_([c.value for c in code_ids]))
            .returning(RegistrationCodeModel.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return _in_request_order(code_ids, result.scalars().all())

    async def redeem(
        self, code_id: RegistrationCodeId, user_id: UserId, now: datetime
    ) -> RedemptionId | None:
        """Increment ``current_uses`` only while the code is usable at ``now``.

        Returns:
            ID of the new redemption row, or None if no row matched
        """
        stmt = (
            update(RegistrationCodeModel)
            .where(
                RegistrationCodeModel.id == code_id.value,
                RegistrationCodeModel.is_active.is_(True),
                or_(
                    RegistrationCodeModel.expires_at.is_(None),
                    RegistrationCodeModel.expires_at > now,
                ),
                or_(
                    RegistrationCodeModel.max_uses.is_(None),
                    RegistrationCodeModel.current_uses < RegistrationCodeModel.max_uses,
                ),
            )
            .values(current_uses=RegistrationCodeModel.current_uses + 1)
            .returning(RegistrationCodeModel.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is None:
            self._probe.redemption_not_applied(code_id.value)
            return None

        redemption_id = RedemptionId.generate()
        self._session.add(
            RegistrationCodeRedemptionModel(
                id=redemption_id.value,
                code_id=code_id.value,
                user_id=user_id.value,
                redeemed_at=now,
            )
        )
        await self._session.flush()
        self._probe.redemption_recorded(code_id.value, redemption_id.value)
        return redemption_id

    async def release_redemption(
        self, redemption_id: RedemptionId, now: datetime
    ) -> RegistrationCodeId | None:
        stmt = (
            update(RegistrationCodeRedemptionModel)
            .where(
                RegistrationCodeRedemptionModel.id == redemption_id.value,
                RegistrationCodeRedemptionModel.released_at.is_(None),
            )
            .values(released_at=now)
            .returning(RegistrationCodeRedemptionModel.code_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        code_id = result.scalar_one_or_none()
        if code_id is None:
            return None

        await self._session.execute(
            update(RegistrationCodeModel)
            .where(
                RegistrationCodeModel.id == code_id,
                RegistrationCodeModel.current_uses > 0,
            )
            .values(current_uses=RegistrationCodeModel.current_uses - 1)
            .execution_options(synchronize_session=False)
        )
        self._probe.redemption_released(redemption_id.value, code_id)
        return RegistrationCodeId(value=code_id)

    def _to_domain(self, model: RegistrationCodeModel) -> RegistrationCode:
        """Convert SQLAlchemy model to domain aggregate."""
        return RegistrationCode(
            id=RegistrationCodeId(value=model.id),
            code=model.code,
            created_at=model.created_at,
            tenant_id=TenantId(value=model.tenant_id) if model.tenant_id else None,
            created_by=UserId(value=model.created_by) if model.created_by else None,
            description=model.description,
            max_uses=model.max_uses,
            current_uses=model.current_uses,
            is_active=model.is_active,
            expires_at=model.expires_at,
        )


def _in_request_order(
    requested: Sequence[RegistrationCodeId], matched: Sequence[str]
) -> list[RegistrationCodeId]:
    found = set(matched)
    return [code_id for code_id in requested if code_id.value in found]
