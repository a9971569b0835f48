"""PostgreSQL implementation of IProfileRepository."""

from __future__ import annotations

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.onboarding import Address, UserProfile
from access.domain.value_objects import (
    RedemptionId,
    RegistrationCodeId,
    TenantId,
    UserId,
)
from access.infrastructure.models import UserAddressModel
from access.ports.repositories import IProfileRepository


class ProfileRepository(IProfileRepository):
    """Stores onboarding profiles in user_addresses, one row per user."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_user(self, user_id: UserId) -> UserProfile | None:
        model = await self._session.get(UserAddressModel, user_id.value)
        return self._to_domain(model) if model else None

    async def upsert(self, profile: UserProfile) -> None:
        """Insert the profile, replacing any existing row for the user."""
        values = {
            "user_id": profile.user_id.value,
            "full_name": profile.full_name,
            "discord_id": profile.discord_id,
            "street_address": profile.address.street,
            "city": profile.address.city,
            "state": profile.address.state,
            "zip_code": profile.address.zip_code,
            "is_validated": profile.is_validated,
            "validation_payload": dict(profile.validation_payload),
            "override_code_id": profile.override_code_id.value
            if profile.override_code_id
            else None,
            "redemption_id": profile.redemption_id.value
            if profile.redemption_id
            else None,
            "tenant_id": profile.tenant_id.value if profile.tenant_id else None,
            "created_at": profile.created_at,
            "updated_at": profile.created_at,
        }
        updatable = {k: v for k, v in values.items() if k not in ("user_id", "created_at")}
        stmt = (
            insert(UserAddressModel)
            .values(**values)
            .on_conflict_do_update(index_elements=["user_id"], set_=updatable)
        )
        await self._session.execute(stmt)

    def _to_domain(self, model: UserAddressModel) -> UserProfile:
        return UserProfile(
            user_id=UserId(value=model.user_id),
            full_name=model.full_name,
            address=Address(
                street=model.street_address,
                city=model.city,
                state=model.state,
                zip_code=model.zip_code,
            ),
            is_validated=model.is_validated,
            created_at=model.created_at,
            discord_id=model.discord_id,
            validation_payload=dict(model.validation_payload or {}),
            override_code_id=RegistrationCodeId(value=model.override_code_id)
            if model.override_code_id
            else None,
            redemption_id=RedemptionId(value=model.redemption_id)
            if model.redemption_id
            else None,
            tenant_id=TenantId(value=model.tenant_id) if model.tenant_id else None,
        )
