"""Registration code application service for the access bounded context.

Handles the code lifecycle: creation, editing, validation, redemption under
a usage cap, bulk activation/deactivation/deletion, and the compensating
release of a redemption.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultRegistrationCodeServiceProbe,
    RegistrationCodeServiceProbe,
)
from access.application.services.audit_service import AuditService
from access.application.value_objects import BulkCodeAction, BulkResult
from access.domain.aggregates import RegistrationCode
from access.domain.aggregates.registration_code import (
    DEFAULT_CODE_LENGTH,
    CodeValidation,
    UnusableCode,
    ValidatedCode,
    generate_code,
    normalize_code,
)
from access.domain.exceptions import CodeUnusableError, ValidationError
from access.domain.value_objects import (
    AuditAction,
    AuditResourceType,
    CodeStatus,
    CodeUnusableReason,
    RedemptionId,
    RegistrationCodeId,
    TenantId,
    UserId,
)
from access.ports.exceptions import (
    DuplicateRegistrationCodeError,
    PersistenceError,
    RedemptionNotFoundError,
    RegistrationCodeNotFoundError,
)
from access.ports.repositories import IRegistrationCodeRepository

_UNUSABLE_REASONS = {
    CodeStatus.INACTIVE: CodeUnusableReason.INACTIVE,
    CodeStatus.EXPIRED: CodeUnusableReason.EXPIRED,
    CodeStatus.EXHAUSTED: CodeUnusableReason.EXHAUSTED,
}


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RegistrationCodeService:
    """Application service for registration codes.

    Validation is read-only and reports one of five outcomes. Redemption
    re-validates, then consumes a use through the repository's atomic
    conditional update; a race lost between the two is reported as
    ``exhausted`` just like a code that was already used up.
    """

    def __init__(
        self,
        session: AsyncSession,
        code_repository: IRegistrationCodeRepository,
        audit: AuditService,
        probe: RegistrationCodeServiceProbe | None = None,
        code_length: int = DEFAULT_CODE_LENGTH,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize RegistrationCodeService with dependencies.

        Args:
            session: Database session for transaction management
            code_repository: Repository for code persistence and redemption
            audit: Audit writer for privileged mutations
            probe: Optional domain probe for observability
            code_length: Length of generated candidate codes
            clock: Source of the current time
        """
        self._session = session
        self._code_repository = code_repository
        self._audit = audit
        self._probe = probe or DefaultRegistrationCodeServiceProbe()
        self._code_length = code_length
        self._clock = clock

    def generate_candidate(self) -> str:
        """Generate a random code from the unambiguous alphabet."""
        return generate_code(self._code_length)

    async def create_code(
        self,
        actor_id: UserId,
        code: str | None = None,
        tenant_id: TenantId | None = None,
        description: str | None = None,
        max_uses: int | None = None,
        expires_at: datetime | None = None,
    ) -> RegistrationCode:
        """Create a code. A candidate is generated when ``code`` is omitted.

        Raises:
            ValidationError: If max_uses is below 1
            DuplicateRegistrationCodeError: If the code string already exists
            PersistenceError: If the database fails
        """
        registration_code = RegistrationCode.create(
            code=code or self.generate_candidate(),
            created_by=actor_id,
            tenant_id=tenant_id,
            description=description,
            max_uses=max_uses,
            expires_at=expires_at,
        )
        try:
            async with self._session.begin():
                await self._code_repository.save(registration_code)
        except DuplicateRegistrationCodeError:
            self._probe.duplicate_code()
            raise
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="create_code", error=str(e))
            raise PersistenceError("Failed to create registration code") from e

        self._probe.code_created(
            code_id=registration_code.id.value, max_uses=registration_code.max_uses
        )
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.CREATED,
            resource_type=AuditResourceType.REGISTRATION_CODE,
            resource_id=registration_code.id.value,
            details=registration_code.as_audit_details(),
        )
        return registration_code

    async def update_code(
        self,
        actor_id: UserId,
        code_id: RegistrationCodeId,
        **changes: Any,
    ) -> RegistrationCode:
        """Edit a code's description, tenant scope, cap, expiry or active flag.

        No audit entry is written when nothing changed.

        Raises:
            RegistrationCodeNotFoundError: If the code does not exist
            ValidationError: If the new cap is below the current use count
            PersistenceError: If the database fails
        """
        try:
            async with self._session.begin():
                registration_code = await self._code_repository.get_by_id(code_id)
                if registration_code is None:
                    raise RegistrationCodeNotFoundError(
                        f"Registration code {code_id} not found"
                    )
                diff = registration_code.update(**changes)
                if diff:
                    await self._code_repository.save(registration_code)
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="update_code", error=str(e))
            raise PersistenceError("Failed to update registration code") from e

        if diff:
            self._probe.code_updated(code_id=code_id.value, fields=sorted(diff))
            await self._audit.record(
                actor_id=actor_id,
                action=AuditAction.UPDATED,
                resource_type=AuditResourceType.REGISTRATION_CODE,
                resource_id=code_id.value,
                details={"code": registration_code.code, "changes": diff},
            )
        return registration_code

    async def list_codes(self) -> list[RegistrationCode]:
        """List every code, newest first."""
        async with self._session.begin():
            return await self._code_repository.list_all()

    async def validate(self, code: str) -> CodeValidation:
        """Check whether a code can be redeemed right now. Never mutates state.

        Returns:
            ValidatedCode, or UnusableCode with reason not_found, inactive,
            expired or exhausted
        """
        normalized = normalize_code(code)
        registration_code = None
        if normalized:
            async with self._session.begin():
                registration_code = await self._code_repository.get_by_code(normalized)

        outcome = self._classify(normalized, registration_code)
        self._probe.code_validated(
            code_id=registration_code.id.value if registration_code else None,
            outcome=_outcome_name(outcome),
        )
        return outcome

    async def redeem(self, code: str, user_id: UserId) -> RedemptionId:
        """Consume one use of a code on behalf of a user.

        Returns:
            ID of the redemption record

        Raises:
            CodeUnusableError: If the code is unknown, inactive, expired or
                exhausted, including when another redemption took the last use
            PersistenceError: If the database fails
        """
        outcome = await self.validate(code)
        if isinstance(outcome, UnusableCode):
            self._probe.redemption_refused(
                code_id=None, user_id=user_id.value, reason=outcome.reason.value
            )
            raise CodeUnusableError(outcome.reason)

        try:
            async with self._session.begin():
                redemption_id = await self._code_repository.redeem(
                    outcome.code_id, user_id, self._clock()
                )
                if redemption_id is None:
                    reason = await self._lost_race_reason(outcome.code_id)
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="redeem", error=str(e))
            raise PersistenceError("Failed to redeem registration code") from e

        if redemption_id is None:
            self._probe.redemption_refused(
                code_id=outcome.code_id.value, user_id=user_id.value, reason=reason.value
            )
            raise CodeUnusableError(reason)

        self._probe.code_redeemed(
            code_id=outcome.code_id.value,
            redemption_id=redemption_id.value,
            user_id=user_id.value,
        )
        await self._audit.record(
            actor_id=user_id,
            action=AuditAction.REDEEMED,
            resource_type=AuditResourceType.REGISTRATION_CODE,
            resource_id=outcome.code_id.value,
            details={
                "code": outcome.code,
                "user_id": user_id.value,
                "redemption_id": redemption_id.value,
            },
        )
        return redemption_id

    async def release_redemption(
        self,
        redemption_id: RedemptionId,
        actor_id: UserId,
        reason: str,
    ) -> RegistrationCodeId:
        """Give back the use consumed by a redemption.

        Used to compensate when the step that followed a redemption failed.

        Raises:
            RedemptionNotFoundError: If the redemption is unknown or already released
            PersistenceError: If the database fails
        """
        try:
            async with self._session.begin():
                code_id = await self._code_repository.release_redemption(
                    redemption_id, self._clock()
                )
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="release_redemption", error=str(e))
            raise PersistenceError("Failed to release redemption") from e

        if code_id is None:
            raise RedemptionNotFoundError(f"Redemption {redemption_id} not found")

        self._probe.redemption_released(
            redemption_id=redemption_id.value, code_id=code_id.value
        )
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.REDEMPTION_RELEASED,
            resource_type=AuditResourceType.REGISTRATION_CODE,
            resource_id=code_id.value,
            details={"redemption_id": redemption_id.value, "reason": reason},
        )
        return code_id

    async def bulk_set_active(
        self,
        actor_id: UserId,
        code_ids: Sequence[RegistrationCodeId],
        active: bool,
    ) -> BulkResult:
        """Activate or deactivate many codes, with one audit entry for the batch."""
        action = BulkCodeAction.ACTIVATE if active else BulkCodeAction.DEACTIVATE
        return await self.apply_bulk_action(actor_id, code_ids, action)

    async def bulk_delete(
        self,
        actor_id: UserId,
        code_ids: Sequence[RegistrationCodeId],
    ) -> BulkResult:
        """Delete many codes, with one audit entry for the batch."""
        return await self.apply_bulk_action(actor_id, code_ids, BulkCodeAction.DELETE)

    async def apply_bulk_action(
        self,
        actor_id: UserId,
        code_ids: Sequence[RegistrationCodeId],
        action: BulkCodeAction,
    ) -> BulkResult:
        """Apply one lifecycle transition to a selection of codes.

        Raises:
            ValidationError: If no codes were selected
            PersistenceError: If the database fails
        """
        unique_ids = list(dict.fromkeys(code_ids))
        if not unique_ids:
            raise ValidationError("code_ids", "Select at least one code")

        try:
            async with self._session.begin():
                if action == BulkCodeAction.DELETE:
                    affected = await self._code_repository.delete_many(unique_ids)
                else:
                    affected = await self._code_repository.set_active(
                        unique_ids, action == BulkCodeAction.ACTIVATE
                    )
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation=f"bulk_{action.value}", error=str(e))
            raise PersistenceError("Failed to update registration codes") from e

        self._probe.bulk_action_applied(
            action=action.value, requested=len(unique_ids), affected=len(affected)
        )
        await self._audit.record(
            actor_id=actor_id,
            action=action.audit_action,
            resource_type=AuditResourceType.REGISTRATION_CODE,
            resource_id=None,
            details={
                "count": len(affected),
                "code_ids": [code_id.value for code_id in affected],
            },
        )
        return BulkResult(action=action, count=len(affected), code_ids=affected)

    def _classify(
        self, normalized: str, registration_code: RegistrationCode | None
    ) -> CodeValidation:
        if registration_code is None:
            return UnusableCode(code=normalized, reason=CodeUnusableReason.NOT_FOUND)
        status = registration_code.status(self._clock())
        if status != CodeStatus.ACTIVE:
            return UnusableCode(code=registration_code.code, reason=_UNUSABLE_REASONS[status])
        return ValidatedCode(
            code_id=registration_code.id,
            code=registration_code.code,
            tenant_id=registration_code.tenant_id,
        )

    async def _lost_race_reason(self, code_id: RegistrationCodeId) -> CodeUnusableReason:
        """Work out why the conditional update matched nothing.

        A code still reported as usable lost to a concurrent redemption, so
        it counts as exhausted.
        """
        current = await self._code_repository.get_by_id(code_id)
        if current is None:
            return CodeUnusableReason.NOT_FOUND
        return _UNUSABLE_REASONS.get(
            current.status(self._clock()), CodeUnusableReason.EXHAUSTED
        )


def _outcome_name(outcome: CodeValidation) -> str:
    if isinstance(outcome, UnusableCode):
        return outcome.reason.value
    return "valid"
