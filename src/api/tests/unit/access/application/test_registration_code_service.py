"""Unit tests for RegistrationCodeService."""

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from access.application.observability import RegistrationCodeServiceProbe
from access.application.services import AuditService, RegistrationCodeService
from access.application.value_objects import BulkCodeAction
from access.domain.aggregates import RegistrationCode
from access.domain.aggregates.registration_code import UnusableCode, ValidatedCode
from access.domain.exceptions import CodeUnusableError, ValidationError
from access.domain.value_objects import (
    AuditAction,
    CodeUnusableReason,
    RedemptionId,
    RegistrationCodeId,
    UserId,
)
from access.ports.exceptions import (
    DuplicateRegistrationCodeError,
    RedemptionNotFoundError,
    RegistrationCodeNotFoundError,
)
from access.ports.repositories import IRegistrationCodeRepository

ADMIN = UserId.from_string("admin-1")
NOW = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)


class InMemoryRegistrationCodeRepository:
    """Registration code store whose redeem is a single atomic step.

    Reads yield to the event loop so concurrent callers interleave between
    validation and redemption, the window in which a cap can be overrun.
    """

    def __init__(self, codes: Sequence[RegistrationCode] = ()):
        self.codes = {c.id: c for c in codes}
        self.redemptions: dict[RedemptionId, tuple[RegistrationCodeId, bool]] = {}

    async def save(self, code: RegistrationCode) -> None:
        if any(c.code == code.code and c.id != code.id for c in self.codes.values()):
            raise DuplicateRegistrationCodeError(code.code)
        self.codes[code.id] = code

    async def get_by_id(self, code_id):
        await asyncio.sleep(0)
        return self.codes.get(code_id)

    async def get_by_code(self, code):
        await asyncio.sleep(0)
        return next((c for c in self.codes.values() if c.code == code), None)

    async def list_all(self):
        return sorted(self.codes.values(), key=lambda c: c.created_at, reverse=True)

    async def set_active(self, code_ids, active):
        found = [i for i in code_ids if i in self.codes]
        for code_id in found:
            self.codes[code_id].is_active = active
        return found

    async def delete_many(self, code_ids):
        return [i for i in code_ids if self.codes.pop(i, None) is not None]

    async def redeem(self, code_id, user_id, now):
        code = self.codes.get(code_id)
        if code is None or not code.is_usable(now):
            return None
        code.current_uses += 1
        redemption_id = RedemptionId.generate()
        self.redemptions[redemption_id] = (code_id, False)
        return redemption_id

    async def release_redemption(self, redemption_id, now):
        record = self.redemptions.get(redemption_id)
        if record is None or record[1]:
            return None
        code_id, _ = record
        self.redemptions[redemption_id] = (code_id, True)
        code = self.codes.get(code_id)
        if code is not None and code.current_uses > 0:
            code.current_uses -= 1
        return code_id


def _code(code: str = "SPRING", **kwargs) -> RegistrationCode:
    registration_code = RegistrationCode.create(code=code, created_by=ADMIN, **kwargs)
    registration_code.created_at = NOW - timedelta(days=1)
    return registration_code


@pytest.fixture
def mock_audit():
    audit = Mock(spec=AuditService)
    audit.record = AsyncMock()
    return audit


@pytest.fixture
def mock_probe():
    return Mock(spec=RegistrationCodeServiceProbe)


@pytest.fixture
def repo():
    return InMemoryRegistrationCodeRepository()


@pytest.fixture
def code_service(mock_session, repo, mock_audit, mock_probe):
    return RegistrationCodeService(
        session=mock_session,
        code_repository=repo,
        audit=mock_audit,
        probe=mock_probe,
        clock=lambda: NOW,
    )


def test_in_memory_repository_satisfies_protocol():
    assert isinstance(InMemoryRegistrationCodeRepository(), IRegistrationCodeRepository)


class TestCreateAndUpdate:
    @pytest.mark.asyncio
    async def test_generates_code_when_omitted(self, code_service, repo, mock_audit):
        created = await code_service.create_code(ADMIN, max_uses=5)

        assert len(created.code) == 8
        assert created.id in repo.codes
        kwargs = mock_audit.record.await_args.kwargs
        assert kwargs["action"] == AuditAction.CREATED
        assert kwargs["details"]["code"] == created.code

    @pytest.mark.asyncio
    async def test_duplicate_code(self, code_service, repo, mock_probe, mock_audit):
        await repo.save(_code("TAKEN"))

        with pytest.raises(DuplicateRegistrationCodeError):
            await code_service.create_code(ADMIN, code="taken")

        mock_probe.duplicate_code.assert_called_once()
        mock_audit.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_audits_diff(self, code_service, repo, mock_audit):
        code = _code(max_uses=5)
        await repo.save(code)

        await code_service.update_code(ADMIN, code.id, max_uses=8)

        details = mock_audit.record.await_args.kwargs["details"]
        assert details == {"code": "SPRING", "changes": {"max_uses": {"from": 5, "to": 8}}}

    @pytest.mark.asyncio
    async def test_update_without_change_is_not_audited(
        self, code_service, repo, mock_audit
    ):
        code = _code(max_uses=5)
        await repo.save(code)

        await code_service.update_code(ADMIN, code.id, max_uses=5)

        mock_audit.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing_code(self, code_service):
        with pytest.raises(RegistrationCodeNotFoundError):
            await code_service.update_code(
                ADMIN, RegistrationCodeId.generate(), is_active=False
            )


class TestValidate:
    @pytest.mark.asyncio
    async def test_unknown_code(self, code_service):
        outcome = await code_service.validate("nope")

        assert outcome == UnusableCode(code="NOPE", reason=CodeUnusableReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_blank_code_is_not_found(self, code_service):
        outcome = await code_service.validate("  ")

        assert outcome.reason == CodeUnusableReason.NOT_FOUND

    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive(self, code_service, repo):
        code = _code()
        await repo.save(code)

        outcome = await code_service.validate(" spring ")

        assert outcome == ValidatedCode(code_id=code.id, code="SPRING")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("changes", "reason"),
        [
            ({"is_active": False}, CodeUnusableReason.INACTIVE),
            ({"expires_at": NOW}, CodeUnusableReason.EXPIRED),
            ({"current_uses": 2, "max_uses": 2}, CodeUnusableReason.EXHAUSTED),
        ],
    )
    async def test_unusable_reasons(self, code_service, repo, changes, reason):
        code = _code()
        for name, value in changes.items():
            setattr(code, name, value)
        await repo.save(code)

        outcome = await code_service.validate("SPRING")

        assert outcome.reason == reason

    @pytest.mark.asyncio
    async def test_validation_does_not_consume(self, code_service, repo):
        code = _code(max_uses=1)
        await repo.save(code)

        await code_service.validate("SPRING")
        await code_service.validate("SPRING")

        assert code.current_uses == 0


class TestRedeem:
    @pytest.mark.asyncio
    async def test_redeem_increments_and_audits(self, code_service, repo, mock_audit):
        code = _code(max_uses=2)
        await repo.save(code)
        user = UserId.from_string("user-9")

        redemption_id = await code_service.redeem("spring", user)

        assert code.current_uses == 1
        kwargs = mock_audit.record.await_args.kwargs
        assert kwargs["action"] == AuditAction.REDEEMED
        assert kwargs["actor_id"] == user
        assert kwargs["details"]["redemption_id"] == redemption_id.value

    @pytest.mark.asyncio
    async def test_exhausted_code_is_refused(self, code_service, repo, mock_audit):
        code = _code(max_uses=1)
        code.current_uses = 1
        await repo.save(code)

        with pytest.raises(CodeUnusableError) as exc_info:
            await code_service.redeem("SPRING", UserId.from_string("user-9"))

        assert exc_info.value.reason == CodeUnusableReason.EXHAUSTED
        mock_audit.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_redemptions_never_exceed_cap(self, code_service, repo):
        code = _code(max_uses=3)
        await repo.save(code)

        results = await asyncio.gather(
            *(
                code_service.redeem("SPRING", UserId.from_string(f"user-{i}"))
                for i in range(10)
            ),
            return_exceptions=True,
        )

        succeeded = [r for r in results if isinstance(r, RedemptionId)]
        refused = [r for r in results if isinstance(r, CodeUnusableError)]
        assert len(succeeded) == 3
        assert len(refused) == 7
        assert all(e.reason == CodeUnusableReason.EXHAUSTED for e in refused)
        assert code.current_uses == 3

    @pytest.mark.asyncio
    async def test_release_gives_use_back(self, code_service, repo, mock_audit):
        code = _code(max_uses=1)
        await repo.save(code)
        user = UserId.from_string("user-9")
        redemption_id = await code_service.redeem("SPRING", user)

        await code_service.release_redemption(redemption_id, user, reason="rollback")

        assert code.current_uses == 0
        kwargs = mock_audit.record.await_args.kwargs
        assert kwargs["action"] == AuditAction.REDEMPTION_RELEASED
        assert kwargs["details"] == {
            "redemption_id": redemption_id.value,
            "reason": "rollback",
        }

    @pytest.mark.asyncio
    async def test_release_twice_fails(self, code_service, repo):
        await repo.save(_code())
        user = UserId.from_string("user-9")
        redemption_id = await code_service.redeem("SPRING", user)
        await code_service.release_redemption(redemption_id, user, reason="rollback")

        with pytest.raises(RedemptionNotFoundError):
            await code_service.release_redemption(redemption_id, user, reason="again")


class TestBulk:
    @pytest.mark.asyncio
    async def test_bulk_deactivate_writes_one_entry(self, code_service, repo, mock_audit):
        codes = [_code(f"C{i}") for i in range(3)]
        for code in codes:
            await repo.save(code)
        ids = [c.id for c in codes]

        result = await code_service.bulk_set_active(ADMIN, ids + ids[:1], active=False)

        assert result.count == 3
        assert all(not c.is_active for c in codes)
        mock_audit.record.assert_awaited_once()
        kwargs = mock_audit.record.await_args.kwargs
        assert kwargs["action"] == AuditAction.BULK_DEACTIVATE
        assert kwargs["resource_id"] is None
        assert kwargs["details"] == {"count": 3, "code_ids": [i.value for i in ids]}

    @pytest.mark.asyncio
    async def test_bulk_delete_counts_only_existing(self, code_service, repo):
        code = _code()
        await repo.save(code)

        result = await code_service.apply_bulk_action(
            ADMIN, [code.id, RegistrationCodeId.generate()], BulkCodeAction.DELETE
        )

        assert result.count == 1
        assert repo.codes == {}

    @pytest.mark.asyncio
    async def test_empty_selection_is_rejected(self, code_service, mock_audit):
        with pytest.raises(ValidationError):
            await code_service.bulk_delete(ADMIN, [])

        mock_audit.record.assert_not_awaited()
