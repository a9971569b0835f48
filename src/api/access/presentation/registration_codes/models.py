"""Pydantic models for registration code API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from access.application.value_objects import BulkCodeAction, BulkResult
from access.domain.aggregates import RegistrationCode
from access.domain.aggregates.registration_code import CodeValidation, ValidatedCode


class CreateCodeRequest(BaseModel):
    """Request model for creating a code. A code is generated when omitted."""

    code: str | None = Field(default=None, description="Code string; uppercased")
    tenant_id: str | None = Field(default=None, description="Tenant the code grants")
    description: str | None = None
    max_uses: int | None = Field(default=None, description="Usage cap; null is unlimited")
    expires_at: datetime | None = Field(
        default=None, description="Expiry instant; the code is expired at this instant"
    )


class UpdateCodeRequest(BaseModel):
    """Request model for editing a code. Only sent fields are changed."""

    tenant_id: str | None = None
    description: str | None = None
    max_uses: int | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None


class CodeRequest(BaseModel):
    """A code string to validate or redeem."""

    code: str = Field(..., min_length=1)


class BulkCodeRequest(BaseModel):
    action: BulkCodeAction
    code_ids: list[str] = Field(default_factory=list)


class RegistrationCodeResponse(BaseModel):
    """Response model for a registration code with its derived status."""

    id: str = Field(..., description="Code ID (ULID format)")
    code: str
    tenant_id: str | None
    description: str | None
    max_uses: int | None
    current_uses: int
    is_active: bool
    expires_at: datetime | None
    status: str = Field(..., description="active, inactive, expired or exhausted")
    created_by: str | None
    created_at: datetime

    @classmethod
    def from_domain(
        cls, registration_code: RegistrationCode, now: datetime
    ) -> RegistrationCodeResponse:
        return cls(
            id=registration_code.id.value,
            code=registration_code.code,
            tenant_id=(
                registration_code.tenant_id.value
                if registration_code.tenant_id
                else None
            ),
            description=registration_code.description,
            max_uses=registration_code.max_uses,
            current_uses=registration_code.current_uses,
            is_active=registration_code.is_active,
            expires_at=registration_code.expires_at,
            status=registration_code.status(now).value,
            created_by=(
                registration_code.created_by.value
                if registration_code.created_by
                else None
            ),
            created_at=registration_code.created_at,
        )


class GeneratedCodeResponse(BaseModel):
    code: str


class CodeValidationResponse(BaseModel):
    """Outcome of checking a code. ``reason`` is set when it is not usable."""

    valid: bool
    code: str
    code_id: str | None = None
    tenant_id: str | None = None
    reason: str | None = None

    @classmethod
    def from_domain(cls, validation: CodeValidation) -> CodeValidationResponse:
        if isinstance(validation, ValidatedCode):
            return cls(
                valid=True,
                code=validation.code,
                code_id=validation.code_id.value,
                tenant_id=validation.tenant_id.value if validation.tenant_id else None,
            )
        return cls(valid=False, code=validation.code, reason=validation.reason.value)


class RedemptionResponse(BaseModel):
    redemption_id: str


class BulkResultResponse(BaseModel):
    """How many of the selected codes the action affected."""

    action: BulkCodeAction
    count: int
    code_ids: list[str]

    @classmethod
    def from_domain(cls, result: BulkResult) -> BulkResultResponse:
        return cls(
            action=result.action,
            count=result.count,
            code_ids=[code_id.value for code_id in result.code_ids],
        )
