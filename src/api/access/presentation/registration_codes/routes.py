"""HTTP routes for registration codes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status

from access.application.services import RegistrationCodeService
from access.application.value_objects import CurrentUser
from access.dependencies.services import get_registration_code_service
from access.dependencies.user import get_current_user, require_admin
from access.domain.exceptions import AccessError
from access.domain.value_objects import RegistrationCodeId, TenantId
from access.presentation.errors import invalid_id, to_http_exception
from access.presentation.registration_codes.models import (
    BulkCodeRequest,
    BulkResultResponse,
    CodeRequest,
    CodeValidationResponse,
    CreateCodeRequest,
    GeneratedCodeResponse,
    RedemptionResponse,
    RegistrationCodeResponse,
    UpdateCodeRequest,
)

router = APIRouter(
    prefix="/registration-codes",
    tags=["registration-codes"],
)

Service = Annotated[RegistrationCodeService, Depends(get_registration_code_service)]


def _code_id(value: str) -> RegistrationCodeId:
    try:
        return RegistrationCodeId.from_string(value)
    except ValueError as e:
        raise invalid_id("registration code", e) from e


def _tenant_id(value: str | None) -> TenantId | None:
    if not value:
        return None
    try:
        return TenantId.from_string(value)
    except ValueError as e:
        raise invalid_id("tenant", e) from e


@router.get("")
async def list_codes(
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> list[RegistrationCodeResponse]:
    """List every code, newest first, with its status derived now."""
    try:
        codes = await service.list_codes()
    except AccessError as e:
        raise to_http_exception(e) from e
    now = datetime.now(UTC)
    return [RegistrationCodeResponse.from_domain(c, now) for c in codes]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_code(
    request: CreateCodeRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> RegistrationCodeResponse:
    """Create a registration code.

    Raises:
        HTTPException: 409 if the code string already exists
        HTTPException: 422 if max_uses is below 1
    """
    try:
        registration_code = await service.create_code(
            current_user.user_id,
            code=request.code,
            tenant_id=_tenant_id(request.tenant_id),
            description=request.description,
            max_uses=request.max_uses,
            expires_at=request.expires_at,
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return RegistrationCodeResponse.from_domain(registration_code, datetime.now(UTC))


@router.post("/generate")
async def generate_code(
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> GeneratedCodeResponse:
    """Suggest a code for the create form. Nothing is stored."""
    return GeneratedCodeResponse(code=service.generate_candidate())


@router.post("/validate")
async def validate_code(
    request: CodeRequest,
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> CodeValidationResponse:
    """Check a code without consuming it. An unusable code is not an error."""
    try:
        validation = await service.validate(request.code)
    except AccessError as e:
        raise to_http_exception(e) from e
    return CodeValidationResponse.from_domain(validation)


@router.post("/redeem")
async def redeem_code(
    request: CodeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> RedemptionResponse:
    """Consume one use of a code.

    Raises:
        HTTPException: 409 with the reason if the code cannot be redeemed
    """
    try:
        redemption_id = await service.redeem(request.code, current_user.user_id)
    except AccessError as e:
        raise to_http_exception(e) from e
    return RedemptionResponse(redemption_id=redemption_id.value)


@router.post("/bulk")
async def bulk_action(
    request: BulkCodeRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> BulkResultResponse:
    """Activate, deactivate or delete the selected codes."""
    code_ids = [_code_id(value) for value in request.code_ids]
    try:
        result = await service.apply_bulk_action(
            current_user.user_id, code_ids, request.action
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return BulkResultResponse.from_domain(result)


@router.patch("/{code_id}")
async def update_code(
    code_id: str,
    request: UpdateCodeRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> RegistrationCodeResponse:
    """Edit a code. Omitted fields are left alone.

    Raises:
        HTTPException: 404 if the code does not exist
        HTTPException: 422 if the new cap is below the current use count
    """
    changes = request.model_dump(exclude_unset=True)
    if "tenant_id" in changes:
        changes["tenant_id"] = _tenant_id(changes["tenant_id"])
    if changes.get("is_active", True) is None:
        del changes["is_active"]
    try:
        registration_code = await service.update_code(
            current_user.user_id, _code_id(code_id), **changes
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return RegistrationCodeResponse.from_domain(registration_code, datetime.now(UTC))
