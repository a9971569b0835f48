"""HTTP routes for the onboarding flow."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from access.application.services import OnboardingService
from access.application.value_objects import CurrentUser
from access.dependencies.services import get_onboarding_service
from access.dependencies.user import get_current_user
from access.domain.exceptions import AccessError
from access.presentation.errors import to_http_exception
from access.presentation.onboarding.models import (
    AddressModel,
    AddressValidationResponse,
    CompleteOnboardingRequest,
    OnboardingSessionResponse,
    OverrideCodeRequest,
)
from access.presentation.registration_codes.models import CodeValidationResponse

router = APIRouter(
    prefix="/onboarding",
    tags=["onboarding"],
)

Service = Annotated[OnboardingService, Depends(get_onboarding_service)]
User = Annotated[CurrentUser, Depends(get_current_user)]


@router.get("/status")
async def get_status(current_user: User, service: Service) -> OnboardingSessionResponse:
    """Where the caller starts: a fresh session, or success if already onboarded."""
    try:
        session = await service.status(current_user.user_id)
    except AccessError as e:
        raise to_http_exception(e) from e
    return OnboardingSessionResponse.from_domain(session)


@router.post("/address/validate")
async def validate_address(
    request: AddressModel, current_user: User, service: Service
) -> AddressValidationResponse:
    """Verify an address. An unreachable service is reported, not raised."""
    try:
        result = await service.validate_address(current_user.user_id, request.to_domain())
    except AccessError as e:
        raise to_http_exception(e) from e
    return AddressValidationResponse.from_domain(result)


@router.post("/override-code/validate")
async def validate_override_code(
    request: OverrideCodeRequest, _: User, service: Service
) -> CodeValidationResponse:
    try:
        validation = await service.check_override_code(request.code)
    except AccessError as e:
        raise to_http_exception(e) from e
    return CodeValidationResponse.from_domain(validation)


@router.post("/complete")
async def complete_onboarding(
    request: CompleteOnboardingRequest, current_user: User, service: Service
) -> OnboardingSessionResponse:
    """Submit the form and finish onboarding.

    A session still at the address step with ``error`` set is a normal
    response: the user can correct the address or continue anyway.

    Raises:
        HTTPException: 422 if a name or address field is invalid
    """
    try:
        session = await service.complete(current_user.user_id, request.to_submission())
    except AccessError as e:
        raise to_http_exception(e) from e
    return OnboardingSessionResponse.from_domain(session)
