"""Translation of access-context errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from access.domain.exceptions import (
    AccessError,
    CodeUnusableError,
    CycleError,
    InvalidOnboardingTransitionError,
    SelfDemotionError,
    ValidationError,
)
from access.ports.exceptions import (
    AddressServiceUnavailableError,
    ConfirmationMismatchError,
    DuplicateRegistrationCodeError,
    DuplicateTenantSlugError,
    PersistenceError,
    RedemptionNotFoundError,
    RegistrationCodeNotFoundError,
    TenantHasChildrenError,
    TenantNotFoundError,
    UnauthorizedError,
)

_STATUS_BY_ERROR: tuple[tuple[type[AccessError], int], ...] = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (CycleError, status.HTTP_409_CONFLICT),
    (SelfDemotionError, status.HTTP_409_CONFLICT),
    (DuplicateTenantSlugError, status.HTTP_409_CONFLICT),
    (DuplicateRegistrationCodeError, status.HTTP_409_CONFLICT),
    (TenantHasChildrenError, status.HTTP_409_CONFLICT),
    (InvalidOnboardingTransitionError, status.HTTP_409_CONFLICT),
    (TenantNotFoundError, status.HTTP_404_NOT_FOUND),
    (RegistrationCodeNotFoundError, status.HTTP_404_NOT_FOUND),
    (RedemptionNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfirmationMismatchError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (AddressServiceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

PERSISTENCE_FAILED_DETAIL = "The service is temporarily unavailable. Please retry."


def to_http_exception(error: AccessError) -> HTTPException:
    """Map an access-context error to the HTTPException a route should raise.

    Persistence failures are reported with a generic message; their cause
    has already been logged by the service probe.
    """
    if isinstance(error, PersistenceError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=PERSISTENCE_FAILED_DETAIL,
        )
    if isinstance(error, CodeUnusableError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"reason": error.reason.value, "message": str(error)},
        )
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": error.field, "message": error.message},
        )
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def invalid_id(kind: str, error: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Invalid {kind} ID format: {error}",
    )
