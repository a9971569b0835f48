"""Service providers for the access bounded context.

Repositories and services share the request's session through FastAPI
dependency caching.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultAuditServiceProbe,
    DefaultOnboardingServiceProbe,
    DefaultRegistrationCodeServiceProbe,
    DefaultRoleServiceProbe,
    DefaultTenantServiceProbe,
)
from access.application.services import (
    AuditService,
    OnboardingService,
    RegistrationCodeService,
    RoleService,
    TenantService,
)
from access.dependencies.user import get_observation_context
from access.infrastructure import (
    AuditLogRepository,
    ProfileRepository,
    RegistrationCodeRepository,
    SmartyAddressValidator,
    TenantRepository,
    UserRoleRepository,
)
from access.ports.address_validation import IAddressValidator
from infrastructure.database.dependencies import get_session
from infrastructure.settings import (
    AccessSettings,
    get_access_settings,
    get_address_validation_settings,
)
from shared_kernel.observability_context import ObservationContext

Session = Annotated[AsyncSession, Depends(get_session)]
Context = Annotated[ObservationContext, Depends(get_observation_context)]
Settings = Annotated[AccessSettings, Depends(get_access_settings)]


def get_address_validator() -> IAddressValidator:
    """Get the address validator configured from Smarty settings."""
    settings = get_address_validation_settings()
    return SmartyAddressValidator(
        base_url=settings.base_url,
        auth_id=settings.auth_id,
        auth_token=settings.auth_token.get_secret_value(),
        timeout=settings.timeout_seconds,
    )


def get_audit_service(
    session: Session, context: Context, settings: Settings
) -> AuditService:
    return AuditService(
        session=session,
        audit_repository=AuditLogRepository(session),
        probe=DefaultAuditServiceProbe().with_context(context),
        retention_days=settings.audit_retention_days,
        purge_confirmation=settings.purge_confirmation,
    )


def get_tenant_service(
    session: Session,
    context: Context,
    settings: Settings,
    audit: Annotated[AuditService, Depends(get_audit_service)],
) -> TenantService:
    return TenantService(
        session=session,
        tenant_repository=TenantRepository(session),
        audit=audit,
        probe=DefaultTenantServiceProbe().with_context(context),
        max_depth=settings.max_hierarchy_depth,
    )


def get_registration_code_service(
    session: Session,
    context: Context,
    settings: Settings,
    audit: Annotated[AuditService, Depends(get_audit_service)],
) -> RegistrationCodeService:
    return RegistrationCodeService(
        session=session,
        code_repository=RegistrationCodeRepository(session),
        audit=audit,
        probe=DefaultRegistrationCodeServiceProbe().with_context(context),
        code_length=settings.code_length,
    )


def get_role_service(
    session: Session,
    context: Context,
    audit: Annotated[AuditService, Depends(get_audit_service)],
) -> RoleService:
    return RoleService(
        session=session,
        role_repository=UserRoleRepository(session),
        audit=audit,
        probe=DefaultRoleServiceProbe().with_context(context),
    )


def get_onboarding_service(
    session: Session,
    context: Context,
    codes: Annotated[RegistrationCodeService, Depends(get_registration_code_service)],
    address_validator: Annotated[IAddressValidator, Depends(get_address_validator)],
) -> OnboardingService:
    return OnboardingService(
        session=session,
        profile_repository=ProfileRepository(session),
        codes=codes,
        address_validator=address_validator,
        probe=DefaultOnboardingServiceProbe().with_context(context),
    )
