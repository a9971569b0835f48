"""HTTP routes for tenant management and the tenant hierarchy."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from access.application.services import TenantService
from access.application.value_objects import CurrentUser, TenantInput
from access.dependencies.services import get_tenant_service
from access.dependencies.user import get_current_user, require_admin
from access.domain.exceptions import AccessError
from access.domain.value_objects import ApprovalStatus, TenantId
from access.presentation.errors import invalid_id, to_http_exception
from access.presentation.tenants.models import (
    PendingCountResponse,
    ReviewTenantRequest,
    SetParentRequest,
    TenantNodeResponse,
    TenantPatchRequest,
    TenantRequest,
    TenantResponse,
    patch_fields,
)

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)

Service = Annotated[TenantService, Depends(get_tenant_service)]


def _tenant_id(value: str) -> TenantId:
    try:
        return TenantId.from_string(value)
    except ValueError as e:
        raise invalid_id("tenant", e) from e


def _optional_tenant_id(value: str | None) -> TenantId | None:
    return _tenant_id(value) if value else None


def _to_input(request: TenantRequest) -> TenantInput:
    return TenantInput(
        name=request.name,
        slug=request.slug,
        parent_id=_optional_tenant_id(request.parent_id),
        parent_set=True,
        description=request.description,
        category_type=request.category_type,
        brand_color=request.brand_color,
        logo_url=request.logo_url,
        website_url=request.website_url,
        location=request.location,
        game_titles=request.game_titles,
        is_verified=request.is_verified,
    )


@router.get("")
async def list_tenants(
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
    approval_status: Annotated[ApprovalStatus | None, Query()] = None,
) -> list[TenantResponse]:
    """List tenants, optionally only those with the given approval status."""
    try:
        tenants = await service.list_tenants(approval_status=approval_status)
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    request: TenantRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> TenantResponse:
    """Create an approved tenant.

    Raises:
        HTTPException: 404 if the parent does not exist
        HTTPException: 409 if the slug is taken
        HTTPException: 422 if a field is malformed
    """
    try:
        tenant = await service.create_or_update_tenant(
            current_user.user_id, _to_input(request)
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.post("/submissions", status_code=status.HTTP_201_CREATED)
async def submit_tenant(
    request: TenantRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> TenantResponse:
    """Submit a tenant for review. It starts as pending."""
    try:
        tenant = await service.submit_tenant(current_user.user_id, _to_input(request))
    except AccessError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.get("/tree")
async def get_tree(
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> list[TenantNodeResponse]:
    """The whole hierarchy as nested nodes, siblings sorted by name."""
    try:
        forest = await service.build_tree()
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantNodeResponse.from_domain(node) for node in forest]


@router.get("/pending-count")
async def pending_count(
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> PendingCountResponse:
    try:
        return PendingCountResponse(pending=await service.pending_review_count())
    except AccessError as e:
        raise to_http_exception(e) from e


@router.get("/eligible-parents")
async def eligible_parents_for_new_tenant(
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> list[TenantResponse]:
    """Parent options for a tenant that does not exist yet."""
    try:
        tenants = await service.list_eligible_parents(None)
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> TenantResponse:
    """Get tenant by ID.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
    """
    try:
        tenant = await service.get_tenant(_tenant_id(tenant_id))
    except AccessError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.patch("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    request: TenantPatchRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> TenantResponse:
    """Edit a tenant. Sending ``parent_id`` moves it, with the cycle check.

    Raises:
        HTTPException: 404 if the tenant or the new parent does not exist
        HTTPException: 409 if the slug is taken or the move would form a cycle
        HTTPException: 422 if a field is malformed
    """
    tenant_id_obj = _tenant_id(tenant_id)
    parent_set = "parent_id" in request.model_fields_set
    parent_id = _optional_tenant_id(request.parent_id) if parent_set else None
    try:
        existing = await service.get_tenant(tenant_id_obj)
        data = TenantInput(
            parent_id=parent_id,
            parent_set=parent_set,
            **patch_fields(existing, request),
        )
        tenant = await service.create_or_update_tenant(
            current_user.user_id, data, existing_id=tenant_id_obj
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={
        204: {"description": "Tenant deleted successfully"},
        400: {"description": "Invalid tenant ID format"},
        404: {"description": "Tenant not found"},
        409: {"description": "Tenant still has children"},
    },
)
async def delete_tenant(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> None:
    try:
        await service.delete_tenant(current_user.user_id, _tenant_id(tenant_id))
    except AccessError as e:
        raise to_http_exception(e) from e


@router.put("/{tenant_id}/parent")
async def set_parent(
    tenant_id: str,
    request: SetParentRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> TenantResponse:
    """Move a tenant under a new parent, or make it a root with null.

    Raises:
        HTTPException: 404 if the tenant or the parent does not exist
        HTTPException: 409 if the parent is the tenant or one of its descendants
    """
    try:
        tenant = await service.set_parent(
            current_user.user_id,
            _tenant_id(tenant_id),
            _optional_tenant_id(request.parent_id),
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.get("/{tenant_id}/eligible-parents")
async def eligible_parents(
    tenant_id: str,
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> list[TenantResponse]:
    """Tenants that can become this tenant's parent: not itself, not a descendant."""
    try:
        tenants = await service.list_eligible_parents(_tenant_id(tenant_id))
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.get("/{tenant_id}/children")
async def get_children(
    tenant_id: str,
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> list[TenantResponse]:
    try:
        tenants = await service.get_children(_tenant_id(tenant_id))
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.get("/{tenant_id}/ancestors")
async def get_ancestors(
    tenant_id: str,
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> list[TenantResponse]:
    """Ancestors of the tenant, root first."""
    try:
        tenants = await service.get_ancestors(_tenant_id(tenant_id))
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.get("/{tenant_id}/descendants")
async def get_descendants(
    tenant_id: str,
    _: Annotated[CurrentUser, Depends(get_current_user)],
    service: Service,
) -> list[TenantResponse]:
    try:
        tenants = await service.get_descendants(_tenant_id(tenant_id))
    except AccessError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.post("/{tenant_id}/review")
async def review_tenant(
    tenant_id: str,
    request: ReviewTenantRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> TenantResponse:
    """Approve, reject or send back a submitted tenant.

    Raises:
        HTTPException: 422 if rejecting without notes
    """
    try:
        tenant = await service.review_tenant(
            current_user.user_id, _tenant_id(tenant_id), request.status, request.notes
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)
