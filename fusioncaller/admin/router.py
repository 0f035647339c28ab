"""
Admin endpoints.

Plan grants, privilege overrides, trial management and dispute review.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Query

from fusioncaller.admin.schemas import (
    PlanGrantRequest,
    PrivilegesRequest,
    TrialExtendRequest,
)
from fusioncaller.auth.dependencies import require_api_token
from fusioncaller.db.dependencies import get_organization_service
from fusioncaller.db.organizations.schemas import (
    Organization,
    OrganizationCreate,
    TrialStatus,
)
from fusioncaller.db.organizations.service import OrganizationService
from fusioncaller.disputes.dependencies import get_dispute_service
from fusioncaller.disputes.schemas import Dispute, DisputeList, DisputeReview, DisputeStatus
from fusioncaller.disputes.service import DisputeService
from fusioncaller.exceptions import DisputeError, OrganizationNotFoundError, TrialError

router = APIRouter(
    prefix="/admin", tags=["Admin"], dependencies=[Depends(require_api_token)]
)


def _not_found(e: OrganizationNotFoundError) -> HTTPException:
    return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=e.message)


@router.post(
    "/organizations", response_model=Organization, status_code=HTTPStatus.CREATED
)
async def create_organization(
    data: OrganizationCreate,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    org = await service.repository.create(data)
    return Organization.model_validate(org)


@router.get("/organizations", response_model=list[Organization])
async def list_organizations(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: OrganizationService = Depends(get_organization_service),
) -> list[Organization]:
    orgs = await service.repository.list_all(limit=limit, offset=offset)
    return [Organization.model_validate(o) for o in orgs]


@router.post("/organizations/{organization_id}/plan-grant", response_model=Organization)
async def grant_plan(
    organization_id: str,
    request: PlanGrantRequest,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    """Grant a plan, optionally with an expiry."""
    try:
        org = await service.grant_plan(
            organization_id,
            request.plan,
            request.expires_at,
            request.notes,
            granted_by=request.granted_by,
        )
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    return Organization.model_validate(org)


@router.delete("/organizations/{organization_id}/plan-grant", response_model=Organization)
async def revoke_plan(
    organization_id: str,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    try:
        org = await service.revoke_plan(organization_id)
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    return Organization.model_validate(org)


@router.post("/organizations/{organization_id}/privileges", response_model=Organization)
async def grant_privileges(
    organization_id: str,
    request: PrivilegesRequest,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    """Merge privilege flags (bypass_limits, unlimited_calls)."""
    try:
        org = await service.grant_privileges(
            organization_id, request.flags(), request.notes, granted_by=request.granted_by
        )
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    return Organization.model_validate(org)


@router.delete("/organizations/{organization_id}/privileges", response_model=Organization)
async def revoke_privileges(
    organization_id: str,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    try:
        org = await service.revoke_privileges(organization_id)
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    return Organization.model_validate(org)


@router.get("/organizations/{organization_id}/trial", response_model=TrialStatus)
async def get_trial_status(
    organization_id: str,
    service: OrganizationService = Depends(get_organization_service),
) -> TrialStatus:
    try:
        return await service.get_trial_status(organization_id)
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e


@router.post("/organizations/{organization_id}/trial", response_model=Organization)
async def start_trial(
    organization_id: str,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    """
    Start the one-time trial.

    Raises:
        HTTPException: 404 for an unknown organization, 409 if the trial was
            already used or a plan is active
    """
    try:
        org = await service.start_trial(organization_id)
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    except TrialError as e:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=e.message) from e
    return Organization.model_validate(org)


@router.post("/organizations/{organization_id}/trial/extend", response_model=Organization)
async def extend_trial(
    organization_id: str,
    request: TrialExtendRequest,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    try:
        org = await service.extend_trial(organization_id, request.additional_days)
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    except TrialError as e:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=e.message) from e
    return Organization.model_validate(org)


@router.post("/organizations/{organization_id}/trial/cancel", response_model=Organization)
async def cancel_trial(
    organization_id: str,
    service: OrganizationService = Depends(get_organization_service),
) -> Organization:
    try:
        org = await service.cancel_trial(organization_id)
    except OrganizationNotFoundError as e:
        raise _not_found(e) from e
    return Organization.model_validate(org)


@router.get("/disputes", response_model=DisputeList)
async def list_all_disputes(
    status: DisputeStatus | None = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: DisputeService = Depends(get_dispute_service),
) -> DisputeList:
    disputes = await service.list_all(status=status, limit=limit, offset=offset)
    return DisputeList(
        disputes=[Dispute.model_validate(d) for d in disputes], total=len(disputes)
    )


@router.post("/disputes/{dispute_id}/review", response_model=Dispute)
async def review_dispute(
    dispute_id: str,
    review: DisputeReview,
    service: DisputeService = Depends(get_dispute_service),
) -> Dispute:
    """
    Approve or deny a dispute. Approval refunds one billable call.

    Raises:
        HTTPException: 404 for an unknown dispute, 409 if already reviewed
    """
    try:
        dispute = await service.review(dispute_id, review)
    except DisputeError as e:
        status_code = (
            HTTPStatus.NOT_FOUND
            if e.error_code == "DISPUTE_NOT_FOUND"
            else HTTPStatus.CONFLICT
        )
        raise HTTPException(status_code=status_code, detail=e.message) from e
    return Dispute.model_validate(dispute)
