"""
Organization-facing usage and dispute endpoints.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from fusioncaller.auth.dependencies import require_api_token
from fusioncaller.billing.schemas import UsageStats
from fusioncaller.billing.service import UsageService
from fusioncaller.disputes.dependencies import get_dispute_service, get_usage_service
from fusioncaller.disputes.schemas import Dispute, DisputeCreate, DisputeList
from fusioncaller.disputes.service import DisputeService
from fusioncaller.exceptions import DisputeError, OrganizationNotFoundError

router = APIRouter(
    prefix="/organizations",
    tags=["Organizations"],
    dependencies=[Depends(require_api_token)],
)


@router.get("/{organization_id}/usage", response_model=UsageStats)
async def get_usage(
    organization_id: str,
    service: UsageService = Depends(get_usage_service),
) -> UsageStats:
    """
    Usage for the current billing period.

    Raises:
        HTTPException: 404 if the organization does not exist
    """
    try:
        return await service.get_usage_stats(organization_id)
    except OrganizationNotFoundError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=e.message) from e


@router.post(
    "/{organization_id}/disputes",
    response_model=Dispute,
    status_code=HTTPStatus.CREATED,
)
async def submit_dispute(
    organization_id: str,
    data: DisputeCreate,
    service: DisputeService = Depends(get_dispute_service),
) -> Dispute:
    """
    Dispute a counted call.

    Raises:
        HTTPException: 404 for an unknown organization, 409 if the call was
            already disputed
    """
    try:
        dispute = await service.submit(organization_id, data)
    except OrganizationNotFoundError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=e.message) from e
    except DisputeError as e:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=e.message) from e
    return Dispute.model_validate(dispute)


@router.get("/{organization_id}/disputes", response_model=DisputeList)
async def list_disputes(
    organization_id: str,
    service: DisputeService = Depends(get_dispute_service),
) -> DisputeList:
    try:
        disputes = await service.list_for_organization(organization_id)
    except OrganizationNotFoundError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=e.message) from e
    return DisputeList(
        disputes=[Dispute.model_validate(d) for d in disputes], total=len(disputes)
    )
