import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from omnipply.dependencies import AdvertiseServiceDep, CurrentUserDep
from omnipply.schemas.advertising import AdvertiseRequest, CampaignQuoteResponse, CampaignRequest, CampaignSubmitResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/advertise", tags=["advertise"])


@router.post("/quote", response_model=CampaignQuoteResponse, summary="Price a featured placement campaign")
def quote_campaign(request: CampaignRequest, service: AdvertiseServiceDep):
    return service.quote(request)


@router.post(
    "",
    response_model=CampaignSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit advertise requests for an organization and its programs",
)
def submit_campaign(request: CampaignRequest, user: CurrentUserDep, service: AdvertiseServiceDep):
    try:
        response = service.submit(request, user_id=user["id"])
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not response.submitted and response.failures:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": "Failed to submit advertise request", "failures": [f.model_dump() for f in response.failures]},
        )
    return response


@router.get("/{org_id}", response_model=List[AdvertiseRequest], summary="Advertise requests made by an organization")
def list_requests(org_id: str, user: CurrentUserDep, service: AdvertiseServiceDep):
    return service.list_requests(org_id)
