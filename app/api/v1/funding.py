"""Funding request and recommendation endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_department_summary, get_engine, get_request_store
from app.config import settings
from app.schemas.common import ErrorResponse
from app.schemas.department import DepartmentSummary
from app.schemas.funding import FundingRequest, NewFundingRequest, RequestStatus
from app.schemas.recommendation import RecommendationResponse
from app.services.recommend.engine import RecommendationEngine
from app.services.request_store import RequestStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/department-summary",
    response_model=DepartmentSummary,
    summary="Department summary",
    description="Course-evaluation ratings, recurring themes and sample comments for the department.",
)
async def department_summary(summary: DepartmentSummary = Depends(get_department_summary)):
    return summary


@router.get(
    "/requests",
    response_model=list[FundingRequest],
    summary="List funding requests",
    description="All submitted requests, newest first. Optionally filter by status.",
)
async def list_requests(
    status: RequestStatus | None = Query(None, description="Pending / Approved / Denied"),
    store: RequestStore = Depends(get_request_store),
):
    return store.list_requests(status)


@router.post(
    "/requests",
    response_model=FundingRequest,
    status_code=201,
    summary="Submit a funding request",
    responses={400: {"model": ErrorResponse}},
)
async def create_request(
    body: NewFundingRequest,
    store: RequestStore = Depends(get_request_store),
):
    email = body.email.strip().lower()
    domain = settings.ALLOWED_EMAIL_DOMAIN.lower()
    if not email.endswith(f"@{domain}"):
        raise HTTPException(status_code=400, detail=f"Email must end with @{domain}.")
    return store.add(body.model_copy(update={"email": email}))


# Sync route: the model call blocks, so FastAPI runs this in its threadpool
@router.post(
    "/recommend",
    response_model=RecommendationResponse,
    summary="Rank pending requests",
    description="Runs the recommendation engine over all Pending requests. "
    "Uses the external model when configured, otherwise the rule-based scorer.",
    responses={500: {"model": ErrorResponse}},
)
def recommend(
    store: RequestStore = Depends(get_request_store),
    engine: RecommendationEngine = Depends(get_engine),
    summary: DepartmentSummary = Depends(get_department_summary),
):
    pending = store.pending()
    try:
        return engine.recommend(summary, pending)
    except Exception as e:
        logger.exception("Failed to generate recommendations")
        raise HTTPException(status_code=500, detail="Failed to generate recommendations.") from e
