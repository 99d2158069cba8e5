"""Pydantic schemas for the recommendation engine output."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.funding import RequestCategory
from app.schemas.policy import PolicyGreyArea

ViabilityStatus = Literal["Likely", "Needs Review", "Risky"]


class Recommendation(BaseModel):
    """Department-level funding priority."""

    priority: str = Field(examples=["Increase TA hours for high-enrollment intro courses"])
    category: RequestCategory
    rationale: str


class RankedRequest(BaseModel):
    id: str = Field(description="FundingRequest.id")
    priorityRank: int = Field(ge=1, description="1-based position in the scored batch")
    alignmentScore: int = Field(ge=0, le=100)
    reasoning: str
    pastDenialHint: str | None = Field(default=None, description="Why similar requests were denied")
    viability: ViabilityStatus
    policyNote: str | None = Field(default=None, description="Denial hint tagged with a policy code")


class RecommendationResponse(BaseModel):
    recommendations: list[Recommendation]
    rankedRequests: list[RankedRequest]
    policyGreyAreas: list[PolicyGreyArea]
