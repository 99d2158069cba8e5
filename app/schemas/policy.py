"""Pydantic schemas for the policy knowledge base, decision log and insights."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.funding import RequestCategory


class PolicyReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Short policy identifier", examples=["FIN-030"])
    summary: str = Field(description="What the policy governs")
    url: str = Field(description="Reference link")


class DenialReason(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    details: str
    policyCode: str | None = None
    referenceUrl: str | None = None


class CategoryPolicyInfo(BaseModel):
    """Static policy metadata for one category. List order matters: first is primary."""

    model_config = ConfigDict(frozen=True)

    displayName: str
    exampleRequests: tuple[str, ...] = ()
    commonDenialReasons: tuple[DenialReason, ...] = ()
    policyReferences: tuple[PolicyReference, ...] = ()


class PastDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(examples=["pd-1"])
    category: RequestCategory
    description: str
    decision: Literal["Approved", "Denied"]
    reason: str
    policyCode: str | None = None
    referenceUrl: str | None = None


class CategoryInsight(BaseModel):
    category: RequestCategory
    approvals: int = Field(ge=0)
    denials: int = Field(ge=0)
    approvalRate: float = Field(ge=0, le=1)
    topReasons: list[str] = Field(default=[], description="Up to 3 distinct denial reasons")


class PolicyGreyArea(BaseModel):
    category: RequestCategory
    summary: str
    suggestion: str


class PolicyInsightSummary(BaseModel):
    categories: list[CategoryInsight]
    frequentGreyAreas: list[PolicyGreyArea]


class PrecheckRequest(BaseModel):
    category: RequestCategory
    description: str = Field(min_length=1)


class PrecheckResponse(BaseModel):
    preCheckMessage: str
    commonDenialReasons: list[str]
