"""Policy pre-check and insight endpoints."""
from fastapi import APIRouter, Depends

from app.api.deps import get_decision_log, get_knowledge_base
from app.schemas.policy import PolicyInsightSummary, PrecheckRequest, PrecheckResponse
from app.services.policy.insights import build_policy_insights
from app.services.policy.knowledge_base import PolicyKnowledgeBase
from app.services.policy.past_decisions import DecisionLog

router = APIRouter()


@router.post(
    "/precheck-request",
    response_model=PrecheckResponse,
    summary="Pre-submission check",
    description="Warning text and common denial reasons for a category, shown before a request is submitted.",
)
async def precheck_request(
    body: PrecheckRequest,
    knowledge_base: PolicyKnowledgeBase = Depends(get_knowledge_base),
):
    return knowledge_base.precheck(body.category, body.description)


@router.get(
    "/policy-insights",
    response_model=PolicyInsightSummary,
    summary="Policy insights",
    description="Approval statistics per category from past decisions, plus categories "
    "whose approval rate suggests inconsistent policy application.",
)
async def policy_insights(
    knowledge_base: PolicyKnowledgeBase = Depends(get_knowledge_base),
    decision_log: DecisionLog = Depends(get_decision_log),
):
    return build_policy_insights(knowledge_base, decision_log)
