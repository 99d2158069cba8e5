from fastapi import APIRouter, Depends

from app.api.deps import get_decision_log, get_engine, get_knowledge_base
from app.services.policy.knowledge_base import PolicyKnowledgeBase
from app.services.policy.past_decisions import DecisionLog
from app.services.recommend.engine import RecommendationEngine

router = APIRouter()


@router.get(
    "/",
    summary="Health check",
    description="Reference data counts and the active scorer, for monitoring and deploy probes.",
)
async def health_check(
    knowledge_base: PolicyKnowledgeBase = Depends(get_knowledge_base),
    decision_log: DecisionLog = Depends(get_decision_log),
    engine: RecommendationEngine = Depends(get_engine),
):
    return {
        "status": "ok",
        "categories": len(knowledge_base),
        "past_decisions": len(decision_log),
        "scorer": engine.mode,
    }
