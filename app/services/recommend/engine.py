"""Recommendation engine. Picks a scorer and falls back to rules on model failure."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from app.config import settings
from app.schemas.department import DepartmentSummary
from app.schemas.funding import FundingRequest
from app.schemas.recommendation import RecommendationResponse
from app.services.llm_service import LLMError
from app.services.policy.knowledge_base import PolicyKnowledgeBase, load_knowledge_base
from app.services.policy.past_decisions import DecisionLog, load_decision_log
from app.services.recommend.llm import ModelScorer
from app.services.recommend.rules import HeuristicScorer

logger = logging.getLogger(__name__)


class Scorer(Protocol):
    name: str

    def score(
        self,
        summary: DepartmentSummary,
        requests: Sequence[FundingRequest],
    ) -> RecommendationResponse: ...


class RecommendationEngine:
    """
    Produces a RecommendationResponse for a batch of pending requests.

    The model scorer, when present, is tried first. LLMError from it is
    logged and the heuristic scorer answers instead, so callers never see a
    model failure.
    """

    def __init__(
        self,
        knowledge_base: PolicyKnowledgeBase,
        decision_log: DecisionLog,
        model_scorer: Scorer | None = None,
    ) -> None:
        self.knowledge_base = knowledge_base
        self.decision_log = decision_log
        self.heuristic = HeuristicScorer(knowledge_base, decision_log)
        self.model_scorer = model_scorer

    @property
    def mode(self) -> str:
        return self.model_scorer.name if self.model_scorer else self.heuristic.name

    def recommend(
        self,
        summary: DepartmentSummary,
        requests: Sequence[FundingRequest],
    ) -> RecommendationResponse:
        if self.model_scorer is not None:
            try:
                result = self.model_scorer.score(summary, requests)
                logger.info("Model scored %d requests", len(result.rankedRequests))
                return result
            except LLMError as e:
                logger.warning("Model scoring failed, using heuristic scorer: %s", e)

        result = self.heuristic.score(summary, requests)
        logger.info(
            "Heuristic scored %d requests (%d grey areas)",
            len(result.rankedRequests), len(result.policyGreyAreas),
        )
        return result


def build_engine(
    knowledge_base: PolicyKnowledgeBase | None = None,
    decision_log: DecisionLog | None = None,
) -> RecommendationEngine:
    """Engine wired from settings: model scorer only when URL and key are both set."""
    if knowledge_base is None:
        knowledge_base = load_knowledge_base()
    if decision_log is None:
        decision_log = load_decision_log()
    model_scorer = ModelScorer(knowledge_base) if settings.model_scorer_enabled else None
    return RecommendationEngine(knowledge_base, decision_log, model_scorer)
