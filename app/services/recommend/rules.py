"""Rule-based recommendation scoring.

Default scorer, used whenever no external model is configured or the model
call fails. Computes rank, alignmentScore, viability, denial hints and batch
grey areas from the decision log and policy knowledge base WITHOUT calling a model.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from app.schemas.department import DepartmentSummary
from app.schemas.funding import FundingRequest, RequestCategory
from app.schemas.policy import PolicyGreyArea
from app.schemas.recommendation import (
    RankedRequest,
    Recommendation,
    RecommendationResponse,
    ViabilityStatus,
)
from app.services.policy.insights import build_grey_area, is_grey_area_rate
from app.services.policy.knowledge_base import PolicyKnowledgeBase
from app.services.policy.past_decisions import DecisionLog

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Scoring constants
# ---------------------------------------------------------------------------

# Used when a category has no historical decisions
DEFAULT_APPROVAL_RATE = 0.6
LIKELY_THRESHOLD = 0.65
NEEDS_REVIEW_THRESHOLD = 0.4

ALIGNMENT_START = 90
ALIGNMENT_STEP = 5
ALIGNMENT_FLOOR = 40

HEURISTIC_REASONING = (
    "Placeholder ranking: rank reflects submission order, not a scored "
    "priority. Viability comes from historical approval rates."
)

# ---------------------------------------------------------------------------
# Department priorities (static until a model provides them)
# ---------------------------------------------------------------------------

DEPARTMENT_RECOMMENDATIONS: tuple[Recommendation, ...] = (
    Recommendation(
        priority="Increase TA hours for high-enrollment intro courses",
        category=RequestCategory.STUDENT_WORKER_SUPPORT,
        rationale="Many comments mention needing more support in office hours and recitations.",
    ),
    Recommendation(
        priority="Upgrade classroom AV equipment in large lecture halls",
        category=RequestCategory.CLASSROOM_TECHNOLOGY,
        rationale="Multiple comments reference failing projectors and wasted class time.",
    ),
    Recommendation(
        priority="Address overcrowding in key required courses",
        category=RequestCategory.FACILITIES,
        rationale=(
            "Students mention difficulty asking questions and participating "
            "due to large class sizes."
        ),
    ),
)

# ---------------------------------------------------------------------------
# Denial-risk keywords per category (lower-case substrings)
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: dict[RequestCategory, list[str]] = {
    RequestCategory.PROFESSIONAL_DEVELOPMENT: ["workshop", "training", "certificate", "coaching"],
    RequestCategory.CONFERENCE_TRAVEL: [
        "travel", "flight", "hotel", "conference", "poster", "last minute",
    ],
    RequestCategory.TEACHING_MATERIALS: ["subscription", "license", "software", "platform", "saas"],
    RequestCategory.CLASSROOM_TECHNOLOGY: [
        "projector", "camera", "av", "equipment", "hardware", "lecture",
    ],
    RequestCategory.STUDENT_WORKER_SUPPORT: ["ta", "grader", "assistant", "student worker"],
    RequestCategory.STUDENT_EXPERIENCE: ["event", "program", "workshop", "catering", "student"],
    RequestCategory.FACILITIES: ["furniture", "renovation", "space", "room", "chairs", "facility"],
    RequestCategory.RESEARCH_EQUIPMENT: ["lab", "equipment", "research", "sensors", "vr"],
    RequestCategory.OTHER: ["misc", "general"],
}


# ===================================================================
# Public helpers
# ===================================================================


def alignment_score(index: int) -> int:
    """Position-based placeholder score: 90, 85, 80, ... floored at 40."""
    return max(ALIGNMENT_FLOOR, ALIGNMENT_START - ALIGNMENT_STEP * index)


def classify_viability(approval_rate: float) -> ViabilityStatus:
    if approval_rate >= LIKELY_THRESHOLD:
        return "Likely"
    if approval_rate >= NEEDS_REVIEW_THRESHOLD:
        return "Needs Review"
    return "Risky"


def has_keyword_hit(category: RequestCategory, description: str) -> bool:
    lowered = description.lower()
    return any(kw in lowered for kw in CATEGORY_KEYWORDS.get(category, []))


def apply_policy_code(
    note: str | None,
    category: RequestCategory,
    knowledge_base: PolicyKnowledgeBase,
) -> str | None:
    """Tag *note* with the category's primary policy reference, if it has one."""
    if not note:
        return None
    references = knowledge_base.get_policy_references(category)
    if not references:
        return note
    top = references[0]
    return f"[{top.code}] {note} ({top.url})"


def build_denial_hint(category: RequestCategory, knowledge_base: PolicyKnowledgeBase) -> str | None:
    messages = knowledge_base.get_common_denial_messages(category)
    if not messages:
        return None
    return f"Similar {getattr(category, 'value', category)} requests were denied: {messages[0]}."


class HeuristicScorer:
    """Scores a batch of pending requests against historical decisions."""

    name = "heuristic"

    def __init__(self, knowledge_base: PolicyKnowledgeBase, decision_log: DecisionLog) -> None:
        self.knowledge_base = knowledge_base
        self.decision_log = decision_log

    def category_approval_rate(self, category: RequestCategory) -> float:
        rate = self.decision_log.approval_rate(category)
        return DEFAULT_APPROVAL_RATE if rate is None else rate

    def score(
        self,
        summary: DepartmentSummary,
        requests: Sequence[FundingRequest],
    ) -> RecommendationResponse:
        """Rank *requests* in the order given. ``summary`` is not used by the rules."""
        grey_areas: dict[RequestCategory, PolicyGreyArea] = {}
        ranked = [
            self._rank_request(index, req, grey_areas)
            for index, req in enumerate(requests)
        ]
        return RecommendationResponse(
            recommendations=[r.model_copy() for r in DEPARTMENT_RECOMMENDATIONS],
            rankedRequests=ranked,
            policyGreyAreas=list(grey_areas.values()),
        )

    def _rank_request(
        self,
        index: int,
        req: FundingRequest,
        grey_areas: dict[RequestCategory, PolicyGreyArea],
    ) -> RankedRequest:
        kb = self.knowledge_base
        category = req.category
        approval_rate = self.category_approval_rate(category)
        viability = classify_viability(approval_rate)

        denial_messages = kb.get_common_denial_messages(category)
        policy_note = denial_messages[0] if denial_messages else None

        if has_keyword_hit(category, req.description):
            if viability == "Likely":
                viability = "Needs Review"
            policy_note = kb.build_precheck_message(category)

        # First request in the batch to flag a category wins
        if (
            viability != "Likely"
            and is_grey_area_rate(approval_rate)
            and category not in grey_areas
        ):
            grey_areas[category] = build_grey_area(category, approval_rate, kb)

        return RankedRequest(
            id=req.id,
            priorityRank=index + 1,
            alignmentScore=alignment_score(index),
            reasoning=HEURISTIC_REASONING,
            pastDenialHint=apply_policy_code(build_denial_hint(category, kb), category, kb),
            viability=viability,
            policyNote=apply_policy_code(policy_note, category, kb),
        )
