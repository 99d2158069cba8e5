"""Per-category approval statistics and policy grey areas from the decision log."""
from __future__ import annotations

import logging
import math

from app.schemas.funding import RequestCategory
from app.schemas.policy import CategoryInsight, PolicyGreyArea, PolicyInsightSummary
from app.services.policy.knowledge_base import PolicyKnowledgeBase, load_knowledge_base
from app.services.policy.past_decisions import DecisionLog, calculate_rate, load_decision_log

logger = logging.getLogger(__name__)

MAX_TOP_REASONS = 3
# Approval rates strictly inside this band count as inconsistent policy application
GREY_AREA_BAND = (0.0, 0.7)
DEFAULT_SUGGESTION = "Clarify criteria and documentation requirements."


def is_grey_area_rate(rate: float) -> bool:
    low, high = GREY_AREA_BAND
    return low < rate < high


def percent(rate: float) -> int:
    """Rate as a whole percentage, halves rounded up."""
    return math.floor(rate * 100 + 0.5)


def format_reason(reason: str, policy_code: str | None) -> str:
    return f"[{policy_code}] {reason}" if policy_code else reason


def upsert_reason(reasons: list[str], reason: str) -> list[str]:
    if reason in reasons:
        return reasons
    return [*reasons, reason][:MAX_TOP_REASONS]


def build_grey_area_suggestion(category: RequestCategory, knowledge_base: PolicyKnowledgeBase) -> str:
    """Suggestion from the primary policy reference, else the primary denial reason."""
    references = knowledge_base.get_policy_references(category)
    if references:
        ref = references[0]
        return (
            f"Review {ref.code} guidance ({ref.url}) to clarify approval standards "
            f"for {knowledge_base.display_name(category)}."
        )
    reasons = knowledge_base.get_denial_reasons(category)
    if reasons:
        return reasons[0].details
    return DEFAULT_SUGGESTION


def build_grey_area(
    category: RequestCategory,
    approval_rate: float,
    knowledge_base: PolicyKnowledgeBase,
) -> PolicyGreyArea:
    return PolicyGreyArea(
        category=category,
        summary=(
            f"Approval rate {percent(approval_rate)}% indicates "
            "inconsistent application of policy."
        ),
        suggestion=build_grey_area_suggestion(category, knowledge_base),
    )


def build_policy_insights(
    knowledge_base: PolicyKnowledgeBase | None = None,
    decision_log: DecisionLog | None = None,
) -> PolicyInsightSummary:
    """Aggregate the decision log into per-category insights.

    Categories without any decision are omitted. Output is sorted by category
    name so repeated calls return identical results.
    """
    if knowledge_base is None:
        knowledge_base = load_knowledge_base()
    if decision_log is None:
        decision_log = load_decision_log()

    counts: dict[RequestCategory, dict] = {}
    for decision in decision_log:
        entry = counts.setdefault(
            decision.category, {"approvals": 0, "denials": 0, "reasons": []}
        )
        if decision.decision == "Approved":
            entry["approvals"] += 1
        else:
            entry["denials"] += 1
            entry["reasons"] = upsert_reason(
                entry["reasons"], format_reason(decision.reason, decision.policyCode)
            )

    categories = [
        CategoryInsight(
            category=category,
            approvals=entry["approvals"],
            denials=entry["denials"],
            approvalRate=calculate_rate(entry["approvals"], entry["denials"]),
            topReasons=entry["reasons"],
        )
        for category, entry in counts.items()
    ]
    categories.sort(key=lambda c: c.category.value)

    grey_areas = [
        build_grey_area(insight.category, insight.approvalRate, knowledge_base)
        for insight in categories
        if is_grey_area_rate(insight.approvalRate)
    ]
    logger.debug(
        "Built policy insights: %d categories, %d grey areas", len(categories), len(grey_areas)
    )
    return PolicyInsightSummary(categories=categories, frequentGreyAreas=grey_areas)
