"""Model-backed recommendation scoring: prompt templates and response parsing."""
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from app.schemas.department import DepartmentSummary
from app.schemas.funding import FundingRequest
from app.schemas.policy import PolicyGreyArea
from app.schemas.recommendation import RankedRequest, Recommendation, RecommendationResponse
from app.services.llm_service import LLMError, call_llm_json
from app.services.policy.knowledge_base import PolicyKnowledgeBase

logger = logging.getLogger(__name__)

DESCRIPTION_TRUNCATE_LEN = 1500

SYSTEM_PROMPT = """\
You are a budget analyst for a university academic department. You help \
administrators triage pending funding requests against the department's \
course-evaluation feedback and institutional finance policy.

Respond with strict JSON only, no other text:
{
  "recommendations": [
    {"priority": "short funding priority", "category": "<category>", "rationale": "one sentence"}
  ],
  "rankedRequests": [
    {
      "id": "<request id>",
      "priorityRank": 1,
      "alignmentScore": 0-100 integer,
      "reasoning": "one or two sentences",
      "pastDenialHint": "why similar requests were denied, or null",
      "viability": "Likely|Needs Review|Risky",
      "policyNote": "policy concern with code if known, or null"
    }
  ],
  "policyGreyAreas": [
    {"category": "<category>", "summary": "one sentence", "suggestion": "one sentence"}
  ]
}

Rules:
- Return exactly one rankedRequests entry per request id supplied, ranked 1..N.
- category values must be copied verbatim from the category list supplied.
- Give three department recommendations grounded in the evaluation themes.
- Do not invent policy codes; only use codes listed in the policy context."""


def build_user_prompt(
    summary: DepartmentSummary,
    requests: Sequence[FundingRequest],
    knowledge_base: PolicyKnowledgeBase,
) -> str:
    """Build the user prompt for one batch of pending requests."""
    themes = ", ".join(f"{t.theme} ({t.count})" for t in summary.topThemes) or "none"
    comments = "\n".join(f"- {c}" for c in summary.sampleComments) or "- none"

    categories = sorted({req.category for req in requests}, key=lambda c: c.value)
    policy_lines = []
    for category in categories:
        codes = ", ".join(r.code for r in knowledge_base.get_policy_references(category)) or "none"
        reasons = "; ".join(knowledge_base.get_common_denial_messages(category)) or "none"
        policy_lines.append(f"- {category.value}: codes [{codes}]; common denials: {reasons}")

    request_items = []
    for req in requests:
        description = req.description
        if len(description) > DESCRIPTION_TRUNCATE_LEN:
            description = description[:DESCRIPTION_TRUNCATE_LEN] + "...(truncated)"
        request_items.append({
            "id": req.id,
            "category": req.category.value,
            "title": req.title,
            "urgency": req.urgency,
            "role": req.role,
            "description": description,
        })

    return (
        f"Department: {summary.departmentName}\n"
        f"Average resources rating: {summary.avgResourcesRating}/5\n"
        f"Average teaching rating: {summary.avgTeachingRating}/5\n"
        f"Top themes: {themes}\n"
        f"Sample comments:\n{comments}\n\n"
        f"Policy context:\n" + ("\n".join(policy_lines) or "- none") + "\n\n"
        f"Pending requests:\n{json.dumps(request_items, ensure_ascii=False, indent=2)}"
    )


def _object_list(raw: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """``raw[key]`` as a list of JSON objects; missing or null reads as empty."""
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise LLMError(f"Model reply field {key!r} is not a list of objects")
    return value


def _clamp_score(value: Any) -> int:
    try:
        return max(0, min(100, int(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def parse_llm_response(
    raw: dict[str, Any],
    requests: Sequence[FundingRequest],
) -> RecommendationResponse:
    """Validate and normalize model output against the submitted batch.

    Raises LLMError if the reply is malformed or does not rank every request
    exactly once.
    """
    raw_recommendations = _object_list(raw, "recommendations")
    raw_ranked = _object_list(raw, "rankedRequests")
    raw_grey_areas = _object_list(raw, "policyGreyAreas")

    try:
        recommendations = [Recommendation.model_validate(r) for r in raw_recommendations]
    except ValidationError as e:
        raise LLMError(f"Invalid recommendations in model reply: {e}") from e
    if not recommendations:
        raise LLMError("Model reply has no department recommendations")

    expected_ids = [req.id for req in requests]
    ranked_by_id: dict[str, RankedRequest] = {}
    raw_ranks: dict[str, Any] = {}
    for item in raw_ranked:
        req_id = item.get("id")
        if not isinstance(req_id, str) or req_id not in expected_ids:
            continue
        item = dict(item)
        item["alignmentScore"] = _clamp_score(item.get("alignmentScore", 0))
        for key in ("pastDenialHint", "policyNote"):
            if not item.get(key) or str(item[key]).lower() == "null":
                item[key] = None
        if item.get("viability") not in ("Likely", "Needs Review", "Risky"):
            item["viability"] = "Needs Review"
        item.setdefault("reasoning", "")
        raw_ranks.setdefault(req_id, item.get("priorityRank"))
        item["priorityRank"] = 1
        try:
            ranked_by_id.setdefault(req_id, RankedRequest.model_validate(item))
        except ValidationError as e:
            raise LLMError(f"Invalid ranked request in model reply: {e}") from e

    missing = [i for i in expected_ids if i not in ranked_by_id]
    if missing:
        raise LLMError(f"Model reply did not rank requests: {missing}")

    # Model's own rank order, ties broken by input order
    order = {req_id: idx for idx, req_id in enumerate(expected_ids)}

    def _rank_key(req_id: str) -> tuple[int, int]:
        rank = raw_ranks.get(req_id)
        return (rank if isinstance(rank, int) else len(expected_ids) + 1, order[req_id])

    ranked = [
        ranked_by_id[req_id].model_copy(update={"priorityRank": position})
        for position, req_id in enumerate(sorted(expected_ids, key=_rank_key), start=1)
    ]

    grey_areas: list[PolicyGreyArea] = []
    for item in raw_grey_areas:
        try:
            grey_areas.append(PolicyGreyArea.model_validate(item))
        except ValidationError:
            logger.warning("Dropping invalid grey area from model reply: %r", item)

    return RecommendationResponse(
        recommendations=recommendations,
        rankedRequests=ranked,
        policyGreyAreas=grey_areas,
    )


class ModelScorer:
    """Scores a batch through the configured external model.

    Any failure surfaces as LLMError; the engine falls back to the rule scorer.
    """

    name = "model"

    def __init__(
        self,
        knowledge_base: PolicyKnowledgeBase,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.knowledge_base = knowledge_base
        self.client = client

    def score(
        self,
        summary: DepartmentSummary,
        requests: Sequence[FundingRequest],
    ) -> RecommendationResponse:
        prompt = build_user_prompt(summary, requests, self.knowledge_base)
        raw = call_llm_json(
            prompt=prompt,
            system_prompt=SYSTEM_PROMPT,
            temperature=0.1,
            max_tokens=3000,
            client=self.client,
        )
        if not isinstance(raw, dict):
            raise LLMError(f"Expected dict from LLM, got {type(raw).__name__}")
        return parse_llm_response(raw, requests)
