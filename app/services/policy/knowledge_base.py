"""Static policy knowledge base: denial reasons, policy references, pre-check text.

Loaded once from ``policy_categories.yaml`` and shared read-only. Lookups for a
category that has no entry degrade to empty lists or fallback text; they never raise.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import yaml

from app.config import settings
from app.schemas.funding import RequestCategory
from app.schemas.policy import (
    CategoryPolicyInfo,
    DenialReason,
    PolicyReference,
    PrecheckResponse,
)

logger = logging.getLogger(__name__)

KNOWLEDGE_BASE_FILE = "policy_categories.yaml"

FALLBACK_PRECHECK_MESSAGE = (
    "⚠️ Reviewers expect detailed justification for this category. "
    "Provide context on impact, cost, and alignment."
)

# ---------------------------------------------------------------------------
# Pre-check keyword overrides: (category, lower-case keyword) -> message
# ---------------------------------------------------------------------------

PRECHECK_OVERRIDES: list[tuple[RequestCategory, str, str]] = [
    (
        RequestCategory.TEACHING_MATERIALS,
        "subscription",
        "⚠️ Reviewers often deny software subscriptions unless tied to a specific course "
        "with per-student licensing. Highlight how the subscription supports a class.",
    ),
    (
        RequestCategory.CONFERENCE_TRAVEL,
        "last minute",
        "⚠️ Travel funding frequently gets denied when submitted less than 30 days in "
        "advance. Add justification or confirm dates if possible.",
    ),
]


class PolicyDataError(Exception):
    """Raised when a policy fixture is incomplete."""


class PolicyKnowledgeBase:
    """Read-only view over per-category policy metadata."""

    def __init__(self, categories: Mapping[RequestCategory, CategoryPolicyInfo]) -> None:
        missing = [c.value for c in RequestCategory if c not in categories]
        if missing:
            raise PolicyDataError(f"No policy entry for categories: {missing}")
        self._categories = MappingProxyType(dict(categories))

    def __len__(self) -> int:
        return len(self._categories)

    def get_info(self, category: RequestCategory) -> CategoryPolicyInfo | None:
        return self._categories.get(category)

    def display_name(self, category: RequestCategory) -> str:
        info = self._categories.get(category)
        if info:
            return info.displayName
        return getattr(category, "value", str(category))

    def get_denial_reasons(self, category: RequestCategory) -> list[DenialReason]:
        info = self._categories.get(category)
        return list(info.commonDenialReasons) if info else []

    def get_policy_references(self, category: RequestCategory) -> list[PolicyReference]:
        info = self._categories.get(category)
        return list(info.policyReferences) if info else []

    def get_common_denial_messages(self, category: RequestCategory) -> list[str]:
        """Return ``"<summary>: <details>"`` for each denial reason, primary first."""
        return [f"{r.summary}: {r.details}" for r in self.get_denial_reasons(category)]

    def build_precheck_message(self, category: RequestCategory) -> str:
        """Warning text built from the category's primary denial reason."""
        reasons = self.get_denial_reasons(category)
        if not reasons:
            return FALLBACK_PRECHECK_MESSAGE
        primary = reasons[0]
        message = (
            f"⚠️ Past requests in {self.display_name(category)} were often denied because "
            f"{primary.details} To improve your chances, address this concern directly."
        )
        if primary.policyCode:
            message = f"{primary.policyCode}: {message}"
        return message

    def precheck(self, category: RequestCategory, description: str) -> PrecheckResponse:
        """Advisory shown before a single request is submitted."""
        message = self.build_precheck_message(category)
        lowered = description.lower()
        for override_category, keyword, override_message in PRECHECK_OVERRIDES:
            if category == override_category and keyword in lowered:
                message = override_message
        return PrecheckResponse(
            preCheckMessage=message,
            commonDenialReasons=self.get_common_denial_messages(category),
        )


# ===================================================================
# Loading
# ===================================================================


def parse_knowledge_base(data: dict) -> PolicyKnowledgeBase:
    """Validate a ``{"categories": {name: {...}}}`` mapping into a knowledge base."""
    raw_categories = data.get("categories") or {}
    categories = {
        RequestCategory(name): CategoryPolicyInfo.model_validate(entry)
        for name, entry in raw_categories.items()
    }
    return PolicyKnowledgeBase(categories)


@lru_cache(maxsize=4)
def load_knowledge_base(path: Path | None = None) -> PolicyKnowledgeBase:
    """Load and cache the knowledge base fixture.

    Raises PolicyDataError if any category is missing from the file.
    """
    path = path or settings.POLICY_DATA_DIR / KNOWLEDGE_BASE_FILE
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    kb = parse_knowledge_base(data)
    logger.info("Loaded policy knowledge base: %d categories from %s", len(kb), path)
    return kb
