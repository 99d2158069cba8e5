"""Historical decision log, loaded from ``past_decisions.yaml``."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

import yaml

from app.config import settings
from app.schemas.funding import RequestCategory
from app.schemas.policy import PastDecision

logger = logging.getLogger(__name__)

DECISION_LOG_FILE = "past_decisions.yaml"


def calculate_rate(approvals: int, denials: int) -> float:
    total = approvals + denials
    if total == 0:
        return 0.0
    return approvals / total


class DecisionLog:
    """Immutable list of past decisions, filterable by category."""

    def __init__(self, decisions: Iterable[PastDecision]) -> None:
        self._decisions = tuple(decisions)

    def __iter__(self) -> Iterator[PastDecision]:
        return iter(self._decisions)

    def __len__(self) -> int:
        return len(self._decisions)

    def for_category(self, category: RequestCategory) -> list[PastDecision]:
        return [d for d in self._decisions if d.category == category]

    def approval_rate(self, category: RequestCategory) -> float | None:
        """Share of approved decisions for *category*, or None when it has none."""
        decisions = self.for_category(category)
        if not decisions:
            return None
        approvals = sum(1 for d in decisions if d.decision == "Approved")
        return calculate_rate(approvals, len(decisions) - approvals)


@lru_cache(maxsize=4)
def load_decision_log(path: Path | None = None) -> DecisionLog:
    path = path or settings.POLICY_DATA_DIR / DECISION_LOG_FILE
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    log = DecisionLog(PastDecision.model_validate(d) for d in data.get("decisions", []))
    logger.info("Loaded %d past decisions from %s", len(log), path)
    return log
