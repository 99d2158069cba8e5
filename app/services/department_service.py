from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import yaml

from app.config import settings
from app.schemas.department import DepartmentSummary

logger = logging.getLogger(__name__)

DEPARTMENT_SUMMARY_FILE = "department_summary.yaml"


@lru_cache(maxsize=4)
def load_department_summary(path: Path | None = None) -> DepartmentSummary:
    """Load the static course-evaluation summary fixture."""
    path = path or settings.POLICY_DATA_DIR / DEPARTMENT_SUMMARY_FILE
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    summary = DepartmentSummary.model_validate(data)
    logger.info("Loaded department summary for %s", summary.departmentName)
    return summary
