from functools import lru_cache

from app.schemas.department import DepartmentSummary
from app.services.department_service import load_department_summary
from app.services.policy.knowledge_base import PolicyKnowledgeBase, load_knowledge_base
from app.services.policy.past_decisions import DecisionLog, load_decision_log
from app.services.recommend.engine import RecommendationEngine, build_engine
from app.services.request_store import RequestStore


@lru_cache(maxsize=1)
def get_request_store() -> RequestStore:
    return RequestStore()


@lru_cache(maxsize=1)
def get_engine() -> RecommendationEngine:
    return build_engine()


def get_knowledge_base() -> PolicyKnowledgeBase:
    return load_knowledge_base()


def get_decision_log() -> DecisionLog:
    return load_decision_log()


def get_department_summary() -> DepartmentSummary:
    return load_department_summary()
