"""Shared fixtures: reference data, request factory, API client."""
from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_engine, get_request_store
from app.main import app
from app.schemas.funding import FundingRequest, RequestCategory
from app.schemas.policy import PastDecision
from app.services.department_service import load_department_summary
from app.services.policy.knowledge_base import load_knowledge_base
from app.services.policy.past_decisions import DecisionLog, load_decision_log
from app.services.recommend.engine import RecommendationEngine
from app.services.request_store import RequestStore

_ids = count(1)


@pytest.fixture
def knowledge_base():
    return load_knowledge_base()


@pytest.fixture
def decision_log():
    return load_decision_log()


@pytest.fixture
def summary():
    return load_department_summary()


@pytest.fixture
def make_request():
    """Factory for pending FundingRequest objects."""

    def _make(category: RequestCategory, description: str = "General request", **overrides):
        fields = {
            "id": f"test-{next(_ids)}",
            "name": "Test Requester",
            "email": "tester@virginia.edu",
            "role": "Professor",
            "category": category,
            "title": "Test request",
            "description": description,
            "urgency": "Medium",
            "status": "Pending",
            "createdAt": datetime.now(timezone.utc),
        }
        fields.update(overrides)
        return FundingRequest(**fields)

    return _make


@pytest.fixture
def make_decision():
    """Factory for PastDecision objects."""

    def _make(category: RequestCategory, decision: str, reason: str = "Reason.", **overrides):
        fields = {
            "id": f"pd-test-{next(_ids)}",
            "category": category,
            "description": "Historical request",
            "decision": decision,
            "reason": reason,
        }
        fields.update(overrides)
        return PastDecision(**fields)

    return _make


@pytest.fixture
def client(knowledge_base, decision_log):
    """API client with a fresh request store and a heuristic-only engine."""
    store = RequestStore()
    engine = RecommendationEngine(knowledge_base, decision_log)
    app.dependency_overrides[get_request_store] = lambda: store
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def empty_log():
    return DecisionLog([])
