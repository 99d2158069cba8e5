"""Thread-safe in-memory store for funding requests.

Volatile by design: contents live for the lifetime of the process and are
seeded with two pending requests on creation.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from threading import Lock

from app.schemas.funding import FundingRequest, NewFundingRequest, RequestCategory, RequestStatus

logger = logging.getLogger(__name__)


def seed_requests() -> list[FundingRequest]:
    now = datetime.now(timezone.utc)
    return [
        FundingRequest(
            id="req-1",
            name="Jordan Alvarez",
            email="jra7fw@virginia.edu",
            role="Student",
            category=RequestCategory.CLASSROOM_TECHNOLOGY,
            title="Replace failing projector in Monroe 120",
            description=(
                "Projector constantly resets mid-lecture causing delays. "
                "Need upgrade before spring semester."
            ),
            urgency="High",
            createdAt=now - timedelta(days=5),
            status="Pending",
        ),
        FundingRequest(
            id="req-2",
            name="Dr. Priya Raman",
            email="prr3@virginia.edu",
            role="Professor",
            category=RequestCategory.STUDENT_WORKER_SUPPORT,
            title="Additional TA for ECON 2010",
            description=(
                "Enrollment up 30% and only 2 TAs assigned. "
                "Requesting one more graduate TA for recitations."
            ),
            urgency="Medium",
            createdAt=now - timedelta(days=2),
            status="Pending",
        ),
    ]


class RequestStore:
    """Newest-first list of funding requests guarded by a lock."""

    def __init__(self, initial: list[FundingRequest] | None = None) -> None:
        self._lock = Lock()
        self._items: list[FundingRequest] = list(initial) if initial is not None else seed_requests()

    def list_requests(self, status: RequestStatus | None = None) -> list[FundingRequest]:
        with self._lock:
            items = list(self._items)
        if status:
            items = [r for r in items if r.status == status]
        return items

    def pending(self) -> list[FundingRequest]:
        return self.list_requests("Pending")

    def add(self, new: NewFundingRequest) -> FundingRequest:
        """Create a Pending request with a fresh id and timestamp and put it first."""
        request = FundingRequest(
            **new.model_dump(),
            id=str(uuid.uuid4()),
            status="Pending",
            createdAt=datetime.now(timezone.utc),
        )
        with self._lock:
            self._items.insert(0, request)
        logger.info("New funding request %s (%s)", request.id, request.category.value)
        return request
