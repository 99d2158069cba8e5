"""Pydantic schemas for funding requests."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class RequestCategory(str, Enum):
    """Closed set of funding categories. Every lookup is keyed by value."""

    PROFESSIONAL_DEVELOPMENT = "Professional Development & Training"
    CONFERENCE_TRAVEL = "Conference Travel & Presentations"
    TEACHING_MATERIALS = "Teaching Materials, Software, & Subscriptions"
    CLASSROOM_TECHNOLOGY = "Classroom & Instructional Technology"
    STUDENT_WORKER_SUPPORT = "TA / Grader / Student Worker Support"
    STUDENT_EXPERIENCE = "Student Experience, Events, & Programming"
    FACILITIES = "Space, Furniture, & Facility Improvements"
    RESEARCH_EQUIPMENT = "Research & Lab Equipment (mixed with teaching)"
    OTHER = "Other"


UserRole = Literal["Student", "Professor", "Staff", "Other"]
Urgency = Literal["Low", "Medium", "High"]
RequestStatus = Literal["Pending", "Approved", "Denied"]


class NewFundingRequest(BaseModel):
    """Submission body for a new funding request."""

    name: str = Field(min_length=1, description="Requester name", examples=["Jordan Alvarez"])
    email: str = Field(min_length=1, description="Requester email", examples=["jra7fw@virginia.edu"])
    role: UserRole = Field(description="Requester role")
    category: RequestCategory = Field(description="Funding category")
    title: str = Field(min_length=1, description="Short title")
    description: str = Field(min_length=1, description="Free-text justification")
    urgency: Urgency = Field(description="Low / Medium / High")

    @field_validator("name", "email", "title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class FundingRequest(NewFundingRequest):
    """A stored funding request. ``id`` and ``createdAt`` are set once at creation."""

    id: str = Field(description="Request ID", examples=["req-1"])
    status: RequestStatus = Field(default="Pending", description="Pending / Approved / Denied")
    createdAt: datetime = Field(description="Creation time (UTC)")
