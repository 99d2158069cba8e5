"""Pydantic schemas for the department course-evaluation summary."""
from __future__ import annotations

from pydantic import BaseModel, Field


class Theme(BaseModel):
    theme: str = Field(description="Recurring theme in course evaluations")
    count: int = Field(ge=0, description="Number of comments mentioning it")


class DepartmentSummary(BaseModel):
    """Aggregated course-evaluation feedback for one department."""

    departmentName: str = Field(examples=["Economics"])
    avgResourcesRating: float = Field(ge=1, le=5, description="Average resources rating (1-5)")
    avgTeachingRating: float = Field(ge=1, le=5, description="Average teaching rating (1-5)")
    topThemes: list[Theme] = Field(default=[])
    sampleComments: list[str] = Field(default=[])
