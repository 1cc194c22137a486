"""이슈 Pydantic 스키마.

Issue request/response schemas, the filter criteria model, and display
labels for the fixed vocabularies.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from civicfix.models.issue import DEFAULT_PRIORITY
from civicfix.utils.geo import GeoPoint

# "제약 없음" 선택값 — Selector value meaning "no constraint"
ALL: str = "all"

CATEGORY_LABELS: dict[str, str] = {
    "pothole": "Pothole",
    "streetlight": "Broken Streetlight",
    "traffic": "Traffic Signal Issue",
    "sidewalk": "Sidewalk Problem",
    "graffiti": "Graffiti",
    "garbage": "Garbage/Litter",
    "water": "Water/Drainage",
    "park": "Park Maintenance",
    "other": "Other",
}

PRIORITY_LABELS: dict[str, str] = {
    "low": "Low Priority",
    "medium": "Medium Priority",
    "high": "High Priority",
    "urgent": "Urgent",
}

STATUS_LABELS: dict[str, str] = {
    "open": "Open",
    "in-progress": "In Progress",
    "resolved": "Resolved",
    "closed": "Closed",
}


class IssueDraft(BaseModel):
    """이슈 초안 — 사용자가 작성 중인 신고.

    Issue draft as authored by the user. Category and location stay
    optional here so the submission pipeline can report which one is
    missing; the title is required by the input control.
    """

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    category: str | None = None
    priority: str = DEFAULT_PRIORITY
    location: GeoPoint | None = None


class FilterCriteria(BaseModel):
    """이슈 목록 필터 — 네 개의 독립 조건 (AND 결합).

    Four independent feed filters, AND-combined. ``"all"`` or an empty value
    means no constraint.
    """

    search: str = ""
    status: str = ALL
    category: str = ALL
    priority: str = ALL

    @field_validator("status", "category", "priority", mode="before")
    @classmethod
    def _blank_means_all(cls, value: str | None) -> str:
        # 빈 선택값은 "all" — an empty selector applies no constraint
        if value is None or not str(value).strip():
            return ALL
        return value

    @classmethod
    def reset(cls) -> "FilterCriteria":
        return cls()

    @property
    def is_unconstrained(self) -> bool:
        return not self.search and self.status == ALL and self.category == ALL and self.priority == ALL


class IssueImageResponse(BaseModel):
    id: str
    url: str
    created_at: datetime | None = None


class IssueResponse(BaseModel):
    """이슈 응답 스키마 — Issue detail as returned by the API."""

    id: str
    title: str
    description: str | None = None
    category: str
    priority: str
    status: str
    location: GeoPoint | None = None
    user_id: str
    reporter_name: str | None = None
    assigned_to: str | None = None
    images: list[IssueImageResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class IssueListResponse(BaseModel):
    """이슈 목록 응답 — total은 필터 이전 전체 개수.

    ``total`` counts the unfiltered source so callers can tell
    "no issues yet" (total == 0) from "filters too narrow" (matched == 0).
    """

    items: list[IssueResponse]
    total: int
    matched: int


class IssueFeatureCollection(BaseModel):
    type: str = "FeatureCollection"
    features: list[dict[str, Any]]


class VocabularyOption(BaseModel):
    value: str
    label: str


class VocabularyResponse(BaseModel):
    categories: list[VocabularyOption]
    priorities: list[VocabularyOption]
    statuses: list[VocabularyOption]
