"""이슈 조회 서비스.

Issue read service — Feed listing, map features, detail and vocabularies.
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.models.issue import ISSUE_CATEGORIES, ISSUE_PRIORITIES, ISSUE_STATUSES, Issue
from civicfix.repositories.issue_repository import issue_repository
from civicfix.schemas.issue import (
    CATEGORY_LABELS,
    PRIORITY_LABELS,
    STATUS_LABELS,
    FilterCriteria,
)
from civicfix.services.issue_feed_service import IssueFeed
from civicfix.utils.exceptions import NotFoundError
from civicfix.utils.geo import GeoPoint, parse_location

logger = logging.getLogger(__name__)


class IssueService:

    def _location(self, issue: Issue) -> GeoPoint | None:
        try:
            return parse_location(issue.location)
        except ValueError as exc:
            logger.warning("Issue %s has an unreadable location %r: %s", issue.id, issue.location, exc)
            return None

    def build_response(self, issue: Issue) -> dict:
        location = self._location(issue)
        return {
            "id": str(issue.id),
            "title": issue.title,
            "description": issue.description,
            "category": issue.category,
            "priority": issue.priority,
            "status": issue.status,
            "location": location.model_dump() if location else None,
            "user_id": str(issue.user_id),
            "reporter_name": issue.reporter.name if issue.reporter else None,
            "assigned_to": str(issue.assigned_to) if issue.assigned_to else None,
            "images": [
                {"id": str(image.id), "url": image.url, "created_at": image.created_at}
                for image in issue.images
            ],
            "created_at": issue.created_at,
            "updated_at": issue.updated_at,
        }

    def build_feature(self, issue: Issue) -> dict[str, Any] | None:
        """GeoJSON Feature — 위치를 읽을 수 없으면 None (Skipped when unreadable)."""
        location = self._location(issue)
        if location is None:
            return None
        return {
            "type": "Feature",
            "id": str(issue.id),
            "geometry": location.to_geojson(),
            "properties": {
                "title": issue.title,
                "category": issue.category,
                "category_label": CATEGORY_LABELS.get(issue.category, issue.category),
                "priority": issue.priority,
                "status": issue.status,
                "created_at": issue.created_at.isoformat() if issue.created_at else None,
            },
        }

    # --- Feed ---

    async def list_issues(
        self,
        db: AsyncSession,
        criteria: FilterCriteria,
    ) -> tuple[Sequence[Issue], int]:
        """필터된 이슈와 필터 이전 전체 개수 — Filtered issues and unfiltered total."""
        feed = IssueFeed()
        await feed.load(db)
        return feed.view(criteria), len(feed.source)

    async def map_features(self, db: AsyncSession, criteria: FilterCriteria) -> dict[str, Any]:
        issues, _ = await self.list_issues(db, criteria)
        features = [f for f in (self.build_feature(issue) for issue in issues) if f is not None]
        return {"type": "FeatureCollection", "features": features}

    async def get_detail(self, db: AsyncSession, issue_id: UUID) -> Issue:
        issue = await issue_repository.get_detail(db, issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    def vocabularies(self) -> dict[str, list[dict[str, str]]]:
        return {
            "categories": [{"value": v, "label": CATEGORY_LABELS[v]} for v in ISSUE_CATEGORIES],
            "priorities": [{"value": v, "label": PRIORITY_LABELS[v]} for v in ISSUE_PRIORITIES],
            "statuses": [{"value": v, "label": STATUS_LABELS[v]} for v in ISSUE_STATUSES],
        }


issue_service: IssueService = IssueService()
