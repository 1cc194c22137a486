"""앱 이슈 라우터 — 시민용 이슈 API.

App Issue Router — Citizen-facing issue endpoints.
Anyone can browse the feed, the map and issue details; submitting an issue
requires an authenticated session.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.api.deps import get_session
from civicfix.database import get_db
from civicfix.models.issue import DEFAULT_PRIORITY
from civicfix.schemas.issue import (
    ALL,
    FilterCriteria,
    IssueDraft,
    IssueFeatureCollection,
    IssueListResponse,
    IssueResponse,
    VocabularyResponse,
)
from civicfix.services.issue_service import issue_service
from civicfix.services.submission_service import DraftImages, SelectedImage, issue_submission_service
from civicfix.utils.exceptions import IssueValidationError
from civicfix.utils.geo import GeoPoint
from civicfix.utils.session import SessionContext

router: APIRouter = APIRouter()


def get_filter_criteria(
    search: Annotated[str, Query()] = "",
    status: Annotated[str, Query()] = ALL,
    category: Annotated[str, Query()] = ALL,
    priority: Annotated[str, Query()] = ALL,
) -> FilterCriteria:
    return FilterCriteria(search=search, status=status, category=category, priority=priority)


@router.get("", response_model=IssueListResponse)
async def list_issues(
    db: Annotated[AsyncSession, Depends(get_db)],
    criteria: Annotated[FilterCriteria, Depends(get_filter_criteria)],
) -> dict:
    """이슈 피드 조회 (최신순, 필터 적용)."""
    issues, total = await issue_service.list_issues(db, criteria)
    items = [issue_service.build_response(issue) for issue in issues]
    return {"items": items, "total": total, "matched": len(items)}


@router.get("/map", response_model=IssueFeatureCollection)
async def issue_map(
    db: Annotated[AsyncSession, Depends(get_db)],
    criteria: Annotated[FilterCriteria, Depends(get_filter_criteria)],
) -> dict:
    """지도용 GeoJSON FeatureCollection."""
    return await issue_service.map_features(db, criteria)


@router.get("/categories", response_model=VocabularyResponse)
async def issue_vocabularies() -> dict:
    """분류/우선순위/상태 목록."""
    return issue_service.vocabularies()


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """이슈 상세 조회."""
    issue = await issue_service.get_detail(db, issue_id)
    return issue_service.build_response(issue)


@router.post("", status_code=201, response_model=IssueResponse)
async def create_issue(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionContext, Depends(get_session)],
    title: Annotated[str, Form()],
    description: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    priority: Annotated[str, Form()] = DEFAULT_PRIORITY,
    latitude: Annotated[float | None, Form()] = None,
    longitude: Annotated[float | None, Form()] = None,
    images: Annotated[list[UploadFile] | None, File()] = None,
) -> dict:
    """이슈 신고 — multipart 폼 + 사진 최대 5장.

    Report an issue. More photos than the limit rejects the request before
    anything is persisted; individual photo failures never fail the request.
    """
    draft_images = DraftImages()
    draft_images.bind(session)
    selected = [
        SelectedImage(
            filename=upload.filename,
            content=await upload.read(),
            content_type=upload.content_type,
        )
        for upload in images or []
        if upload.filename
    ]
    draft_images.add(*selected)

    try:
        location = GeoPoint(lat=latitude, lng=longitude) if latitude is not None and longitude is not None else None
        draft = IssueDraft(
            title=title,
            description=description,
            category=category,
            priority=priority or DEFAULT_PRIORITY,
            location=location,
        )
    except ValidationError as exc:
        raise IssueValidationError(str(exc)) from exc

    issue = await issue_submission_service.submit(db, draft, draft_images, session)
    return issue_service.build_response(issue)
