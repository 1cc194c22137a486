"""이슈 제출 서비스 — 검증, 이슈 생성, 사진 첨부.

Issue submission service — Turns a draft into durable Issue + Image records.

Steps run strictly in order:
    1. 프로필 확인 (Ensure the reporter profile exists)
    2. 이슈 생성 (Insert the issue; fatal on failure)
    3. 사진 첨부 (Upload and record each image, one at a time; a failed
       image is logged and skipped, the issue is never rolled back)

Validation happens before step 1 and never touches the database or storage.
"""

import logging
import re
import time
import uuid
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from civicfix.config import settings
from civicfix.models.issue import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    ISSUE_CATEGORIES,
    ISSUE_PRIORITIES,
    Issue,
    IssueImage,
)
from civicfix.repositories.issue_repository import issue_image_repository, issue_repository
from civicfix.repositories.user_repository import user_repository
from civicfix.schemas.issue import IssueDraft
from civicfix.services.storage_service import StorageService, storage_service
from civicfix.utils.exceptions import (
    IssueCreateFailedError,
    IssueValidationError,
    NotAuthenticatedError,
    ProfileSyncFailedError,
    TooManyImagesError,
)
from civicfix.utils.geo import GeoPoint
from civicfix.utils.session import Principal, SessionChanged, SessionContext

logger = logging.getLogger(__name__)

# 저장소 키에 쓰이는 확장자 — alphanumeric only, otherwise "bin"
_EXTENSION = re.compile(r"[A-Za-z0-9]{1,10}")


@dataclass(frozen=True)
class SelectedImage:
    """사용자가 선택한 사진 한 장 — One photo picked by the user."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        if "." in self.filename:
            ext = self.filename.rsplit(".", 1)[-1]
            if _EXTENSION.fullmatch(ext):
                return ext
        return "bin"


class DraftImages:
    """제출 전 사진 선택 목록 — 최대 개수를 넘는 추가는 거부.

    Images queued on a draft. An addition that would exceed the limit is
    rejected as a whole with TooManyImagesError and the queue is left as it
    was. Bound to a SessionContext, the queue empties on sign-out.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit: int = limit if limit is not None else settings.MAX_IMAGES_PER_ISSUE
        self._images: list[SelectedImage] = []

    def add(self, *images: SelectedImage) -> None:
        if len(self._images) + len(images) > self.limit:
            raise TooManyImagesError(self.limit)
        self._images.extend(images)

    def remove(self, index: int) -> SelectedImage:
        return self._images.pop(index)

    def clear(self) -> None:
        self._images.clear()

    def bind(self, session: SessionContext) -> Callable[[], None]:
        return session.subscribe(self._on_session_changed)

    def _on_session_changed(self, event: SessionChanged) -> None:
        if event.principal is None:
            self.clear()

    @property
    def images(self) -> tuple[SelectedImage, ...]:
        return tuple(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[SelectedImage]:
        return iter(tuple(self._images))


@dataclass(frozen=True)
class ImageFailure:
    """사진 한 장의 실패 — stage는 "upload" 또는 "record"."""

    image: SelectedImage
    stage: str
    cause: BaseException


@dataclass
class ImageAttachmentResult:
    succeeded: list[IssueImage] = field(default_factory=list)
    failed: list[ImageFailure] = field(default_factory=list)


def validate_draft(draft: IssueDraft) -> GeoPoint:
    """초안을 검증하고 위치를 반환합니다 — I/O 없음.

    Validate a draft before any network or database effect.

    Returns:
        GeoPoint: 검증된 위치 (Validated location)

    Raises:
        IssueValidationError: 위치/분류 누락 또는 허용되지 않은 값
                              (Missing location/category or value outside the vocabulary)
    """
    if draft.location is None:
        raise IssueValidationError("Location required: please select a location for the issue")
    if not draft.category:
        raise IssueValidationError("Category required: please select a category for the issue")
    if draft.category not in ISSUE_CATEGORIES:
        raise IssueValidationError(f"Invalid category: {draft.category!r}")
    if (draft.priority or DEFAULT_PRIORITY) not in ISSUE_PRIORITIES:
        raise IssueValidationError(f"Invalid priority: {draft.priority!r}")
    return draft.location


def build_object_key(issue_id: uuid.UUID, index: int, image: SelectedImage, now_ms: int | None = None) -> str:
    """저장소 키 — "{issue_id}/{epoch_ms}-{index}.{ext}", unique even for same-named files."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{issue_id}/{now_ms}-{index}.{image.extension}"


class IssueSubmissionService:

    def __init__(self, storage: StorageService | None = None, bucket: str | None = None) -> None:
        self.storage: StorageService = storage if storage is not None else storage_service
        self.bucket: str = bucket or settings.ISSUE_IMAGES_BUCKET

    async def submit(
        self,
        db: AsyncSession,
        draft: IssueDraft,
        images: Sequence[SelectedImage] | DraftImages,
        session: SessionContext,
    ) -> Issue:
        """이슈를 제출합니다.

        Submit a draft. Succeeds once the issue row exists, whatever happens
        to individual images.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            draft: 이슈 초안 (Issue draft)
            images: 선택된 사진, 선택 순서대로 (Selected images, in selection order)
            session: 현재 인증 세션 (Current auth session)

        Returns:
            Issue: 생성된 이슈, 첨부에 성공한 사진 포함 (Created issue with attached images)

        Raises:
            IssueValidationError: 초안 검증 실패 (Invalid draft, nothing persisted)
            NotAuthenticatedError: 로그인하지 않음 (No principal)
            ProfileSyncFailedError: 프로필 동기화 실패 (Profile could not be ensured)
            IssueCreateFailedError: 이슈 생성 실패 (Issue insert rejected)
        """
        location = validate_draft(draft)

        principal = session.principal
        if principal is None:
            raise NotAuthenticatedError()

        await self._ensure_profile(db, principal)
        issue = await self._create_issue(db, draft, location, principal)
        issue_id = issue.id

        selected = list(images)
        if selected:
            result = await self.attach_images(db, issue_id, selected)
            if result.failed:
                logger.warning(
                    "Issue %s created with %d of %d images attached",
                    issue_id, len(result.succeeded), len(selected),
                )

        if isinstance(images, DraftImages):
            images.clear()

        created = await issue_repository.get_detail(db, issue_id)
        return created if created is not None else issue

    async def _ensure_profile(self, db: AsyncSession, principal: Principal) -> None:
        try:
            await user_repository.upsert(db, principal.id, principal.profile_name, principal.email)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            try:
                exists = await user_repository.profile_exists(db, principal.id)
            except SQLAlchemyError:
                exists = False
            if not exists:
                raise ProfileSyncFailedError(exc) from exc
            logger.warning("Profile upsert failed for %s, using existing profile: %s", principal.id, exc)

    async def _create_issue(
        self,
        db: AsyncSession,
        draft: IssueDraft,
        location: GeoPoint,
        principal: Principal,
    ) -> Issue:
        issue_id = uuid.uuid4()
        try:
            issue: Issue = await issue_repository.create(
                db,
                {
                    "id": issue_id,
                    "title": draft.title,
                    "description": draft.description or None,
                    "category": draft.category,
                    "priority": draft.priority or DEFAULT_PRIORITY,
                    "status": DEFAULT_STATUS,
                    "location": location.to_ewkt(),
                    "user_id": principal.id,
                },
            )
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("Issue insert failed: %s", exc)
            raise IssueCreateFailedError(exc) from exc
        logger.info("Issue %s created by %s", issue_id, principal.id)
        return issue

    async def attach_images(
        self,
        db: AsyncSession,
        issue_id: uuid.UUID,
        images: Sequence[SelectedImage],
    ) -> ImageAttachmentResult:
        """사진을 순서대로 하나씩 업로드하고 레코드를 생성합니다.

        Upload each image and insert its record, one at a time in order.
        Never raises: each failure is logged, collected and skipped. A record
        insert failure leaves the uploaded object orphaned in storage.
        """
        result = ImageAttachmentResult()
        for index, image in enumerate(images):
            key = build_object_key(issue_id, index, image)

            try:
                await run_in_threadpool(self.storage.put_object, self.bucket, key, image.content, image.content_type)
            except Exception as exc:
                logger.warning("Image upload failed for issue %s (%s): %s", issue_id, image.filename, exc)
                result.failed.append(ImageFailure(image, "upload", exc))
                continue

            url = self.storage.get_public_url(self.bucket, key)
            try:
                record = await issue_image_repository.create_for_issue(db, issue_id, url)
                await db.commit()
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.warning("Image record creation failed for issue %s (%s): %s", issue_id, key, exc)
                result.failed.append(ImageFailure(image, "record", exc))
                continue

            result.succeeded.append(record)
        return result


issue_submission_service: IssueSubmissionService = IssueSubmissionService()
