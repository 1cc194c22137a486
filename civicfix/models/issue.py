"""이슈 및 이슈 사진 SQLAlchemy ORM 모델 정의.

Issue and issue image SQLAlchemy ORM model definitions.
Enumerated columns are guarded by CHECK constraints so the record store
rejects anything outside the fixed vocabularies.

Tables:
    - issues: 시민 신고 이슈 (Citizen-submitted issue reports)
    - images: 이슈 첨부 사진 (Photos attached to an issue)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Text, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicfix.database import Base

# 고정 열거형 — Fixed vocabularies enforced by CHECK constraints
ISSUE_CATEGORIES: tuple[str, ...] = (
    "pothole", "streetlight", "traffic", "sidewalk", "graffiti",
    "garbage", "water", "park", "other",
)
ISSUE_PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "urgent")
ISSUE_STATUSES: tuple[str, ...] = ("open", "in-progress", "resolved", "closed")

DEFAULT_PRIORITY: str = "medium"
DEFAULT_STATUS: str = "open"


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Issue(Base):
    """이슈 모델 — 시민이 제출한 지오태그 신고.

    Issue model — A geotagged report submitted by a citizen.
    The id is generated by the submission pipeline before insert,
    and neither id nor user_id changes afterwards.

    Attributes:
        id: 고유 식별자 UUID (Client-generated unique identifier)
        title: 제목 (Title, required)
        description: 상세 설명 (Description, optional)
        category: 분류 (Category, one of ISSUE_CATEGORIES)
        priority: 우선순위 (Priority, one of ISSUE_PRIORITIES)
        status: 처리 상태 (Status, one of ISSUE_STATUSES)
        location: 위치 EWKT (Point geometry, "SRID=4326;POINT(lng lat)")
        user_id: 보고자 FK (Reporting user)
        assigned_to: 담당자 (Always NULL; assignment is not handled here)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        reporter: 보고자 프로필 (Reporting user profile)
        images: 첨부 사진 목록 (Attached images, cascade delete)
    """

    __tablename__ = "issues"

    # 이슈 고유 식별자 — 제출 파이프라인에서 생성 (Generated by the submission pipeline)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 제목 — Issue title
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    # 상세 설명 — Free-text description (optional)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 분류 — Category
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    # 우선순위 — Priority level
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_PRIORITY)
    # 처리 상태 — Workflow status: open → in-progress → resolved → closed
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_STATUS)
    # 위치 — EWKT point geometry (WGS-84, lng lat order)
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    # 보고자 FK — Reporting user (immutable after insert)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    # 담당자 — Always NULL on citizen submissions
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint(_in_clause("category", ISSUE_CATEGORIES), name="issues_category_check"),
        CheckConstraint(_in_clause("priority", ISSUE_PRIORITIES), name="issues_priority_check"),
        CheckConstraint(_in_clause("status", ISSUE_STATUSES), name="issues_status_check"),
        Index("idx_issues_category", "category"),
        Index("idx_issues_priority", "priority"),
        Index("idx_issues_status", "status"),
        Index("idx_issues_created_at", "created_at"),
        Index("idx_issues_user_id", "user_id"),
    )

    # 관계 — Relationships
    reporter = relationship("User", back_populates="issues")
    images = relationship(
        "IssueImage",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueImage.created_at",
    )


class IssueImage(Base):
    """이슈 사진 모델 — 저장소에 업로드된 사진의 공개 URL.

    Issue image model — Public URL of a photo stored in object storage.
    A row is inserted only after the object has been stored.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        issue_id: 소속 이슈 FK (Owning issue)
        url: 공개 URL (Public object URL)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "images"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 이슈 FK — CASCADE: 이슈 삭제 시 사진 레코드도 삭제
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_images_issue_id", "issue_id"),
    )

    # 관계 — Relationships
    issue = relationship("Issue", back_populates="images")
