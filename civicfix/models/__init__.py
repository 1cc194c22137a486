"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 프로필 (User profiles)
    issue: 이슈 및 첨부 사진 (Issues and their images)
"""

from civicfix.models.user import User
from civicfix.models.issue import Issue, IssueImage

__all__ = [
    "User",
    "Issue", "IssueImage",
]
