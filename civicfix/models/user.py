"""사용자 프로필 SQLAlchemy ORM 모델 정의.

User profile SQLAlchemy ORM model definition.
Profiles mirror identities established by the external identity provider;
the row id equals the provider's principal id.

Tables:
    - users: 사용자 프로필 (Minimal display identity)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicfix.database import Base


class User(Base):
    """사용자 프로필 모델 — 표시용 최소 신원 정보.

    User profile model — Minimal display identity.
    Created by the identity provider's sign-up hook and upserted
    before each issue submission so the issues FK is always satisfied.

    Attributes:
        id: 고유 식별자 UUID (Principal id from the identity provider)
        name: 표시 이름 (Display name, optional)
        email: 이메일 (Email address, optional)
        created_at: 생성 일시 UTC (Creation timestamp)

    Relationships:
        issues: 이 사용자가 보고한 이슈 목록 (Issues reported by this user)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — 외부 ID 공급자의 principal id와 동일 (Not auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    # 표시 이름 — Display name shown next to reported issues
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 이메일 — Email address (optional)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    issues = relationship("Issue", back_populates="reporter")
