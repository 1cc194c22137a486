"""create_civicfix_schema

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2025-09-18 08:22:25.000000

사용자 프로필(users), 이슈(issues), 이슈 사진(images) 테이블 생성.
분류/우선순위/상태 CHECK 제약과 조회용 인덱스 포함.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATEGORIES = ("pothole", "streetlight", "traffic", "sidewalk", "graffiti", "garbage", "water", "park", "other")
PRIORITIES = ("low", "medium", "high", "urgent")
STATUSES = ("open", "in-progress", "resolved", "closed")


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "issues",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("priority", sa.String(20), server_default="medium", nullable=False),
        sa.Column("status", sa.String(20), server_default="open", nullable=False),
        sa.Column("location", sa.String(100), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_to", UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(_in_clause("category", CATEGORIES), name="issues_category_check"),
        sa.CheckConstraint(_in_clause("priority", PRIORITIES), name="issues_priority_check"),
        sa.CheckConstraint(_in_clause("status", STATUSES), name="issues_status_check"),
    )
    op.create_index("idx_issues_category", "issues", ["category"])
    op.create_index("idx_issues_priority", "issues", ["priority"])
    op.create_index("idx_issues_status", "issues", ["status"])
    op.create_index("idx_issues_created_at", "issues", ["created_at"])
    op.create_index("idx_issues_user_id", "issues", ["user_id"])

    op.create_table(
        "images",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("issue_id", UUID(as_uuid=True), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_images_issue_id", "images", ["issue_id"])


def downgrade() -> None:
    op.drop_index("ix_images_issue_id")
    op.drop_table("images")
    op.drop_index("idx_issues_user_id")
    op.drop_index("idx_issues_created_at")
    op.drop_index("idx_issues_status")
    op.drop_index("idx_issues_priority")
    op.drop_index("idx_issues_category")
    op.drop_table("issues")
    op.drop_table("users")
