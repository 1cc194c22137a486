"""이슈 레포지토리.

Issue repository — Handles issues and images DB queries.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from civicfix.models.issue import Issue, IssueImage
from civicfix.repositories.base import BaseRepository


class IssueRepository(BaseRepository[Issue]):

    def __init__(self) -> None:
        super().__init__(Issue)

    async def list_recent(self, db: AsyncSession) -> Sequence[Issue]:
        """전체 이슈를 최신순으로 조회 — All issues, newest first, reporter loaded."""
        query: Select = (
            select(Issue)
            .options(selectinload(Issue.reporter), selectinload(Issue.images))
            .order_by(Issue.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_detail(self, db: AsyncSession, issue_id: UUID) -> Issue | None:
        query: Select = (
            select(Issue)
            .options(selectinload(Issue.reporter), selectinload(Issue.images))
            .where(Issue.id == issue_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()


class IssueImageRepository(BaseRepository[IssueImage]):

    def __init__(self) -> None:
        super().__init__(IssueImage)

    async def create_for_issue(self, db: AsyncSession, issue_id: UUID, url: str) -> IssueImage:
        data: dict[str, Any] = {"issue_id": issue_id, "url": url}
        return await self.create(db, data)


issue_repository: IssueRepository = IssueRepository()
issue_image_repository: IssueImageRepository = IssueImageRepository()
