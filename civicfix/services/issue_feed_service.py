"""이슈 피드 서비스 — 필터/검색 및 로딩 상태.

Issue feed service — Client-side style filter/search over the fetched issue
collection, plus the per-screen load lifecycle.

derive_view() is a pure function and is re-run on every request; the feed
never caches a derived view, so a changed source or criteria always yields
a fresh result.
"""

import enum
import logging
from collections.abc import Sequence
from typing import Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.models.issue import Issue
from civicfix.repositories.issue_repository import issue_repository
from civicfix.schemas.issue import ALL, FilterCriteria
from civicfix.utils.exceptions import FetchFailedError

logger = logging.getLogger(__name__)


class Filterable(Protocol):
    title: str
    description: str | None
    status: str
    category: str
    priority: str


T = TypeVar("T", bound=Filterable)


def _matches_search(issue: Filterable, needle: str) -> bool:
    if needle in issue.title.lower():
        return True
    return issue.description is not None and needle in issue.description.lower()


def matches(issue: Filterable, criteria: FilterCriteria) -> bool:
    """이슈가 모든 활성 조건을 만족하는지 — True iff every active predicate holds."""
    if criteria.search and not _matches_search(issue, criteria.search.lower()):
        return False
    if criteria.status != ALL and issue.status != criteria.status:
        return False
    if criteria.category != ALL and issue.category != criteria.category:
        return False
    if criteria.priority != ALL and issue.priority != criteria.priority:
        return False
    return True


def derive_view(source: Sequence[T], criteria: FilterCriteria) -> list[T]:
    """필터된 목록을 계산합니다 (원본 순서 유지).

    Derive the filtered view of ``source``. Pure; preserves source order.
    With no active predicate the result equals ``source``.

    Args:
        source: 전체 이슈 목록, 최신순 (Full issue collection, newest first)
        criteria: 필터 조건 (Filter criteria)

    Returns:
        list: 모든 활성 조건을 만족하는 이슈 (Issues satisfying all active predicates)
    """
    if criteria.is_unconstrained:
        return list(source)
    return [issue for issue in source if matches(issue, criteria)]


class FeedState(str, enum.Enum):
    LOADING = "loading"
    READY = "ready"
    LOAD_ERRORED = "load_errored"


class IssueFeed:
    """화면별 이슈 피드 — 로딩 상태와 원본 목록을 보관.

    Per-screen issue feed. Holds the fetched source and its load state:
    LOADING → READY on success, LOADING → LOAD_ERRORED on failure (source
    stays empty, or stale after an earlier success). A later successful
    load() replaces the source entirely and re-enters READY.
    """

    def __init__(self) -> None:
        self.state: FeedState = FeedState.LOADING
        self._source: list[Issue] = []

    @property
    def source(self) -> list[Issue]:
        return self._source

    @property
    def is_empty(self) -> bool:
        return not self._source

    async def load(self, db: AsyncSession) -> list[Issue]:
        """최신순 전체 이슈를 다시 불러옵니다.

        Fetch all issues (newest first) and replace the source.

        Raises:
            FetchFailedError: 조회 실패 (Query failed; state becomes LOAD_ERRORED)
        """
        try:
            issues = await issue_repository.list_recent(db)
        except SQLAlchemyError as exc:
            logger.warning("Failed to load issues: %s", exc)
            # 원본은 그대로 둠 — source is left untouched, never partially replaced
            self.state = FeedState.LOAD_ERRORED
            raise FetchFailedError(exc) from exc

        self._source = list(issues)
        self.state = FeedState.READY
        return self._source

    def view(self, criteria: FilterCriteria) -> list[Issue]:
        return derive_view(self._source, criteria)
