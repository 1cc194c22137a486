"""앱 API 라우터 패키지 — 모든 시민용 엔드포인트 통합.

App API Router package — Aggregates all citizen-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - profile: 현재 세션 및 프로필 (Current session and profile)
    - issues: 이슈 피드, 지도, 상세, 신고 (Issue feed, map, detail, submission)
"""

from fastapi import APIRouter

from civicfix.api.app.profile import router as profile_router
from civicfix.api.app.issues import router as issues_router

app_router: APIRouter = APIRouter()

# 세션/프로필: /auth/session, /profile
app_router.include_router(profile_router, tags=["Profile"])
# 이슈: /issues 하위 (Issue feed, map, detail, submission)
app_router.include_router(issues_router, prefix="/issues", tags=["Issues"])
