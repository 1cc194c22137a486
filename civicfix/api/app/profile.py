"""앱 프로필/세션 라우터.

App Profile Router — Current session and profile endpoints.
Sign-in and sign-out happen at the identity provider; this router only
reports who the bearer token belongs to.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.api.deps import get_session
from civicfix.database import get_db
from civicfix.schemas.user import ProfileResponse, SessionResponse
from civicfix.services.profile_service import profile_service
from civicfix.utils.exceptions import UnauthorizedError
from civicfix.utils.session import SessionContext

router: APIRouter = APIRouter()


@router.get("/auth/session", response_model=SessionResponse)
async def get_current_session(
    session: Annotated[SessionContext, Depends(get_session)],
) -> dict:
    """현재 세션 — 익명이면 principal이 null."""
    principal = session.principal
    if principal is None:
        return {"principal": None}
    return {
        "principal": {
            "id": str(principal.id),
            "display_name": principal.display_name,
            "email": principal.email,
        }
    }


@router.get("/profile", response_model=ProfileResponse)
async def get_my_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionContext, Depends(get_session)],
) -> ProfileResponse:
    """내 프로필을 조회합니다.

    Get the current user's profile.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        session: 인증 세션 (Auth session)

    Returns:
        ProfileResponse: 프로필 정보 (Profile information)
    """
    if session.principal is None:
        raise UnauthorizedError()
    return await profile_service.get_profile(db, session.principal)
