"""프로필 서비스 — 현재 사용자 프로필 조회.

Profile Service — Reads the current principal's profile. When no users row
exists yet, the name falls back to the token metadata.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.repositories.user_repository import user_repository
from civicfix.schemas.user import ProfileResponse
from civicfix.utils.session import Principal

logger = logging.getLogger(__name__)


class ProfileService:

    async def get_profile(self, db: AsyncSession, principal: Principal) -> ProfileResponse:
        """내 프로필을 조회합니다.

        Get the current principal's profile, falling back to
        display name → email local part → "User" when unavailable.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            principal: 인증된 사용자 (Authenticated principal)

        Returns:
            ProfileResponse: 프로필 정보 (Profile information)
        """
        try:
            user = await user_repository.get_by_id(db, principal.id)
        except SQLAlchemyError as exc:
            logger.warning("Error fetching user profile %s: %s", principal.id, exc)
            user = None

        if user is None or not user.name:
            return ProfileResponse(
                id=str(principal.id),
                name=principal.fallback_name,
                email=(user.email if user else None) or principal.email,
                has_profile=user is not None,
            )
        return ProfileResponse(
            id=str(user.id),
            name=user.name,
            email=user.email or principal.email,
            has_profile=True,
        )


profile_service: ProfileService = ProfileService()
