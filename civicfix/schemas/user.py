"""사용자/세션 Pydantic 스키마.

Profile and session response schemas.
"""

from pydantic import BaseModel


class PrincipalResponse(BaseModel):
    id: str
    display_name: str | None = None
    email: str | None = None


class SessionResponse(BaseModel):
    """현재 세션 — principal이 없으면 null (Anonymous session has principal=null)."""

    principal: PrincipalResponse | None = None


class ProfileResponse(BaseModel):
    """프로필 응답 스키마.

    Attributes:
        id: 사용자 UUID (User identifier)
        name: 표시 이름 (Display name, falls back to token metadata)
        email: 이메일 (Email address)
        has_profile: 프로필 행 존재 여부 (Whether a users row exists)
    """

    id: str
    name: str
    email: str | None = None
    has_profile: bool
