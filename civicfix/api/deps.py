"""FastAPI 의존성 주입 모듈 — 인증 세션.

FastAPI dependency injection module — Authentication session.
Builds a per-request ``SessionContext`` from the optional bearer token.
Reads are public, so a missing or invalid token yields an anonymous
session instead of an error; endpoints that need a principal check it
themselves (the submission pipeline raises NotAuthenticatedError).

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer(auto_error=False)가 토큰을 추출 (Token extracted if present)
    3. decode_token()이 JWT를 검증 (JWT verified)
    4. 클레임으로 Principal 생성 (Principal built from sub/name/email claims)
"""

import logging
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from civicfix.utils.jwt import decode_token
from civicfix.utils.session import Principal, SessionContext

logger = logging.getLogger(__name__)

# HTTP Bearer 토큰 추출기 — 헤더가 없어도 401을 내지 않음 (No automatic 401)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> SessionContext:
    """요청의 인증 세션을 생성합니다.

    Build the session context for the current request.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명, 없으면 None (Bearer credentials or None)

    Returns:
        SessionContext: principal이 있거나 익명인 세션 (Authenticated or anonymous session)
    """
    if credentials is None:
        return SessionContext()

    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            logger.info("Rejected token with type %r", payload.get("type"))
            return SessionContext()
        return SessionContext(Principal.from_claims(payload))
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError, KeyError, ValueError) as exc:
        logger.info("Ignoring invalid bearer token: %s", exc)
        return SessionContext()
