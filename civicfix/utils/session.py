"""인증 세션 컨텍스트.

Authentication session context. The identity provider reports sign-in and
sign-out as ``SessionChanged`` events; components that need the current
principal receive a ``SessionContext`` explicitly and may subscribe to
changes instead of reading global state.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class Principal:
    """인증된 사용자 — Authenticated principal supplied by the identity provider."""

    id: UUID
    display_name: str | None = None
    email: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        """JWT 클레임에서 생성 — Build from decoded token claims (``sub``, ``name``, ``email``).

        Raises:
            KeyError: ``sub`` 클레임 없음 (Missing ``sub`` claim)
            ValueError: ``sub``가 UUID가 아님 (``sub`` is not a UUID)
        """
        return cls(
            id=UUID(str(claims["sub"])),
            display_name=claims.get("name") or claims.get("full_name"),
            email=claims.get("email"),
        )

    @property
    def profile_name(self) -> str:
        # 프로필 upsert용 이름 — Name written on profile upsert
        return self.display_name or self.email or ""

    @property
    def fallback_name(self) -> str:
        # 프로필 행이 없을 때 헤더 표시용 — Shown when no profile row exists
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return "User"


@dataclass(frozen=True)
class SessionChanged:
    """세션 변경 이벤트 — principal이 None이면 로그아웃."""

    principal: Principal | None


SessionListener = Callable[[SessionChanged], None]


class SessionContext:
    """현재 principal을 보관하고 변경을 구독자에게 알립니다.

    Holds the current principal and notifies subscribers on every applied
    ``SessionChanged`` event. Listeners are called in subscription order.
    """

    def __init__(self, principal: Principal | None = None) -> None:
        self._principal: Principal | None = principal
        self._listeners: list[SessionListener] = []

    @property
    def principal(self) -> Principal | None:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """리스너 등록 — returns a callable that unsubscribes the listener."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def apply(self, event: SessionChanged) -> None:
        self._principal = event.principal
        for listener in list(self._listeners):
            listener(event)
