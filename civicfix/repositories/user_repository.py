"""사용자 프로필 레포지토리.

User profile repository — Handles users table queries, including the
idempotent profile upsert performed before issue submission.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.models.user import User
from civicfix.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self) -> None:
        super().__init__(User)

    async def upsert(
        self,
        db: AsyncSession,
        user_id: UUID,
        name: str,
        email: str | None = None,
    ) -> User:
        """프로필을 생성하거나 이름/이메일을 갱신합니다 (멱등).

        Insert the profile row or refresh its name/email. Idempotent.
        """
        existing = await self.get_by_id(db, user_id)
        if existing is None:
            return await self.create(db, {"id": user_id, "name": name, "email": email})

        update_data: dict = {"name": name}
        if email is not None:
            update_data["email"] = email
        updated = await self.update(db, user_id, update_data)
        return updated if updated is not None else existing

    async def profile_exists(self, db: AsyncSession, user_id: UUID) -> bool:
        return await self.exists(db, {"id": user_id})


user_repository: UserRepository = UserRepository()
