"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh schema on a single shared connection (StaticPool),
and object storage runs in local mode under a temporary directory.
"""

import os
import tempfile
import uuid
from collections.abc import AsyncGenerator

# 앱 임포트 전에 환경 고정 — Pin the environment before civicfix is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["AXIOM_API_TOKEN"] = ""
os.environ.setdefault("LOCAL_UPLOADS_DIR", tempfile.mkdtemp(prefix="civicfix-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from civicfix.database import Base, get_db
from civicfix.main import app
from civicfix.models import *  # noqa: F401,F403 — register all models with metadata
from civicfix.services.storage_service import StorageService
from civicfix.utils.jwt import create_access_token
from civicfix.utils.session import Principal, SessionContext


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 새 스키마."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def local_uploads(tmp_path, monkeypatch):
    """전역 storage_service를 임시 디렉토리로 돌립니다."""
    from civicfix.services.storage_service import storage_service
    monkeypatch.setattr(storage_service, "uploads_dir", tmp_path / "uploads")
    return tmp_path / "uploads"


# ---------------------------------------------------------------------------
# 헬퍼: 가짜 스토리지 (업로드 실패 주입)
# ---------------------------------------------------------------------------
class RecordingStorage(StorageService):
    """업로드 호출을 기록하고 지정된 순번에서 실패하는 스토리지."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        super().__init__()
        self.fail_on: set[int] = fail_on or set()
        self.calls: list[tuple[str, str]] = []
        self.stored: dict[str, bytes] = {}

    def put_object(self, bucket, key, data, content_type=None) -> None:
        index = len(self.calls)
        self.calls.append((bucket, key))
        if index in self.fail_on:
            raise OSError(f"simulated upload failure #{index}")
        self.stored[key] = data

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"https://cdn.test/{bucket}/{key}"


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 인증된 시민
# ---------------------------------------------------------------------------
@pytest.fixture
def citizen() -> Principal:
    return Principal(id=uuid.uuid4(), display_name="Jane Citizen", email="jane@example.org")


@pytest.fixture
def citizen_session(citizen: Principal) -> SessionContext:
    return SessionContext(citizen)


def make_token(principal: Principal) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    claims = {"sub": str(principal.id)}
    if principal.display_name:
        claims["name"] = principal.display_name
    if principal.email:
        claims["email"] = principal.email
    return create_access_token(claims)


@pytest.fixture
def citizen_token(citizen: Principal) -> str:
    return make_token(citizen)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
