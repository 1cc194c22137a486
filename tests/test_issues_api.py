"""이슈/프로필 HTTP API 테스트."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from civicfix.config import settings
from civicfix.models.issue import Issue, IssueImage
from civicfix.models.user import User
from civicfix.repositories.issue_repository import issue_repository
from civicfix.utils.session import Principal
from tests.conftest import auth_header, make_token

ISSUE_FORM = {
    "title": "Broken light",
    "description": "Streetlight out on the corner",
    "category": "streetlight",
    "priority": "high",
    "latitude": "40.7128",
    "longitude": "-74.006",
}


def photo_files(count: int) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("images", (f"photo{i}.jpg", f"jpeg-{i}".encode(), "image/jpeg")) for i in range(count)]


async def seed_issue(db: AsyncSession, title: str, minutes: int, **fields) -> Issue:
    reporter = User(id=uuid.uuid4(), name="Reporter")
    db.add(reporter)
    data = {
        "category": "pothole",
        "priority": "medium",
        "status": "open",
        "location": "SRID=4326;POINT(-74.006 40.7128)",
        "user_id": reporter.id,
    }
    data.update(fields)
    issue = Issue(
        id=uuid.uuid4(),
        title=title,
        created_at=datetime(2025, 3, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
        **data,
    )
    db.add(issue)
    await db.commit()
    return issue


class TestHealth:

    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestCreateIssue:
    """POST /api/v1/issues."""

    async def test_create_with_photos(self, client: AsyncClient, db: AsyncSession, citizen, citizen_token, local_uploads):
        resp = await client.post(
            "/api/v1/issues",
            data=ISSUE_FORM,
            files=photo_files(2),
            headers=auth_header(citizen_token),
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["title"] == "Broken light"
        assert body["status"] == "open"
        assert body["priority"] == "high"
        assert body["user_id"] == str(citizen.id)
        assert body["reporter_name"] == "Jane Citizen"
        assert body["location"] == {"lat": 40.7128, "lng": -74.006}
        assert len(body["images"]) == 2

        prefix = f"{settings.PUBLIC_BASE_URL}/uploads/{settings.ISSUE_IMAGES_BUCKET}/{body['id']}/"
        assert all(image["url"].startswith(prefix) for image in body["images"])
        stored = sorted(p.name for p in (local_uploads / settings.ISSUE_IMAGES_BUCKET / body["id"]).iterdir())
        assert len(stored) == 2
        assert stored[0].endswith("-0.jpg")

    async def test_create_without_photos(self, client: AsyncClient, db: AsyncSession, citizen_token):
        form = {k: v for k, v in ISSUE_FORM.items() if k not in ("priority", "description")}
        resp = await client.post("/api/v1/issues", data=form, headers=auth_header(citizen_token))

        assert resp.status_code == 201
        assert resp.json()["priority"] == "medium"
        assert resp.json()["images"] == []
        assert resp.json()["description"] is None

    async def test_requires_authentication(self, client: AsyncClient, db: AsyncSession):
        resp = await client.post("/api/v1/issues", data=ISSUE_FORM)

        assert resp.status_code == 401
        assert resp.json()["detail"] == "User not authenticated"
        assert (await db.execute(select(func.count()).select_from(Issue))).scalar() == 0

    async def test_invalid_token_is_anonymous(self, client: AsyncClient):
        resp = await client.post("/api/v1/issues", data=ISSUE_FORM, headers=auth_header("not-a-jwt"))
        assert resp.status_code == 401

    async def test_expired_token_is_anonymous(self, client: AsyncClient, citizen):
        expired = jwt.encode(
            {"sub": str(citizen.id), "type": "access", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = await client.post("/api/v1/issues", data=ISSUE_FORM, headers=auth_header(expired))
        assert resp.status_code == 401

    async def test_too_many_photos(self, client: AsyncClient, db: AsyncSession, citizen_token, local_uploads):
        resp = await client.post(
            "/api/v1/issues",
            data=ISSUE_FORM,
            files=photo_files(6),
            headers=auth_header(citizen_token),
        )

        assert resp.status_code == 400
        assert "maximum of 5" in resp.json()["detail"]
        assert (await db.execute(select(func.count()).select_from(Issue))).scalar() == 0
        assert not local_uploads.exists() or not any(local_uploads.rglob("*.jpg"))

    async def test_missing_category(self, client: AsyncClient, db: AsyncSession, citizen_token):
        form = {k: v for k, v in ISSUE_FORM.items() if k != "category"}
        resp = await client.post("/api/v1/issues", data=form, headers=auth_header(citizen_token))

        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Category required")
        assert (await db.execute(select(func.count()).select_from(User))).scalar() == 0

    async def test_missing_location(self, client: AsyncClient, citizen_token):
        form = {k: v for k, v in ISSUE_FORM.items() if k != "longitude"}
        resp = await client.post("/api/v1/issues", data=form, headers=auth_header(citizen_token))

        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Location required")

    async def test_out_of_range_location(self, client: AsyncClient, citizen_token):
        resp = await client.post(
            "/api/v1/issues",
            data={**ISSUE_FORM, "latitude": "123"},
            headers=auth_header(citizen_token),
        )
        assert resp.status_code == 400

    async def test_unknown_category(self, client: AsyncClient, citizen_token):
        resp = await client.post(
            "/api/v1/issues",
            data={**ISSUE_FORM, "category": "volcano"},
            headers=auth_header(citizen_token),
        )
        assert resp.status_code == 400
        assert "Invalid category" in resp.json()["detail"]

    async def test_create_failure_hides_sql(self, client: AsyncClient, db: AsyncSession, citizen_token, monkeypatch):
        async def failing_create(session, data):
            raise IntegrityError(
                "INSERT INTO issues (title, location) VALUES ($1, $2)",
                {"title": "Broken light", "location": "SRID=4326;POINT(-74.006 40.7128)"},
                Exception("violates check constraint \"issues_category_check\"\nDETAIL: Failing row contains ..."),
            )

        monkeypatch.setattr(issue_repository, "create", failing_create)
        resp = await client.post("/api/v1/issues", data=ISSUE_FORM, headers=auth_header(citizen_token))

        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail == "Failed to report issue: violates check constraint \"issues_category_check\""
        assert "[SQL:" not in detail
        assert "INSERT INTO" not in detail
        assert "POINT(" not in detail
        assert "sqlalche.me" not in detail


class TestListIssues:
    """GET /api/v1/issues, /map, /{id}, /categories."""

    async def test_list_newest_first_with_counts(self, client: AsyncClient, db: AsyncSession):
        await seed_issue(db, "Broken light", 2, category="streetlight", priority="high")
        await seed_issue(db, "Pothole", 1, status="resolved", description="Deep hole")

        resp = await client.get("/api/v1/issues")

        assert resp.status_code == 200
        body = resp.json()
        assert [i["title"] for i in body["items"]] == ["Broken light", "Pothole"]
        assert body["total"] == 2
        assert body["matched"] == 2

    async def test_filters(self, client: AsyncClient, db: AsyncSession):
        await seed_issue(db, "Broken light", 2, category="streetlight", priority="high")
        await seed_issue(db, "Pothole", 1, status="resolved", description="Deep hole")

        resp = await client.get("/api/v1/issues", params={"status": "open"})
        assert [i["title"] for i in resp.json()["items"]] == ["Broken light"]

        resp = await client.get("/api/v1/issues", params={"search": "DEEP"})
        assert [i["title"] for i in resp.json()["items"]] == ["Pothole"]

        resp = await client.get("/api/v1/issues", params={"category": "water", "status": "all"})
        assert resp.json()["items"] == []
        assert resp.json()["total"] == 2
        assert resp.json()["matched"] == 0

    async def test_empty_feed(self, client: AsyncClient):
        resp = await client.get("/api/v1/issues")
        assert resp.json() == {"items": [], "total": 0, "matched": 0}

    async def test_map_features(self, client: AsyncClient, db: AsyncSession):
        issue = await seed_issue(db, "Graffiti", 1, category="graffiti")
        await seed_issue(db, "Lost", 0, location="garbage")

        resp = await client.get("/api/v1/issues/map")

        assert resp.status_code == 200
        body = resp.json()
        assert body["type"] == "FeatureCollection"
        assert len(body["features"]) == 1
        feature = body["features"][0]
        assert feature["id"] == str(issue.id)
        assert feature["geometry"] == {"type": "Point", "coordinates": [-74.006, 40.7128]}
        assert feature["properties"]["category_label"] == "Graffiti"

    async def test_detail(self, client: AsyncClient, db: AsyncSession):
        issue = await seed_issue(db, "Broken light", 0)
        db.add(IssueImage(issue_id=issue.id, url="https://cdn.test/a.jpg"))
        await db.commit()

        resp = await client.get(f"/api/v1/issues/{issue.id}")

        assert resp.status_code == 200
        assert resp.json()["images"][0]["url"] == "https://cdn.test/a.jpg"
        assert resp.json()["reporter_name"] == "Reporter"

    async def test_detail_not_found(self, client: AsyncClient):
        resp = await client.get(f"/api/v1/issues/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Issue not found"

    async def test_vocabularies(self, client: AsyncClient):
        resp = await client.get("/api/v1/issues/categories")

        assert resp.status_code == 200
        body = resp.json()
        assert [c["value"] for c in body["categories"]][:3] == ["pothole", "streetlight", "traffic"]
        assert {"value": "urgent", "label": "Urgent"} in body["priorities"]
        assert [s["value"] for s in body["statuses"]] == ["open", "in-progress", "resolved", "closed"]


    async def test_blank_filters_apply_no_constraint(self, client: AsyncClient, db: AsyncSession):
        await seed_issue(db, "Broken light", 0)

        resp = await client.get("/api/v1/issues", params={"status": "", "category": "", "priority": "", "search": ""})

        assert resp.json()["total"] == 1
        assert resp.json()["matched"] == 1

    async def test_feed_fetch_failure(self, client: AsyncClient, monkeypatch):
        async def failing_list(session):
            raise OperationalError("SELECT issues.id FROM issues", {"limit": 1}, Exception("connection refused"))

        monkeypatch.setattr(issue_repository, "list_recent", failing_list)

        for path in ("/api/v1/issues", "/api/v1/issues/map"):
            resp = await client.get(path)
            assert resp.status_code == 503
            assert resp.json()["detail"] == "Failed to load issues: connection refused"


class TestSchema:

    def test_model_matches_migration(self):
        assert "ix_images_issue_id" in {index.name for index in IssueImage.__table__.indexes}
        assert User.__table__.c.created_at.nullable is False
        assert Issue.__table__.c.created_at.nullable is False
        assert IssueImage.__table__.c.created_at.nullable is False


class TestSessionAndProfile:

    async def test_anonymous_session(self, client: AsyncClient):
        resp = await client.get("/api/v1/auth/session")
        assert resp.status_code == 200
        assert resp.json() == {"principal": None}

    async def test_authenticated_session(self, client: AsyncClient, citizen, citizen_token):
        resp = await client.get("/api/v1/auth/session", headers=auth_header(citizen_token))
        assert resp.json()["principal"] == {
            "id": str(citizen.id),
            "display_name": "Jane Citizen",
            "email": "jane@example.org",
        }

    async def test_profile_requires_auth(self, client: AsyncClient):
        resp = await client.get("/api/v1/profile")
        assert resp.status_code == 401

    async def test_profile_falls_back_to_email(self, client: AsyncClient):
        principal = Principal(id=uuid.uuid4(), email="sam.lee@example.org")
        resp = await client.get("/api/v1/profile", headers=auth_header(make_token(principal)))

        assert resp.status_code == 200
        assert resp.json()["name"] == "sam.lee"
        assert resp.json()["has_profile"] is False

    async def test_profile_after_submission(self, client: AsyncClient, citizen_token):
        await client.post("/api/v1/issues", data=ISSUE_FORM, headers=auth_header(citizen_token))

        resp = await client.get("/api/v1/profile", headers=auth_header(citizen_token))

        assert resp.json()["name"] == "Jane Citizen"
        assert resp.json()["has_profile"] is True
