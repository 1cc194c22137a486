"""위치 코덱 및 세션 컨텍스트 테스트."""

import uuid

import pytest
from pydantic import ValidationError

from civicfix.utils.geo import GeoPoint, parse_location
from civicfix.utils.session import Principal, SessionChanged, SessionContext


class TestGeoPoint:

    def test_ewkt_is_lng_lat(self):
        point = GeoPoint(lat=40.7128, lng=-74.006)
        assert point.to_ewkt() == "SRID=4326;POINT(-74.006 40.7128)"
        assert GeoPoint.from_ewkt(point.to_ewkt()) == point

    def test_geojson_is_lng_lat(self):
        point = GeoPoint(lat=51.5, lng=-0.12)
        assert point.to_geojson() == {"type": "Point", "coordinates": [-0.12, 51.5]}
        assert GeoPoint.from_geojson(point.to_geojson()) == point

    def test_bare_wkt_accepted(self):
        assert GeoPoint.from_ewkt("POINT(2.35 48.85)") == GeoPoint(lat=48.85, lng=2.35)

    @pytest.mark.parametrize("value", ["SRID=3857;POINT(1 2)", "LINESTRING(0 0, 1 1)", "", "POINT(1)"])
    def test_rejects_bad_ewkt(self, value):
        with pytest.raises(ValueError):
            GeoPoint.from_ewkt(value)

    def test_rejects_non_point_geojson(self):
        with pytest.raises(ValueError):
            GeoPoint.from_geojson({"type": "Polygon", "coordinates": []})

    @pytest.mark.parametrize("lat, lng", [(91, 0), (-90.5, 0), (0, 180.1), (0, -181)])
    def test_rejects_out_of_range(self, lat, lng):
        with pytest.raises(ValidationError):
            GeoPoint(lat=lat, lng=lng)

    def test_parse_location_dispatch(self):
        expected = GeoPoint(lat=1.5, lng=2.5)
        assert parse_location("SRID=4326;POINT(2.5 1.5)") == expected
        assert parse_location({"type": "Point", "coordinates": [2.5, 1.5]}) == expected


class TestSessionContext:

    def test_anonymous_by_default(self):
        session = SessionContext()
        assert session.principal is None
        assert not session.is_authenticated

    def test_listeners_notified_in_order(self):
        session = SessionContext()
        principal = Principal(id=uuid.uuid4(), display_name="Ana")
        seen: list[tuple[str, Principal | None]] = []

        session.subscribe(lambda e: seen.append(("first", e.principal)))
        session.subscribe(lambda e: seen.append(("second", e.principal)))
        session.apply(SessionChanged(principal))

        assert seen == [("first", principal), ("second", principal)]
        assert session.is_authenticated

    def test_unsubscribe(self):
        session = SessionContext()
        seen: list[SessionChanged] = []
        unsubscribe = session.subscribe(seen.append)

        unsubscribe()
        session.apply(SessionChanged(None))

        assert seen == []
        unsubscribe()

    def test_principal_from_claims(self):
        user_id = uuid.uuid4()
        principal = Principal.from_claims({"sub": str(user_id), "full_name": "Kim", "email": "kim@example.org"})
        assert principal.id == user_id
        assert principal.display_name == "Kim"

    @pytest.mark.parametrize(
        "display_name, email, expected",
        [
            ("Jane Citizen", "jane@example.org", "Jane Citizen"),
            (None, "jane.doe@example.org", "jane.doe"),
            (None, None, "User"),
        ],
    )
    def test_fallback_name(self, display_name, email, expected):
        principal = Principal(id=uuid.uuid4(), display_name=display_name, email=email)
        assert principal.fallback_name == expected
