"""위치 좌표 인코딩 유틸리티.

Geographic point codec. The record store keeps issue locations as EWKT
(``SRID=4326;POINT(<lng> <lat>)``); map consumers receive GeoJSON points.
Both representations use longitude-then-latitude order.
"""

import re
from typing import Any

from pydantic import BaseModel, Field

WGS84_SRID: int = 4326

_EWKT_POINT = re.compile(
    r"^\s*(?:SRID=(?P<srid>\d+);)?\s*POINT\s*\(\s*"
    r"(?P<lng>[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s+"
    r"(?P<lat>[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*\)\s*$",
    re.IGNORECASE,
)


class GeoPoint(BaseModel):
    """WGS-84 좌표 — WGS-84 latitude/longitude pair."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    def to_ewkt(self) -> str:
        return f"SRID={WGS84_SRID};POINT({self.lng!r} {self.lat!r})"

    def to_geojson(self) -> dict[str, Any]:
        return {"type": "Point", "coordinates": [self.lng, self.lat]}

    @classmethod
    def from_ewkt(cls, value: str) -> "GeoPoint":
        """EWKT/WKT 문자열을 파싱합니다.

        Parse an EWKT (or bare WKT) point. A missing SRID is taken as WGS-84;
        any other SRID is rejected.

        Raises:
            ValueError: 형식이 잘못되었거나 SRID가 4326이 아님
                        (Malformed point or non-WGS-84 SRID)
        """
        match = _EWKT_POINT.match(value)
        if match is None:
            raise ValueError(f"Not a POINT geometry: {value!r}")
        srid = match.group("srid")
        if srid is not None and int(srid) != WGS84_SRID:
            raise ValueError(f"Unsupported SRID {srid}, expected {WGS84_SRID}")
        return cls(lat=float(match.group("lat")), lng=float(match.group("lng")))

    @classmethod
    def from_geojson(cls, value: dict[str, Any]) -> "GeoPoint":
        if value.get("type") != "Point":
            raise ValueError(f"Not a GeoJSON Point: {value.get('type')!r}")
        lng, lat = value["coordinates"][:2]
        return cls(lat=float(lat), lng=float(lng))


def parse_location(value: str | dict[str, Any]) -> GeoPoint:
    """저장된 위치 값을 GeoPoint로 변환 — Accepts EWKT text or a GeoJSON dict."""
    if isinstance(value, dict):
        return GeoPoint.from_geojson(value)
    return GeoPoint.from_ewkt(value)
