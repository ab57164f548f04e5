"""
위치 카탈로그 — 허브(창고)와 배송지 목록 (읽기 전용)
"""

from dataclasses import dataclass

from fleet_tracker.errors import ConfigurationError

# (경도, 위도) — GeoJSON 좌표 순서
Coordinate = tuple[float, float]

UNKNOWN_LOCATION = "Unknown Location"


@dataclass(frozen=True)
class GeoPoint:
    id: int
    name: str
    longitude: float
    latitude: float
    is_hub: bool = False

    @property
    def coordinate(self) -> Coordinate:
        return (self.longitude, self.latitude)


class GeoCatalog:
    """
    이름이 붙은 좌표의 불변 목록.
    is_hub로 표시된 항목이 허브이며, 없으면 첫 번째 항목이 허브가 된다.
    """

    def __init__(self, points: list[GeoPoint]):
        points = list(points)
        if len(points) < 2:
            raise ConfigurationError(
                f"위치 카탈로그에는 허브와 배송지를 포함해 최소 2개 지점이 필요합니다 (현재 {len(points)}개)"
            )

        seen: set[int] = set()
        for point in points:
            if point.id in seen:
                raise ConfigurationError(f"중복된 위치 id: {point.id}")
            seen.add(point.id)
            if not -180.0 <= point.longitude <= 180.0:
                raise ConfigurationError(f"경도 범위 초과 ({point.name}): {point.longitude}")
            if not -90.0 <= point.latitude <= 90.0:
                raise ConfigurationError(f"위도 범위 초과 ({point.name}): {point.latitude}")

        hubs = [p for p in points if p.is_hub]
        if len(hubs) > 1:
            raise ConfigurationError("허브로 표시된 위치가 둘 이상입니다")
        hub = hubs[0] if hubs else points[0]

        self._points: tuple[GeoPoint, ...] = tuple(points)
        self._hub = hub
        self._destinations = tuple(p for p in points if p.id != hub.id)
        self._by_id = {p.id: p for p in points}

    @classmethod
    def from_records(cls, records: list[dict]) -> "GeoCatalog":
        """{id, locationName, latitude, longitude[, isHub]} 레코드 목록으로 생성"""
        try:
            points = [
                GeoPoint(
                    id=int(r["id"]),
                    name=str(r["locationName"]),
                    longitude=float(r["longitude"]),
                    latitude=float(r["latitude"]),
                    is_hub=bool(r.get("isHub", False)),
                )
                for r in records
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"잘못된 위치 레코드: {e}") from e
        return cls(points)

    @property
    def hub(self) -> GeoPoint:
        return self._hub

    @property
    def destinations(self) -> tuple[GeoPoint, ...]:
        return self._destinations

    @property
    def points(self) -> tuple[GeoPoint, ...]:
        return self._points

    def get(self, point_id: int) -> GeoPoint:
        return self._by_id[point_id]

    def name_for(self, coordinate: Coordinate) -> str:
        """좌표에 해당하는 위치명 (없으면 'Unknown Location')"""
        for point in self._points:
            if point.coordinate == tuple(coordinate):
                return point.name
        return UNKNOWN_LOCATION

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)
