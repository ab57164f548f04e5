"""
FleetSnapshot — 한 틱이 끝난 시점의 차량 상태를 불변 값으로 고정한 것.
브로드캐스트 계층은 이 값만 받으며 엔진 내부 상태를 참조하지 않는다.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from fleet_tracker.models.location import Coordinate
from fleet_tracker.models.vehicle import Vehicle, Route
from fleet_tracker.schemas.fleet import (
    FeatureCollection, Feature, PointGeometry, DriverProperties, VehicleResponse,
)
from fleet_tracker.simulator.route_generator import progress_percent
from fleet_tracker.simulator.vehicle_simulator import VehicleEvent


@dataclass(frozen=True)
class VehicleProjection:
    id: int
    name: str
    vehicle_type: str
    status: str
    heading: float
    order_id: str | None
    delivery_location_name: str | None
    order_type: str | None
    progress_percent: int
    position: Coordinate
    route: Route

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle) -> "VehicleProjection":
        # route는 불변 튜플 — 복사하지 않는다
        return cls(
            id=vehicle.id,
            name=vehicle.name,
            vehicle_type=vehicle.vehicle_type,
            status=vehicle.status.value,
            heading=vehicle.heading_degrees,
            order_id=vehicle.order_id,
            delivery_location_name=vehicle.delivery_location_name,
            order_type=vehicle.order_type.value if vehicle.order_type else None,
            progress_percent=progress_percent(vehicle.position_index, len(vehicle.route)),
            position=vehicle.position,
            route=vehicle.route,
        )

    def to_feature(self) -> Feature:
        return Feature(
            id=self.id,
            geometry=PointGeometry(coordinates=list(self.position)),
            properties=DriverProperties(
                driver_name=self.name,
                vehicle_type=self.vehicle_type,
                status=self.status,
                heading=self.heading,
                order_id=self.order_id,
                delivery_location=self.delivery_location_name,
                order_type=self.order_type,
                progress_percent=self.progress_percent,
                path=[list(point) for point in self.route],
            ),
        )

    def to_response(self) -> VehicleResponse:
        return VehicleResponse(
            id=self.id,
            driver_name=self.name,
            vehicle_type=self.vehicle_type,
            status=self.status,
            heading=self.heading,
            order_id=self.order_id,
            delivery_location=self.delivery_location_name,
            order_type=self.order_type,
            progress_percent=self.progress_percent,
            position=list(self.position),
            route_length=len(self.route),
        )


@dataclass(frozen=True)
class FleetSnapshot:
    tick: int
    vehicles: tuple[VehicleProjection, ...]
    events: tuple[VehicleEvent, ...] = ()
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_feature_collection(self) -> FeatureCollection:
        return FeatureCollection(features=[v.to_feature() for v in self.vehicles])

    def to_geojson(self) -> dict:
        """브로드캐스트용 dict (driverUpdate 페이로드)"""
        return self.to_feature_collection().model_dump(mode="json")
