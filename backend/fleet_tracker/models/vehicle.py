"""
차량(드라이버) 상태 레코드 — DispatchEngine만 변경한다.
"""

import enum
from dataclasses import dataclass, field

from fleet_tracker.models.location import Coordinate, GeoPoint

Route = tuple[Coordinate, ...]


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "Available"
    PICKING_UP = "Picking Up"
    DELIVERING = "Delivering"


class OrderType(str, enum.Enum):
    PICKUP = "Pickup"
    DELIVERY = "Delivery"


@dataclass
class Vehicle:
    id: int
    name: str
    vehicle_type: str

    status: VehicleStatus = VehicleStatus.AVAILABLE

    # 배정 정보 — AVAILABLE 상태에서는 모두 None
    order_id: str | None = None
    delivery_location_name: str | None = None
    order_type: OrderType | None = None
    target_point: GeoPoint | None = None

    # 이동 정보
    route: Route = field(default_factory=tuple)
    position_index: int = 0
    heading_degrees: float = 0.0

    @property
    def is_available(self) -> bool:
        return self.status == VehicleStatus.AVAILABLE

    @property
    def has_arrived(self) -> bool:
        """현재 경로의 마지막 좌표에 도달했는지 (1점 경로는 즉시 도착)"""
        return self.position_index >= len(self.route) - 1

    @property
    def position(self) -> Coordinate:
        return self.route[self.position_index]

    def park_at(self, hub: GeoPoint):
        """배정 정보를 지우고 허브에 정차시킨다."""
        self.status = VehicleStatus.AVAILABLE
        self.order_id = None
        self.delivery_location_name = None
        self.order_type = None
        self.target_point = None
        self.route = (hub.coordinate,)
        self.position_index = 0
