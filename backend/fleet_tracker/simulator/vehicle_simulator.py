"""
차량 상태 머신 — 한 틱마다 차량 하나를 전진시킨다.

  Available  --(추첨 성공)-->  Picking Up  --(배송지 도착)-->  Delivering  --(허브 도착)-->  Available

- Available: 추첨 실패 시 허브에 정차 (경로=[허브], 인덱스=0)
- 이동 중: 다음 좌표 방향으로 heading 계산 후 인덱스 +1
- 1점 경로(출발지=도착지)는 다음 틱에 바로 도착으로 처리한다.
"""

from dataclasses import dataclass

from fleet_tracker.events.topics import TOPIC_ASSIGNED, TOPIC_PICKED_UP, TOPIC_DELIVERED
from fleet_tracker.models.location import GeoCatalog
from fleet_tracker.models.vehicle import Vehicle, VehicleStatus, OrderType
from fleet_tracker.simulator.order_counter import OrderCounter
from fleet_tracker.simulator.random_source import RandomSource
from fleet_tracker.simulator.route_generator import (
    generate_route, bearing_degrees, DEFAULT_STEPS, DEFAULT_CURVATURE,
)


@dataclass(frozen=True)
class VehicleEvent:
    """주문 생애주기 이벤트 (배정 / 픽업 완료 / 허브 배송 완료)"""
    topic: str
    vehicle_id: int
    driver_name: str
    order_id: str
    location_name: str | None
    tick: int = 0

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "tick": self.tick,
            "vehicle_id": self.vehicle_id,
            "driver_name": self.driver_name,
            "order_id": self.order_id,
            "location_name": self.location_name,
        }


def advance(vehicle: Vehicle, catalog: GeoCatalog, order_counter: OrderCounter,
            rng: RandomSource, *,
            assignment_probability: float = 0.05,
            steps: int = DEFAULT_STEPS,
            curvature: float = DEFAULT_CURVATURE) -> VehicleEvent | None:
    """차량을 한 틱 전진시키고, 상태 전이가 있으면 이벤트를 반환한다."""
    if vehicle.status == VehicleStatus.AVAILABLE:
        if rng.uniform() < assignment_probability:
            return _assign_order(vehicle, catalog, order_counter, rng, steps, curvature)
        vehicle.route = (catalog.hub.coordinate,)
        vehicle.position_index = 0
        return None

    if not vehicle.has_arrived:
        current = vehicle.route[vehicle.position_index]
        nxt = vehicle.route[vehicle.position_index + 1]
        vehicle.heading_degrees = bearing_degrees(current, nxt)
        vehicle.position_index += 1
        return None

    # 도착
    vehicle.position_index = len(vehicle.route) - 1

    if vehicle.status == VehicleStatus.PICKING_UP:
        pickup_coord = vehicle.route[-1]
        if vehicle.target_point is not None:
            pickup_name = vehicle.target_point.name
        else:
            pickup_name = catalog.name_for(pickup_coord)

        vehicle.status = VehicleStatus.DELIVERING
        vehicle.order_type = OrderType.DELIVERY
        vehicle.route = generate_route(pickup_coord, catalog.hub.coordinate, steps, curvature)
        vehicle.position_index = 0
        vehicle.target_point = catalog.hub
        return VehicleEvent(
            topic=TOPIC_PICKED_UP,
            vehicle_id=vehicle.id,
            driver_name=vehicle.name,
            order_id=vehicle.order_id,
            location_name=pickup_name,
        )

    # DELIVERING → 허브 도착
    order_id = vehicle.order_id
    location_name = vehicle.delivery_location_name
    vehicle.park_at(catalog.hub)
    return VehicleEvent(
        topic=TOPIC_DELIVERED,
        vehicle_id=vehicle.id,
        driver_name=vehicle.name,
        order_id=order_id,
        location_name=location_name,
    )


def _assign_order(vehicle: Vehicle, catalog: GeoCatalog, order_counter: OrderCounter,
                  rng: RandomSource, steps: int, curvature: float) -> VehicleEvent:
    """대기 차량에 새 주문 배정 — 허브 → 픽업지 경로 생성"""
    destination = rng.choose(catalog.destinations)

    vehicle.order_id = order_counter.allocate()
    vehicle.delivery_location_name = destination.name
    vehicle.order_type = OrderType.PICKUP
    vehicle.target_point = destination
    vehicle.status = VehicleStatus.PICKING_UP
    vehicle.route = generate_route(
        catalog.hub.coordinate, destination.coordinate, steps, curvature,
    )
    vehicle.position_index = 0

    return VehicleEvent(
        topic=TOPIC_ASSIGNED,
        vehicle_id=vehicle.id,
        driver_name=vehicle.name,
        order_id=vehicle.order_id,
        location_name=destination.name,
    )
