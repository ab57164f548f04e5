"""
배차 엔진 — 차량 전체(Fleet)를 소유하고 틱 단위로 전진시킨다.
- 대기 차량에 확률적으로 주문 배정
- 틱 종료 시 FleetSnapshot 생성
- tick()은 재진입 불가: 내부 락으로 직렬화한다 (스레드풀에서 호출되는 API 대비)
"""

import logging
import threading
from dataclasses import dataclass, replace

from fleet_tracker.errors import ConfigurationError
from fleet_tracker.models.location import GeoCatalog
from fleet_tracker.models.vehicle import Vehicle
from fleet_tracker.simulator.order_counter import OrderCounter
from fleet_tracker.simulator.random_source import RandomSource, SeededRandomSource
from fleet_tracker.simulator.route_generator import DEFAULT_STEPS, DEFAULT_CURVATURE
from fleet_tracker.simulator.snapshot import FleetSnapshot, VehicleProjection
from fleet_tracker.simulator.vehicle_simulator import advance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverProfile:
    """차량 생성용 정적 정보"""
    id: int
    name: str
    vehicle_type: str


class Fleet:
    """id로 색인된 차량 집합. 순회는 항상 id 오름차순."""

    def __init__(self, vehicles: list[Vehicle]):
        self._vehicles: dict[int, Vehicle] = {}
        for vehicle in sorted(vehicles, key=lambda v: v.id):
            if vehicle.id in self._vehicles:
                raise ConfigurationError(f"중복된 차량 id: {vehicle.id}")
            self._vehicles[vehicle.id] = vehicle

    def __iter__(self):
        return iter(self._vehicles.values())

    def __len__(self) -> int:
        return len(self._vehicles)

    def __contains__(self, vehicle_id: int) -> bool:
        return vehicle_id in self._vehicles

    def get(self, vehicle_id: int) -> Vehicle:
        return self._vehicles[vehicle_id]


class DispatchEngine:
    """차량 상태 시뮬레이션 엔진"""

    def __init__(self, catalog: GeoCatalog, drivers: list[DriverProfile],
                 rng: RandomSource | None = None, *,
                 assignment_probability: float = 0.05,
                 route_steps: int = DEFAULT_STEPS,
                 curvature: float = DEFAULT_CURVATURE,
                 order_id_start: int = 1005):
        if not drivers:
            raise ConfigurationError("차량이 한 대 이상 필요합니다")
        if route_steps < 1:
            raise ConfigurationError(f"경로 해상도(route_steps)는 1 이상이어야 합니다: {route_steps}")
        if not 0.0 <= assignment_probability <= 1.0:
            raise ConfigurationError(
                f"배차 확률은 0~1 사이여야 합니다: {assignment_probability}"
            )

        self._catalog = catalog
        self._rng = rng or SeededRandomSource()
        self._assignment_probability = assignment_probability
        self._route_steps = route_steps
        self._curvature = curvature
        self._order_counter = OrderCounter(order_id_start)
        self._lock = threading.Lock()
        self._tick_count = 0

        vehicles = [Vehicle(id=d.id, name=d.name, vehicle_type=d.vehicle_type) for d in drivers]
        for vehicle in vehicles:
            vehicle.park_at(catalog.hub)
        self._fleet = Fleet(vehicles)

        logger.info(
            f"DispatchEngine 초기화: 차량 {len(self._fleet)}대, 배송지 {len(catalog.destinations)}곳 "
            f"(허브: {catalog.hub.name})"
        )

    @classmethod
    def from_settings(cls, settings, catalog: GeoCatalog, drivers: list[DriverProfile],
                      rng: RandomSource | None = None) -> "DispatchEngine":
        return cls(
            catalog,
            drivers,
            rng or SeededRandomSource(settings.RANDOM_SEED),
            assignment_probability=settings.ASSIGNMENT_PROBABILITY,
            route_steps=settings.ROUTE_STEPS,
            curvature=settings.ROUTE_CURVATURE,
            order_id_start=settings.ORDER_ID_START,
        )

    @property
    def catalog(self) -> GeoCatalog:
        return self._catalog

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def next_order_number(self) -> int:
        return self._order_counter.next_number

    @property
    def fleet_size(self) -> int:
        return len(self._fleet)

    def tick(self) -> FleetSnapshot:
        """모든 차량을 한 틱 전진시키고 스냅샷을 반환한다."""
        with self._lock:
            self._tick_count += 1
            events = []
            for vehicle in self._fleet:
                event = advance(
                    vehicle, self._catalog, self._order_counter, self._rng,
                    assignment_probability=self._assignment_probability,
                    steps=self._route_steps,
                    curvature=self._curvature,
                )
                if event:
                    event = replace(event, tick=self._tick_count)
                    events.append(event)
                    logger.info(
                        f"[Tick {self._tick_count}] {event.topic} | 차량 {event.vehicle_id} "
                        f"({event.driver_name}) | 주문 {event.order_id} | {event.location_name}"
                    )
            return self._project(tuple(events))

    def snapshot(self) -> FleetSnapshot:
        """전진 없이 현재 상태의 스냅샷"""
        with self._lock:
            return self._project(())

    def get_vehicle(self, vehicle_id: int) -> VehicleProjection:
        with self._lock:
            return VehicleProjection.from_vehicle(self._fleet.get(vehicle_id))

    def reset(self):
        """모든 차량을 허브 대기 상태로, 주문 번호를 시작값으로 되돌린다."""
        with self._lock:
            for vehicle in self._fleet:
                vehicle.park_at(self._catalog.hub)
                vehicle.heading_degrees = 0.0
            self._order_counter.reset()
            self._tick_count = 0
        logger.info("DispatchEngine 리셋 완료")

    def _project(self, events: tuple) -> FleetSnapshot:
        return FleetSnapshot(
            tick=self._tick_count,
            vehicles=tuple(VehicleProjection.from_vehicle(v) for v in self._fleet),
            events=events,
        )
