"""
시뮬레이터 패키지
- 경로 생성, 차량 상태 머신, 배차 엔진, 스냅샷, 브로드캐스트 루프
"""

from fleet_tracker.simulator.route_generator import generate_route, bearing_degrees, progress_percent
from fleet_tracker.simulator.random_source import RandomSource, SeededRandomSource
from fleet_tracker.simulator.order_counter import OrderCounter
from fleet_tracker.simulator.vehicle_simulator import advance, VehicleEvent
from fleet_tracker.simulator.snapshot import FleetSnapshot, VehicleProjection
from fleet_tracker.simulator.dispatch_engine import DispatchEngine, DriverProfile, Fleet
from fleet_tracker.simulator.broadcast_loop import BroadcastLoop

__all__ = [
    "generate_route",
    "bearing_degrees",
    "progress_percent",
    "RandomSource",
    "SeededRandomSource",
    "OrderCounter",
    "advance",
    "VehicleEvent",
    "FleetSnapshot",
    "VehicleProjection",
    "DispatchEngine",
    "DriverProfile",
    "Fleet",
    "BroadcastLoop",
]
