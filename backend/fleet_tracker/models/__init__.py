"""
도메인 모델 패키지
- 위치 카탈로그와 차량 상태 레코드
"""

from fleet_tracker.models.location import GeoPoint, GeoCatalog
from fleet_tracker.models.vehicle import Vehicle, VehicleStatus, OrderType

__all__ = [
    "GeoPoint",
    "GeoCatalog",
    "Vehicle",
    "VehicleStatus",
    "OrderType",
]
