"""
차량 위치 브로드캐스트 / 조회 API Pydantic 스키마 (GeoJSON)
좌표 순서는 항상 [경도, 위도].
"""

from typing import Literal
from pydantic import BaseModel


class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: list[float]  # [lng, lat]


class DriverProperties(BaseModel):
    driver_name: str
    vehicle_type: str
    status: str
    heading: float
    order_id: str | None
    delivery_location: str | None
    order_type: str | None
    progress_percent: int
    path: list[list[float]]  # 현재 구간 전체 경로


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    id: int
    geometry: PointGeometry
    properties: DriverProperties


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Feature] = []


class LocationResponse(BaseModel):
    id: int
    location_name: str
    longitude: float
    latitude: float
    is_hub: bool


class VehicleResponse(BaseModel):
    id: int
    driver_name: str
    vehicle_type: str
    status: str
    heading: float
    order_id: str | None
    delivery_location: str | None
    order_type: str | None
    progress_percent: int
    position: list[float]
    route_length: int


class OrderEventResponse(BaseModel):
    topic: str
    timestamp: str
    data: dict
