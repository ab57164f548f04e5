"""
차량 조회 API — 최신 스냅샷, 개별 차량, 위치 카탈로그, 최근 주문 이벤트
"""

from fastapi import APIRouter, HTTPException, Query, Request

from fleet_tracker.schemas.fleet import (
    FeatureCollection, LocationResponse, VehicleResponse, OrderEventResponse,
)

router = APIRouter(prefix="/api/fleet", tags=["fleet"])


@router.get("/snapshot", response_model=FeatureCollection)
def get_snapshot(request: Request):
    """마지막 틱의 FeatureCollection (틱 전이면 현재 상태)"""
    snapshot = request.app.state.broadcast_loop.latest_snapshot
    if snapshot is None:
        snapshot = request.app.state.engine.snapshot()
    return snapshot.to_feature_collection()


@router.get("/vehicles/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(vehicle_id: int, request: Request):
    try:
        projection = request.app.state.engine.get_vehicle(vehicle_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"차량을 찾을 수 없습니다: {vehicle_id}")
    return projection.to_response()


@router.get("/locations", response_model=list[LocationResponse])
def get_locations(request: Request):
    catalog = request.app.state.engine.catalog
    return [
        LocationResponse(
            id=p.id,
            location_name=p.name,
            longitude=p.longitude,
            latitude=p.latitude,
            is_hub=p.id == catalog.hub.id,
        )
        for p in catalog
    ]


@router.get("/events", response_model=list[OrderEventResponse])
def get_recent_events(
    request: Request,
    topic: str | None = None,
    count: int = Query(default=20, ge=1, le=500),
):
    """최근 주문 이벤트 (배정 / 픽업 / 배송 완료)"""
    bus = request.app.state.event_bus
    return bus.get_recent(topic, count)
