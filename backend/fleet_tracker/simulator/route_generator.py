"""
경로 생성기 — 두 지점 사이의 곡선 경로(2차 베지어)와 진행 방위각 계산.
실제 도로망은 사용하지 않는다. 지도에서 경로가 직선이 아니라 휘어 보이도록 만든 모의 경로다.
"""

import math

from fleet_tracker.models.location import Coordinate
from fleet_tracker.models.vehicle import Route

DEFAULT_STEPS = 100
DEFAULT_CURVATURE = 0.3


def generate_route(start: Coordinate, end: Coordinate,
                   steps: int = DEFAULT_STEPS,
                   curvature: float = DEFAULT_CURVATURE) -> Route:
    """
    start → end 2차 베지어 경로를 steps+1 개 좌표로 반환한다.
    제어점 = 중점 + curvature × (start→end 벡터에 수직인 벡터)
    start == end 이면 1점 경로 (start,) 를 반환한다 (즉시 도착으로 처리).
    """
    if steps < 1:
        raise ValueError(f"steps는 1 이상이어야 합니다: {steps}")

    start_lng, start_lat = start
    end_lng, end_lat = end
    if (start_lng, start_lat) == (end_lng, end_lat):
        return ((start_lng, start_lat),)

    mid_lng = (start_lng + end_lng) / 2
    mid_lat = (start_lat + end_lat) / 2
    dx = end_lng - start_lng
    dy = end_lat - start_lat
    control_lng = mid_lng - dy * curvature
    control_lat = mid_lat + dx * curvature

    points = []
    for i in range(steps + 1):
        t = i / steps
        a = (1 - t) ** 2
        b = 2 * (1 - t) * t
        c = t ** 2
        points.append((
            a * start_lng + b * control_lng + c * end_lng,
            a * start_lat + b * control_lat + c * end_lat,
        ))

    # 부동소수 오차 없이 끝점을 정확히 맞춘다
    points[0] = (start_lng, start_lat)
    points[-1] = (end_lng, end_lat)
    return tuple(points)


def bearing_degrees(p1: Coordinate, p2: Coordinate) -> float:
    """p1 → p2 대권 초기 방위각 (0=북, 시계방향, [0, 360)). 같은 점이면 0."""
    if tuple(p1) == tuple(p2):
        return 0.0

    lat1 = math.radians(p1[1])
    lat2 = math.radians(p2[1])
    d_lng = math.radians(p2[0] - p1[0])

    y = math.sin(d_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lng)

    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360.0) % 360.0


def progress_percent(position_index: int, route_length: int) -> int:
    """현재 구간 진행률 (0~100). 1점 경로는 0."""
    if route_length <= 1:
        return 0
    pct = round(100 * position_index / (route_length - 1))
    return max(0, min(100, pct))
