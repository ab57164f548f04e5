"""
시뮬레이션 관련 Pydantic 스키마
"""

from pydantic import BaseModel


class SimulationStatus(BaseModel):
    is_running: bool
    interval_ms: int
    tick_count: int
    fleet_size: int
    next_order_number: int
    ticks_published: int
    frames_dropped: int
    ticks_skipped: int


class SimulationControlResponse(BaseModel):
    message: str
    status: SimulationStatus
