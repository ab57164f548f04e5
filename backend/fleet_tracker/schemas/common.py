"""
공통 Pydantic 스키마
"""

from datetime import datetime
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    redis_connected: bool
    simulation_running: bool
    tick_count: int
    subscribers: int
    timestamp: datetime


class MessageResponse(BaseModel):
    message: str
    detail: str | None = None
