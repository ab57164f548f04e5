"""
이벤트 시스템 패키지
- 주문 생애주기 이벤트 pub/sub
- Redis Streams 기반, 인메모리 fallback
"""

from fleet_tracker.events.event_bus import AsyncEventBus
from fleet_tracker.events.topics import TOPICS

__all__ = ["AsyncEventBus", "TOPICS"]
