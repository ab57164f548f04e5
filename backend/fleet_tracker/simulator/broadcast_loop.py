"""
브로드캐스트 루프 — 고정 주기로 DispatchEngine.tick()을 실행하고 스냅샷을 발행한다.
- 틱은 하나의 asyncio 태스크에서만 실행되므로 동시에 두 틱이 돌지 않는다
- 매 틱 스냅샷을 백그라운드 태스크로 넘기고 기다리지 않는다 (구독자별 송신 속도 조절은 ConnectionManager 몫)
- FastAPI lifespan에서 시작/중지
"""

import asyncio
import logging
from typing import Any, Coroutine, Protocol

from fleet_tracker.errors import ConfigurationError
from fleet_tracker.events.event_bus import AsyncEventBus
from fleet_tracker.simulator.dispatch_engine import DispatchEngine
from fleet_tracker.simulator.snapshot import FleetSnapshot

logger = logging.getLogger(__name__)

DRIVER_UPDATE_EVENT = "driverUpdate"


class SnapshotPublisher(Protocol):
    async def broadcast_event(self, event_type: str, data: dict) -> None:
        ...


class BroadcastLoop:
    """시뮬레이션 틱 + 구독자 브로드캐스트 라이프사이클 관리"""

    def __init__(self, engine: DispatchEngine, publisher: SnapshotPublisher,
                 interval_seconds: float = 0.1,
                 event_bus: AsyncEventBus | None = None):
        if interval_seconds <= 0:
            raise ConfigurationError(f"틱 간격은 0보다 커야 합니다: {interval_seconds}")

        self.engine = engine
        self.publisher = publisher
        self.event_bus = event_bus
        self._interval = interval_seconds

        self._running = False
        self._task: asyncio.Task | None = None
        self._latest: FleetSnapshot | None = None
        self._background: set[asyncio.Task] = set()

        self.ticks_published = 0
        self.ticks_skipped = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def latest_snapshot(self) -> FleetSnapshot | None:
        return self._latest

    def _spawn(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task):
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"발행 태스크 에러 ({task.get_name()}): {exc}")

    def clear_snapshot(self):
        """리셋 후 이전 스냅샷이 재전송되지 않도록 비운다."""
        self._latest = None

    def run_tick(self) -> FleetSnapshot:
        """틱 1회 실행 후 발행 (루프 밖에서 수동 진행할 때도 사용)"""
        snapshot = self.engine.tick()
        self._latest = snapshot
        self.publish(snapshot)
        return snapshot

    def publish(self, snapshot: FleetSnapshot):
        """스냅샷/이벤트를 구독자에게 넘긴다. 결과를 기다리지 않는다."""
        self._spawn(
            self.publisher.broadcast_event(DRIVER_UPDATE_EVENT, snapshot.to_geojson()),
            name=f"driver-update-{snapshot.tick}",
        )
        self.ticks_published += 1

        if self.event_bus is not None:
            for event in snapshot.events:
                self._spawn(
                    self.event_bus.publish(event.topic, event.to_dict()),
                    name=f"{event.topic}-{event.order_id}",
                )

    async def _tick_loop(self):
        """고정 주기 틱 루프 — 이벤트 루프 시계 기준으로 드리프트를 보정한다."""
        loop = asyncio.get_running_loop()
        logger.info(f"틱 루프 시작 (간격 {self._interval * 1000:.0f}ms)")
        next_fire = loop.time() + self._interval
        while self._running:
            try:
                delay = next_fire - loop.time()
                if delay > 0:
                    await asyncio.sleep(delay)
                if not self._running:
                    break

                self.run_tick()

                next_fire += self._interval
                now = loop.time()
                if now > next_fire:
                    # 틱이 주기를 넘겨 실행됨 — 밀린 틱은 몰아서 실행하지 않는다
                    missed = int((now - next_fire) // self._interval) + 1
                    self.ticks_skipped += missed
                    next_fire += missed * self._interval
                    logger.warning(f"틱 지연: {missed}회 건너뜀")
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"틱 루프 에러: {e}")
                next_fire = loop.time() + self._interval

    async def start(self):
        if self._running:
            logger.warning("시뮬레이션이 이미 실행 중입니다")
            return
        self._running = True
        self._task = asyncio.create_task(self._tick_loop(), name="fleet-tick-loop")
        logger.info("시뮬레이션 시작")

    async def stop(self):
        if not self._running and self._task is None:
            return
        self._running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        pending = list(self._background)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info("시뮬레이션 중지")
