"""Unit tests for BroadcastLoop — tick cadence and fire-and-forget publishing."""

from __future__ import annotations

import asyncio

import pytest

from fleet_tracker.api.websocket import ConnectionManager
from fleet_tracker.errors import ConfigurationError
from fleet_tracker.events.event_bus import AsyncEventBus
from fleet_tracker.events.topics import TOPIC_ASSIGNED
from fleet_tracker.simulator.broadcast_loop import BroadcastLoop, DRIVER_UPDATE_EVENT
from fleet_tracker.simulator.dispatch_engine import DispatchEngine

from conftest import ScriptedRandomSource

pytestmark = pytest.mark.unit


class RecordingPublisher:
    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.messages: list[tuple[str, dict]] = []

    async def broadcast_event(self, event_type: str, data: dict) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("subscriber gone")
        self.messages.append((event_type, data))


def _engine(catalog, drivers, probability=0.0):
    return DispatchEngine(catalog, drivers, ScriptedRandomSource(),
                          route_steps=4, assignment_probability=probability)


class TestConstruction:
    @pytest.mark.parametrize("interval", [0, -0.1])
    def test_non_positive_interval(self, catalog, drivers, interval):
        with pytest.raises(ConfigurationError):
            BroadcastLoop(_engine(catalog, drivers), RecordingPublisher(), interval_seconds=interval)

    def test_initial_state(self, catalog, drivers):
        loop = BroadcastLoop(_engine(catalog, drivers), RecordingPublisher(), interval_seconds=0.1)
        assert not loop.is_running
        assert loop.latest_snapshot is None
        assert loop.interval_seconds == 0.1


class TestRunTick:
    def test_publishes_driver_update(self, catalog, drivers):
        publisher = RecordingPublisher()
        loop = BroadcastLoop(_engine(catalog, drivers), publisher, interval_seconds=0.1)

        async def _run():
            snapshot = loop.run_tick()
            await asyncio.sleep(0.01)
            return snapshot

        snapshot = asyncio.run(_run())

        assert loop.latest_snapshot is snapshot
        assert len(publisher.messages) == 1
        event_type, data = publisher.messages[0]
        assert event_type == DRIVER_UPDATE_EVENT
        assert data == snapshot.to_geojson()

    def test_order_events_go_to_event_bus(self, catalog, drivers):
        bus = AsyncEventBus("")
        loop = BroadcastLoop(_engine(catalog, drivers, probability=1.0), RecordingPublisher(),
                             interval_seconds=0.1, event_bus=bus)

        async def _run():
            loop.run_tick()
            await asyncio.sleep(0.01)

        asyncio.run(_run())

        recent = bus.get_recent(TOPIC_ASSIGNED, count=10)
        assert [e["data"]["order_id"] for e in recent] == ["O1005", "O1006", "O1007"]

    def test_publisher_failure_does_not_reach_tick(self, catalog, drivers):
        loop = BroadcastLoop(_engine(catalog, drivers), RecordingPublisher(fail=True),
                             interval_seconds=0.1)

        async def _run():
            loop.run_tick()
            await asyncio.sleep(0.01)
            loop.run_tick()
            await asyncio.sleep(0.01)

        asyncio.run(_run())
        assert loop.engine.tick_count == 2


class TestLoop:
    def test_ticks_at_fixed_cadence(self, catalog, drivers):
        publisher = RecordingPublisher()
        loop = BroadcastLoop(_engine(catalog, drivers), publisher, interval_seconds=0.02)

        async def _run():
            await loop.start()
            assert loop.is_running
            await asyncio.sleep(0.25)
            await loop.stop()

        asyncio.run(_run())

        assert not loop.is_running
        ticks = loop.engine.tick_count
        assert 3 <= ticks <= 14
        assert loop.ticks_published == ticks

    def test_slow_subscriber_does_not_delay_ticks(self, catalog, drivers):
        publisher = RecordingPublisher(delay=0.2)
        loop = BroadcastLoop(_engine(catalog, drivers), publisher, interval_seconds=0.02)

        async def _run():
            await loop.start()
            await asyncio.sleep(0.3)
            await loop.stop()

        asyncio.run(_run())

        assert loop.engine.tick_count >= 5
        assert loop.ticks_published == loop.engine.tick_count

    def test_start_twice_is_noop(self, catalog, drivers):
        loop = BroadcastLoop(_engine(catalog, drivers), RecordingPublisher(), interval_seconds=0.05)

        async def _run():
            await loop.start()
            task = loop._task
            await loop.start()
            same = loop._task is task
            await loop.stop()
            return same

        assert asyncio.run(_run())

    def test_stop_when_not_started(self, catalog, drivers):
        loop = BroadcastLoop(_engine(catalog, drivers), RecordingPublisher(), interval_seconds=0.05)
        asyncio.run(loop.stop())
        assert not loop.is_running


class FakeSocket:
    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.sent: list[str] = []
        self.closed = False

    async def accept(self):
        pass

    async def send_text(self, text: str):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.sent.append(text)

    async def close(self):
        self.closed = True


class TestFanOut:
    def test_slow_subscriber_does_not_throttle_fast_one(self, catalog, drivers):
        manager = ConnectionManager(send_timeout=1.0)
        fast, slow = FakeSocket(), FakeSocket(delay=0.2)
        loop = BroadcastLoop(_engine(catalog, drivers), manager, interval_seconds=0.02)

        async def _run():
            await manager.connect(fast)
            await manager.connect(slow)
            await loop.start()
            await asyncio.sleep(0.5)
            await loop.stop()
            await asyncio.sleep(0.01)
            still_registered = slow in manager.active_connections
            await manager.shutdown()
            return still_registered

        slow_registered = asyncio.run(_run())

        ticks = loop.engine.tick_count
        assert ticks >= 10
        assert len(fast.sent) >= ticks - 1
        assert slow_registered
        assert not slow.closed
        assert 1 <= len(slow.sent) < ticks
        assert manager.frames_dropped > 0
