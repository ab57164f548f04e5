"""Unit tests for DispatchEngine — fleet ticking, assignment and snapshots."""

from __future__ import annotations

import dataclasses

import pytest

from fleet_tracker.errors import ConfigurationError
from fleet_tracker.events.topics import TOPIC_ASSIGNED
from fleet_tracker.simulator.dispatch_engine import DispatchEngine, DriverProfile
from fleet_tracker.simulator.random_source import SeededRandomSource

from conftest import HUB, ScriptedRandomSource

pytestmark = pytest.mark.unit


def _engine(catalog, drivers, rng=None, **kwargs) -> DispatchEngine:
    kwargs.setdefault("route_steps", 5)
    return DispatchEngine(catalog, drivers, rng or ScriptedRandomSource(), **kwargs)


class TestConstruction:
    def test_fleet_starts_parked_at_hub(self, catalog, drivers):
        engine = _engine(catalog, drivers)
        snapshot = engine.snapshot()

        assert [v.id for v in snapshot.vehicles] == [1, 2, 3]
        for v in snapshot.vehicles:
            assert v.status == "Available"
            assert v.position == HUB
            assert v.route == (HUB,)
            assert v.order_id is None
            assert v.progress_percent == 0
        assert engine.tick_count == 0
        assert engine.next_order_number == 1005

    def test_no_drivers(self, catalog):
        with pytest.raises(ConfigurationError):
            DispatchEngine(catalog, [])

    def test_duplicate_driver_ids(self, catalog):
        drivers = [DriverProfile(1, "A", "Van"), DriverProfile(1, "B", "Van")]
        with pytest.raises(ConfigurationError):
            DispatchEngine(catalog, drivers)

    @pytest.mark.parametrize("steps", [0, -5])
    def test_non_positive_route_steps(self, catalog, drivers, steps):
        with pytest.raises(ConfigurationError):
            DispatchEngine(catalog, drivers, route_steps=steps)

    @pytest.mark.parametrize("probability", [-0.1, 1.5])
    def test_probability_out_of_range(self, catalog, drivers, probability):
        with pytest.raises(ConfigurationError):
            DispatchEngine(catalog, drivers, assignment_probability=probability)

    def test_from_settings(self, catalog, drivers, test_settings):
        engine = DispatchEngine.from_settings(test_settings, catalog, drivers)
        assert engine.next_order_number == test_settings.ORDER_ID_START
        assert engine.fleet_size == 3


class TestTick:
    def test_certain_assignment_gives_every_vehicle_one_order(self, catalog, drivers):
        engine = _engine(catalog, drivers, assignment_probability=1.0)

        snapshot = engine.tick()

        assert all(v.status == "Picking Up" for v in snapshot.vehicles)
        order_numbers = [int(v.order_id[1:]) for v in snapshot.vehicles]
        assert order_numbers == [1005, 1006, 1007]
        assert len(set(order_numbers)) == len(order_numbers)
        assert [e.topic for e in snapshot.events] == [TOPIC_ASSIGNED] * 3
        assert [e.vehicle_id for e in snapshot.events] == [1, 2, 3]
        assert engine.next_order_number == 1008

    def test_events_carry_the_tick_that_produced_them(self, catalog, drivers):
        rng = ScriptedRandomSource(draws=[0.9, 0.9, 0.9, 0.0, 0.0, 0.0])
        engine = _engine(catalog, drivers, rng=rng, assignment_probability=0.5)
        assert engine.tick().events == ()

        snapshot = engine.tick()

        assert [e.tick for e in snapshot.events] == [2, 2, 2]
        payload = snapshot.events[0].to_dict()
        assert payload["tick"] == 2
        assert payload["topic"] == TOPIC_ASSIGNED
        assert payload["order_id"] == "O1005"

    def test_zero_probability_never_assigns(self, catalog, drivers):
        engine = _engine(catalog, drivers, rng=SeededRandomSource(1), assignment_probability=0.0)
        for _ in range(50):
            snapshot = engine.tick()
            assert snapshot.events == ()
            assert all(v.status == "Available" for v in snapshot.vehicles)
        assert engine.tick_count == 50

    def test_invariants_hold_every_tick(self, catalog, drivers):
        engine = _engine(catalog, drivers, rng=SeededRandomSource(42), assignment_probability=0.3)
        seen_orders = set()
        last_progress: dict[int, tuple] = {}

        for _ in range(200):
            snapshot = engine.tick()
            for v in snapshot.vehicles:
                assert v.position in v.route
                assert 0 <= v.progress_percent <= 100
                if v.status == "Available":
                    assert v.route == (HUB,)
                    assert v.position == HUB
                    assert v.order_id is None
                    assert v.order_type is None
                    assert v.delivery_location_name is None
                    assert v.progress_percent == 0
                    last_progress.pop(v.id, None)
                    continue

                seen_orders.add(v.order_id)
                previous = last_progress.get(v.id)
                if previous and previous[0] is v.route:
                    assert v.progress_percent >= previous[1]
                else:
                    assert v.progress_percent == 0
                last_progress[v.id] = (v.route, v.progress_percent)

        assert seen_orders, "expected at least one assignment in 200 ticks"

    def test_same_seed_same_simulation(self, catalog, drivers):
        a = _engine(catalog, drivers, rng=SeededRandomSource(99), assignment_probability=0.2)
        b = _engine(catalog, drivers, rng=SeededRandomSource(99), assignment_probability=0.2)
        for _ in range(40):
            assert a.tick().to_geojson() == b.tick().to_geojson()

    def test_engines_are_independent(self, catalog, drivers):
        a = _engine(catalog, drivers, assignment_probability=1.0)
        b = _engine(catalog, drivers, assignment_probability=1.0, order_id_start=1)
        a.tick()
        snapshot = b.tick()
        assert snapshot.vehicles[0].order_id == "O1"
        assert a.next_order_number == 1008


class TestSnapshots:
    def test_snapshot_is_frozen(self, catalog, drivers):
        snapshot = _engine(catalog, drivers).tick()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.tick = 10
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.vehicles[0].status = "Delivering"

    def test_old_snapshot_unchanged_by_later_ticks(self, catalog, drivers):
        engine = _engine(catalog, drivers, assignment_probability=1.0)
        first = engine.tick()
        before = first.to_geojson()
        for _ in range(3):
            engine.tick()
        assert first.to_geojson() == before
        assert first.tick == 1

    def test_snapshot_does_not_advance(self, catalog, drivers):
        engine = _engine(catalog, drivers, assignment_probability=1.0)
        engine.tick()
        engine.snapshot()
        assert engine.tick_count == 1

    def test_get_vehicle(self, catalog, drivers):
        engine = _engine(catalog, drivers)
        vehicle = engine.get_vehicle(2)
        assert vehicle.name == "Leila Farhadi"
        with pytest.raises(KeyError):
            engine.get_vehicle(99)


class TestReset:
    def test_reset_restores_start_state(self, catalog, drivers):
        engine = _engine(catalog, drivers, assignment_probability=1.0)
        for _ in range(3):
            engine.tick()

        engine.reset()

        assert engine.tick_count == 0
        assert engine.next_order_number == 1005
        for v in engine.snapshot().vehicles:
            assert v.status == "Available"
            assert v.route == (HUB,)
            assert v.heading == 0.0
        assert engine.tick().vehicles[0].order_id == "O1005"
