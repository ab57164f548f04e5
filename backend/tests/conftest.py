"""Shared fixtures for fleet tracker tests."""

from __future__ import annotations

import pytest

from fleet_tracker.config import Settings
from fleet_tracker.models.location import GeoCatalog, GeoPoint
from fleet_tracker.simulator.dispatch_engine import DriverProfile

HUB = (51.3347, 35.6943)
IRAN_MALL = (51.2183, 35.7533)


class ScriptedRandomSource:
    """Deterministic RandomSource: replays scripted draws and choice indexes.

    Once the script runs out, draws return 0.99 (no assignment) and choices
    pick the first item.
    """

    def __init__(self, draws=(), choices=()):
        self.draws = list(draws)
        self.choices = list(choices)
        self.uniform_calls = 0

    def uniform(self) -> float:
        self.uniform_calls += 1
        if self.draws:
            return self.draws.pop(0)
        return 0.99

    def choose(self, items):
        if self.choices:
            return items[self.choices.pop(0)]
        return items[0]


@pytest.fixture
def catalog() -> GeoCatalog:
    return GeoCatalog([
        GeoPoint(id=1, name="Central Warehouse", longitude=HUB[0], latitude=HUB[1]),
        GeoPoint(id=2, name="Iran Mall", longitude=IRAN_MALL[0], latitude=IRAN_MALL[1]),
        GeoPoint(id=3, name="Vanak Office Tower", longitude=51.411, latitude=35.7594),
        GeoPoint(id=4, name="Palladium Mall", longitude=51.4348, latitude=35.8048),
    ])


@pytest.fixture
def drivers() -> list[DriverProfile]:
    return [
        DriverProfile(id=3, name="Babak Norouzi", vehicle_type="Service Van"),
        DriverProfile(id=1, name="Amir Rezvani", vehicle_type="Van"),
        DriverProfile(id=2, name="Leila Farhadi", vehicle_type="Small Truck"),
    ]


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        REDIS_URL="",
        SIMULATION_AUTOSTART=False,
        SIMULATION_INTERVAL_MS=20,
        RANDOM_SEED=7,
    )
