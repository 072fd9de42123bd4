import pytest

from chargestop_engine.config import PlannerConfig
from chargestop_engine.pricing import resolve_station
from chargestop_engine.types import Station
from chargestop_engine.vehicle_model import STANDARD_VEHICLE


def make_station(id="st-1", **kwargs):
    """Helper: resolved station met defaults."""
    return resolve_station(Station(id=id, name=kwargs.pop("name", f"Station {id}"), **kwargs))


@pytest.fixture
def vehicle():
    return STANDARD_VEHICLE


@pytest.fixture
def config():
    return PlannerConfig()


@pytest.fixture
def midpoint_station():
    # 150 kW station halverwege een rit van 400 km
    return make_station(
        "mid",
        name="Midpoint Charging Hub",
        latitude=14.2,
        longitude=121.1,
        power_kw=150,
        price_per_kwh=33.0,
        connection_fee=25.0,
        available_chargers=2,
        total_chargers=4,
        distance_from_start_km=200.0,
    )
