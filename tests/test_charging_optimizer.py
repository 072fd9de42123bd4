import pytest

from chargestop_engine.charging_optimizer import ChargingStopOptimizer, optimize_route
from chargestop_engine.config import PlannerConfig
from chargestop_engine.errors import InvalidInput
from chargestop_engine.strategies import BALANCED, FEW_LONG, MANY_SHORT, STRATEGIES
from chargestop_engine.types import InfeasibilityKind, OptimizedRoute, OptimizedStop
from chargestop_engine.vehicle_model import STANDARD_VEHICLE, consumption_for_distance

from conftest import make_station


def corridor(spacing_km=60.0, length_km=900.0, power_kw=150):
    """Helper: stations om de spacing_km langs een lange route."""
    stations = []
    km = spacing_km
    while km < length_km:
        stations.append(make_station(
            f"c{int(km)}",
            power_kw=power_kw,
            price_per_kwh=30.0,
            available_chargers=2,
            total_chargers=4,
            distance_from_start_km=km,
        ))
        km += spacing_km
    return stations


# ------------------------------------------------------------
# 1. Geen stop nodig
# ------------------------------------------------------------

def test_zero_stop_final_battery_is_exact():
    result = optimize_route(100.0, 80.0, [], BALANCED, minimum_arrival_battery=15.0)

    assert result.success
    assert result.route.stops == ()
    assert result.route.total_charging_minutes == 0
    assert result.route.total_cost == 0
    assert result.route.final_battery == 80.0 - consumption_for_distance(STANDARD_VEHICLE, 100.0, 1.0)
    assert result.route.distance_covered_km == 100.0


def test_zero_stop_ignores_stations():
    result = optimize_route(100.0, 80.0, corridor(), MANY_SHORT)
    assert result.success
    assert result.route.stops == ()


# ------------------------------------------------------------
# 2. Scenario: één station halverwege
# ------------------------------------------------------------

def test_single_stop_scenario(midpoint_station):
    result = optimize_route(400.0, 80.0, [midpoint_station], BALANCED, minimum_arrival_battery=25.0)

    assert result.success
    assert result.failure is None
    assert len(result.route.stops) == 1

    stop = result.route.stops[0]
    assert stop.station.id == "mid"
    assert stop.distance_from_start_km == 200.0
    # 200 km * 0.141 kWh/km = 28.2 kWh = 34.39% van 82 kWh
    assert stop.arrival_battery == pytest.approx(45.61, abs=0.01)
    assert stop.departure_battery == pytest.approx(70.0)
    assert stop.energy_added_kwh == pytest.approx(20.0)
    assert stop.cost == pytest.approx(685.0)
    assert stop.charging_minutes > 0

    assert result.route.final_battery == pytest.approx(35.61, abs=0.01)
    assert result.route.total_cost == pytest.approx(685.0)
    assert result.route.total_energy_added_kwh == pytest.approx(20.0)


def test_unreachable_minimum_arrival(midpoint_station):
    result = optimize_route(400.0, 80.0, [midpoint_station], BALANCED, minimum_arrival_battery=90.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.MINIMUM_ARRIVAL_UNREACHABLE
    assert result.failure.guidance


def test_no_station_available():
    result = optimize_route(100.0, 20.0, [], BALANCED, minimum_arrival_battery=15.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.NO_STATION_AVAILABLE
    assert result.failure.stop_index == 0
    assert result.route.final_battery < 15.0


def test_insufficient_start_battery():
    # 18% start, balanced vereist 20% bij aankomst op een lader
    result = optimize_route(300.0, 18.0, corridor(), BALANCED)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.INSUFFICIENT_START_BATTERY
    assert result.route.stops == ()


def test_station_outside_search_window_is_not_used():
    # Station achter een bereik van ~297 km: onbereikbaar voor de eerste stop
    far = make_station("far", power_kw=150, distance_from_start_km=380.0)
    result = optimize_route(400.0, 80.0, [far], BALANCED, minimum_arrival_battery=25.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.NO_STATION_AVAILABLE


def test_too_many_stops():
    cfg = PlannerConfig(max_stops=0)
    result = optimize_route(400.0, 80.0, corridor(), BALANCED, cfg, minimum_arrival_battery=25.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.TOO_MANY_STOPS


# ------------------------------------------------------------
# 3. Eigenschappen van haalbare plannen
# ------------------------------------------------------------

@pytest.mark.parametrize("name", sorted(STRATEGIES))
def test_long_trip_properties(name):
    strategy = STRATEGIES[name]
    result = optimize_route(850.0, 90.0, corridor(), strategy, minimum_arrival_battery=15.0)

    assert result.success, result.failure
    route = result.route
    assert len(route.stops) >= 1
    assert route.final_battery >= 15.0
    assert route.distance_covered_km == 850.0

    previous_km = 0.0
    for stop in route.stops:
        assert stop.distance_from_start_km > previous_km
        assert stop.arrival_battery >= strategy.min_stop_soc
        assert stop.departure_battery >= stop.arrival_battery
        assert stop.departure_battery <= min(strategy.target_soc, 90.0)
        previous_km = stop.distance_from_start_km

    assert route.total_charging_minutes == sum(s.charging_minutes for s in route.stops)
    assert route.total_cost == pytest.approx(sum(s.cost for s in route.stops))


def test_many_short_stops_more_often_than_few_long():
    few = optimize_route(850.0, 90.0, corridor(), FEW_LONG)
    many = optimize_route(850.0, 90.0, corridor(), MANY_SHORT)

    assert few.success and many.success
    assert len(many.route.stops) >= len(few.route.stops)


def test_unknown_position_station_is_used_at_planned_point():
    roaming = make_station("roaming", power_kw=120)
    result = optimize_route(400.0, 80.0, [roaming], BALANCED, minimum_arrival_battery=25.0)

    assert result.success
    stop = result.route.stops[0]
    # 85% van het bereik tot 20%: (60% * 82 kWh / 0.141) * 0.85
    assert stop.distance_from_start_km == pytest.approx(296.6, abs=0.1)
    assert stop.arrival_battery == pytest.approx(29.0, abs=0.1)


def test_close_destination_tops_up_on_demand():
    # Stop op ~321 km, rest ~79 km ligt ruim binnen 50% van het bereik
    roaming = make_station("roaming", power_kw=120)
    result = optimize_route(400.0, 80.0, [roaming], FEW_LONG, minimum_arrival_battery=25.0)

    assert result.success
    stop = result.route.stops[0]
    assert stop.departure_battery < FEW_LONG.target_soc
    assert stop.reason.startswith("Top-up")


def test_planning_is_deterministic(midpoint_station):
    first = optimize_route(400.0, 80.0, [midpoint_station], BALANCED, minimum_arrival_battery=25.0)
    second = optimize_route(400.0, 80.0, [midpoint_station], BALANCED, minimum_arrival_battery=25.0)
    assert first.to_dict() == second.to_dict()


# ------------------------------------------------------------
# 4. Verbruiksmultipliers
# ------------------------------------------------------------

def test_demo_multiplier_needs_stations_sooner(midpoint_station):
    cfg = PlannerConfig(demo_multiplier=2.8)
    result = optimize_route(400.0, 80.0, [midpoint_station], BALANCED, cfg, minimum_arrival_battery=25.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.NO_STATION_AVAILABLE


def test_traffic_multiplier_lowers_final_battery():
    calm = optimize_route(100.0, 80.0, [], BALANCED, traffic_multiplier=1.0)
    busy = optimize_route(100.0, 80.0, [], BALANCED, traffic_multiplier=1.3)

    assert busy.route.final_battery < calm.route.final_battery


def test_guards():
    optimizer = ChargingStopOptimizer(400.0, 80.0, [], BALANCED, PlannerConfig(), minimum_arrival_battery=25.0)

    assert optimizer.departure_cap == 70.0
    assert optimizer.reaches_destination(80.0, 0.0)
    assert not optimizer.reaches_destination(80.0, 400.0)
    assert optimizer.arrival_breaches(19.9)
    assert not optimizer.arrival_breaches(20.0)

    # Bereik ruim genoeg voor de rest → stop halverwege de rest
    assert optimizer.stop_leg_km(500.0, 100.0) == pytest.approx(50.0)
    assert optimizer.stop_leg_km(200.0, 400.0) == pytest.approx(170.0)

    target, close = optimizer.departure_target(40.0, 300.0, 350.0)
    assert target == 70.0 and not close
    target, close = optimizer.departure_target(75.0, 300.0, 350.0)
    assert target == 75.0


def test_station_reached_above_target_is_skipped():
    # Op 180 km is de batterij nog ~59%: boven het doel van many_short (55%)
    early = make_station("early", power_kw=150, distance_from_start_km=180.0)
    later = make_station("later", power_kw=50, price_per_kwh=45.0, distance_from_start_km=240.0)

    result = optimize_route(500.0, 90.0, [early, later], MANY_SHORT, minimum_arrival_battery=15.0)

    assert result.route.stops[0].station.id == "later"


# ------------------------------------------------------------
# 5. Inputcontract
# ------------------------------------------------------------

@pytest.mark.parametrize("distance, initial, minimum, traffic", [
    (-50.0, 80.0, 15.0, 1.0),
    (0.0, 80.0, 15.0, 1.0),
    (400.0, 150.0, 15.0, 1.0),
    (400.0, -1.0, 15.0, 1.0),
    (400.0, 80.0, 120.0, 1.0),
    (400.0, 80.0, -5.0, 1.0),
    (400.0, 80.0, 15.0, 0.5),
])
def test_optimizer_rejects_contract_violations(distance, initial, minimum, traffic):
    with pytest.raises(InvalidInput):
        optimize_route(distance, initial, [], BALANCED, minimum_arrival_battery=minimum, traffic_multiplier=traffic)


# ------------------------------------------------------------
# 6. Haalbaarheid & randgevallen
# ------------------------------------------------------------

def make_route(final_battery, stops=()):
    return OptimizedRoute(
        stops=tuple(stops),
        total_charging_minutes=sum(s.charging_minutes for s in stops),
        total_cost=sum(s.cost for s in stops),
        total_distance_km=300.0,
        strategy="balanced",
        final_battery=final_battery,
        distance_covered_km=300.0,
    )


def test_route_with_empty_battery_is_not_feasible():
    assert make_route(20.0).is_feasible is True
    assert make_route(0.0).is_feasible is False
    assert make_route(-4.2).is_feasible is False


def test_route_with_negative_arrival_is_not_feasible():
    stop = OptimizedStop(
        station=make_station(),
        arrival_battery=-1.0,
        departure_battery=70.0,
        charging_minutes=40,
        energy_added_kwh=58.2,
        cost=1945.6,
        distance_from_start_km=150.0,
        reason="test",
    )
    assert make_route(30.0, [stop]).is_feasible is False


def test_uncovered_route_is_not_feasible():
    route = OptimizedRoute((), 0, 0.0, 300.0, "balanced", 40.0, distance_covered_km=120.0)
    assert route.is_feasible is False


def test_consumption_beyond_full_battery_is_exhausted():
    # 1000 km kost 172%, afgekapt op 100%: lege batterij bij aankomst
    result = optimize_route(1000.0, 100.0, [], BALANCED, minimum_arrival_battery=0.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.BATTERY_EXHAUSTED
    assert result.route.final_battery <= 0


def test_arrival_below_minimum_is_reported(monkeypatch):
    optimizer = ChargingStopOptimizer(100.0, 20.0, [], BALANCED, PlannerConfig(), minimum_arrival_battery=15.0)
    monkeypatch.setattr(optimizer, "reaches_destination", lambda soc, remaining: True)

    result = optimizer.run()

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.BELOW_MINIMUM_ARRIVAL
    assert result.route.final_battery == pytest.approx(2.8, abs=0.01)


def test_exact_reserve_reaches_destination():
    # Start precies op verbruik + reserve: afrondingsruis mag geen stop forceren
    needed = consumption_for_distance(STANDARD_VEHICLE, 100.0, 1.0)
    result = optimize_route(100.0, needed + 5.0, [], BALANCED, minimum_arrival_battery=5.0)

    assert result.success
    assert result.route.stops == ()
    assert result.route.final_battery == pytest.approx(5.0)


def test_exact_consumption_without_reserve_ends_empty():
    needed = consumption_for_distance(STANDARD_VEHICLE, 100.0, 1.0)
    result = optimize_route(100.0, needed, [], BALANCED, minimum_arrival_battery=0.0)

    assert not result.success
    assert result.failure.kind is InfeasibilityKind.BATTERY_EXHAUSTED
