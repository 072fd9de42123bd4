# chargestop_engine/charging_optimizer.py

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .config import PlannerConfig
from .errors import InvalidInput
from .pricing import charging_cost
from .station_scorer import StationScorer, stations_near
from .strategies import ChargingStrategy
from .types import (
    InfeasibilityKind,
    OptimizedRoute,
    OptimizedStop,
    PlanFailure,
    PlanResult,
    ResolvedStation,
)
from .vehicle_model import charging_time_minutes, consumption_for_distance

logger = logging.getLogger(__name__)

# Marge voor afrondingsruis bij het vergelijken van batterijpercentages
SOC_TOLERANCE = 1e-9


# ============================================================
# STATES & CONTEXT
# ============================================================

class PlannerState(str, Enum):
    CRUISING = "cruising"
    NEEDS_STOP = "needs_stop"
    STOP_PLANNED = "stop_planned"
    INFEASIBLE = "infeasible"
    COMPLETE = "complete"


@dataclass
class PlannerContext:
    """Veranderlijke toestand van één planningsrun."""
    soc: float
    distance_covered: float = 0.0
    stops: List[OptimizedStop] = field(default_factory=list)
    total_minutes: int = 0
    total_cost: float = 0.0

    # kladwaarden tussen NEEDS_STOP en STOP_PLANNED
    max_range: float = 0.0
    stop_km: float = 0.0
    arrival: float = 0.0
    station: Optional[ResolvedStation] = None

    failure: Optional[PlanFailure] = None


GUIDANCE = {
    InfeasibilityKind.INSUFFICIENT_START_BATTERY: (
        "Charge the vehicle before departure",
        "Choose a closer destination",
    ),
    InfeasibilityKind.BATTERY_BREACH_MID_ROUTE: (
        "Lower your minimum arrival battery",
        "Choose a strategy with a higher charging target",
    ),
    InfeasibilityKind.NO_STATION_AVAILABLE: (
        "Widen the charging station search area",
        "Start with a higher battery level",
        "Choose a closer destination",
    ),
    InfeasibilityKind.MINIMUM_ARRIVAL_UNREACHABLE: (
        "Lower your minimum arrival battery",
        "Choose the few-long strategy, it charges to a higher level",
    ),
    InfeasibilityKind.TOO_MANY_STOPS: (
        "Choose a strategy with a higher charging target",
        "Split the trip into shorter legs",
    ),
    InfeasibilityKind.BATTERY_EXHAUSTED: (
        "Start with a higher battery level",
        "Choose a closer destination",
    ),
    InfeasibilityKind.BELOW_MINIMUM_ARRIVAL: (
        "Lower your minimum arrival battery",
        "Start with a higher battery level",
    ),
}


# ============================================================
# INPUTCONTRACT
# ============================================================

def validate_trip_bounds(
    distance_km: float,
    initial_battery: float,
    minimum_arrival_battery: float,
    traffic_multiplier: float = 1.0,
) -> None:
    """Contractschendingen zijn geen onhaalbare rit: die falen hard."""
    if distance_km <= 0:
        raise InvalidInput(f"distance must be > 0 km, got {distance_km}")
    if not 0 <= initial_battery <= 100:
        raise InvalidInput(f"initial battery must be within 0..100, got {initial_battery}")
    if not 0 <= minimum_arrival_battery <= 100:
        raise InvalidInput(
            f"minimum arrival battery must be within 0..100, got {minimum_arrival_battery}"
        )
    if traffic_multiplier < 1.0:
        raise InvalidInput(f"traffic multiplier must be >= 1.0, got {traffic_multiplier}")


# ============================================================
# CHARGING STOP OPTIMIZER
# ============================================================

class ChargingStopOptimizer:
    """
    Greedy simulatie over de route:
    - rijden zolang de batterij de bestemming haalt
    - anders stoppen op 85% van het veilige bereik
    - laden tot strategie-doel (of op maat bij een nabije bestemming)

    Onhaalbaarheid is een gewone uitkomst (PlanFailure), geen exception.
    """

    def __init__(
        self,
        total_distance_km: float,
        initial_battery: float,
        stations: Sequence[ResolvedStation],
        strategy: ChargingStrategy,
        config: PlannerConfig,
        minimum_arrival_battery: float = 15.0,
        traffic_multiplier: float = 1.0,
    ):
        validate_trip_bounds(
            total_distance_km, initial_battery, minimum_arrival_battery, traffic_multiplier
        )

        self.total_distance = total_distance_km
        self.initial_battery = initial_battery
        self.stations = tuple(stations)
        self.strategy = strategy
        self.cfg = config
        self.vehicle = config.vehicle
        self.minimum_arrival = minimum_arrival_battery
        self.multiplier = config.effective_multiplier(traffic_multiplier)

    # -------------------------------------------------
    # Rekenhulpen
    # -------------------------------------------------
    def battery_for(self, distance_km: float) -> float:
        return consumption_for_distance(self.vehicle, distance_km, self.multiplier)

    def range_for(self, soc: float, reserve: float) -> float:
        """Afstand tot de SoC op `reserve` zakt (kan negatief zijn)."""
        rate = self.vehicle.avg_consumption_kwh_per_km * self.multiplier
        return (soc - reserve) / 100.0 * self.vehicle.battery_capacity_kwh / rate

    @property
    def departure_cap(self) -> float:
        return min(self.strategy.target_soc, self.cfg.charging_ceiling)

    # -------------------------------------------------
    # Guards
    # -------------------------------------------------
    def reaches_destination(self, soc: float, remaining_km: float) -> bool:
        return (
            remaining_km <= 0
            or self.battery_for(remaining_km) <= soc - self.minimum_arrival + SOC_TOLERANCE
        )

    def arrival_breaches(self, arrival: float) -> bool:
        return arrival < self.strategy.min_stop_soc

    def worth_stopping(self, ctx: PlannerContext, station: ResolvedStation) -> bool:
        # Aankomst al boven het laadplafond → stop zou niets laden
        if station.distance_from_start_km is None:
            return True
        arrival = ctx.soc - self.battery_for(station.distance_from_start_km - ctx.distance_covered)
        return arrival < self.departure_cap

    def stop_leg_km(self, max_range: float, remaining_km: float) -> float:
        leg = max(0.0, max_range) * self.cfg.safety_margin
        if leg >= remaining_km:
            # Bereik volstaat alleen niet voor de aankomstreserve: halverwege bijladen
            leg = remaining_km * self.cfg.top_up_leg_fraction
        return leg

    def departure_target(
        self,
        arrival: float,
        remaining_after_km: float,
        max_range: float,
    ) -> Tuple[float, bool]:
        """Geeft (vertrek-SoC, bijladen_op_maat)."""
        close = remaining_after_km < max_range * self.cfg.close_destination_fraction
        if close:
            needed = (
                self.battery_for(remaining_after_km)
                + self.minimum_arrival
                + self.cfg.close_destination_buffer
            )
            target = min(needed, self.strategy.target_soc)
        else:
            target = self.strategy.target_soc

        target = min(target, self.cfg.charging_ceiling)
        return max(target, arrival), close

    # -------------------------------------------------
    # Transities
    # -------------------------------------------------
    def _fail(
        self,
        ctx: PlannerContext,
        kind: InfeasibilityKind,
        message: str,
        distance_km: Optional[float] = None,
        battery: Optional[float] = None,
    ) -> PlannerState:
        ctx.failure = PlanFailure(
            kind=kind,
            message=message,
            stop_index=len(ctx.stops),
            distance_km=distance_km if distance_km is not None else ctx.distance_covered,
            battery_percent=battery if battery is not None else ctx.soc,
            guidance=GUIDANCE[kind],
        )
        logger.warning(
            "Trip infeasible (%s) at %.1f km: %s", kind.value, ctx.failure.distance_km, message
        )
        return PlannerState.INFEASIBLE

    def on_cruising(self, ctx: PlannerContext) -> PlannerState:
        remaining = self.total_distance - ctx.distance_covered
        if self.reaches_destination(ctx.soc, remaining):
            ctx.soc -= self.battery_for(max(0.0, remaining))
            ctx.distance_covered = self.total_distance
            return PlannerState.COMPLETE
        return PlannerState.NEEDS_STOP

    def on_needs_stop(self, ctx: PlannerContext) -> PlannerState:
        if len(ctx.stops) >= self.cfg.max_stops:
            return self._fail(
                ctx,
                InfeasibilityKind.TOO_MANY_STOPS,
                f"More than {self.cfg.max_stops} charging stops would be needed",
            )

        if self.departure_cap <= self.minimum_arrival:
            return self._fail(
                ctx,
                InfeasibilityKind.MINIMUM_ARRIVAL_UNREACHABLE,
                f"Charging stops end at {self.departure_cap:.0f}%, which cannot leave "
                f"{self.minimum_arrival:.0f}% at the destination",
            )

        remaining = self.total_distance - ctx.distance_covered
        ctx.max_range = self.range_for(ctx.soc, self.strategy.min_stop_soc)
        leg = self.stop_leg_km(ctx.max_range, remaining)
        target_km = ctx.distance_covered + leg

        arrival = ctx.soc - self.battery_for(leg)
        if self.arrival_breaches(arrival):
            kind = (
                InfeasibilityKind.BATTERY_BREACH_MID_ROUTE
                if ctx.stops
                else InfeasibilityKind.INSUFFICIENT_START_BATTERY
            )
            return self._fail(
                ctx,
                kind,
                f"Battery would drop to {arrival:.1f}%, below the "
                f"{self.strategy.min_stop_soc:.0f}% needed to reach a charger safely",
                distance_km=target_km,
                battery=arrival,
            )

        candidates = [
            s for s in stations_near(
                self.stations, ctx.distance_covered, target_km, self.cfg.station_search_radius_km
            )
            if self.worth_stopping(ctx, s)
        ]
        station = StationScorer.select_best(candidates, self.strategy)
        if station is None:
            return self._fail(
                ctx,
                InfeasibilityKind.NO_STATION_AVAILABLE,
                f"No charging station available before km {target_km:.0f}",
                distance_km=target_km,
                battery=arrival,
            )

        # Bekende positie → stop bij het station zelf
        if station.distance_from_start_km is not None:
            stop_km = station.distance_from_start_km
            arrival = ctx.soc - self.battery_for(stop_km - ctx.distance_covered)
        else:
            stop_km = target_km

        ctx.station = station
        ctx.stop_km = stop_km
        ctx.arrival = arrival
        return PlannerState.STOP_PLANNED

    def on_stop_planned(self, ctx: PlannerContext) -> PlannerState:
        station = ctx.station
        remaining_after = self.total_distance - ctx.stop_km

        departure, close = self.departure_target(ctx.arrival, remaining_after, ctx.max_range)

        power = min(station.power_kw, self.vehicle.max_charging_power_kw)
        minutes = charging_time_minutes(self.vehicle, ctx.arrival, departure, power)
        energy = (departure - ctx.arrival) / 100.0 * self.vehicle.battery_capacity_kwh
        cost = charging_cost(energy, station.price_per_kwh, True, station.connection_fee)

        if close:
            reason = f"Top-up for the final {remaining_after:.0f} km"
        else:
            reason = f"Battery low ({ctx.arrival:.0f}%), charging to {departure:.0f}%"

        stop = OptimizedStop(
            station=station,
            arrival_battery=ctx.arrival,
            departure_battery=departure,
            charging_minutes=minutes,
            energy_added_kwh=energy,
            cost=cost,
            distance_from_start_km=ctx.stop_km,
            reason=reason,
        )
        ctx.stops.append(stop)
        logger.debug(
            "Stop %d at %.1f km (%s): %.1f%% -> %.1f%%, %d min, %.2f",
            len(ctx.stops), ctx.stop_km, station.name, ctx.arrival, departure, minutes, cost,
        )

        ctx.soc = departure
        ctx.distance_covered = ctx.stop_km
        ctx.total_minutes += minutes
        ctx.total_cost += cost
        ctx.station = None
        return PlannerState.CRUISING

    # -------------------------------------------------
    # MAIN LOOP
    # -------------------------------------------------
    def run(self) -> PlanResult:
        ctx = PlannerContext(soc=self.initial_battery)
        state = PlannerState.CRUISING

        handlers = {
            PlannerState.CRUISING: self.on_cruising,
            PlannerState.NEEDS_STOP: self.on_needs_stop,
            PlannerState.STOP_PLANNED: self.on_stop_planned,
        }

        while state not in (PlannerState.COMPLETE, PlannerState.INFEASIBLE):
            state = handlers[state](ctx)

        # Geen clamping: negatieve eindwaarde is informatie voor de UI
        final_battery = ctx.soc - self.battery_for(self.total_distance - ctx.distance_covered)

        route = OptimizedRoute(
            stops=tuple(ctx.stops),
            total_charging_minutes=ctx.total_minutes,
            total_cost=ctx.total_cost,
            total_distance_km=self.total_distance,
            strategy=self.strategy.name,
            final_battery=final_battery,
            distance_covered_km=ctx.distance_covered,
        )

        # Vangnet: reaches_destination houdt de reserve al vast; alleen een
        # verbruik boven 100% (afgekapt) eindigt hier op een lege batterij
        if state is PlannerState.COMPLETE:
            if final_battery <= 0:
                self._fail(
                    ctx,
                    InfeasibilityKind.BATTERY_EXHAUSTED,
                    "The battery runs empty before the destination",
                    distance_km=self.total_distance,
                    battery=final_battery,
                )
            elif final_battery < self.minimum_arrival - SOC_TOLERANCE:
                self._fail(
                    ctx,
                    InfeasibilityKind.BELOW_MINIMUM_ARRIVAL,
                    f"Arrival battery {final_battery:.1f}% is below the requested "
                    f"{self.minimum_arrival:.0f}%",
                    distance_km=self.total_distance,
                    battery=final_battery,
                )

        return PlanResult(
            success=ctx.failure is None and route.is_feasible,
            route=route,
            failure=ctx.failure,
        )


def optimize_route(
    total_distance_km: float,
    initial_battery: float,
    stations: Sequence[ResolvedStation],
    strategy: ChargingStrategy,
    config: Optional[PlannerConfig] = None,
    minimum_arrival_battery: float = 15.0,
    traffic_multiplier: float = 1.0,
) -> PlanResult:
    optimizer = ChargingStopOptimizer(
        total_distance_km,
        initial_battery,
        stations,
        strategy,
        config or PlannerConfig(),
        minimum_arrival_battery=minimum_arrival_battery,
        traffic_multiplier=traffic_multiplier,
    )
    return optimizer.run()
