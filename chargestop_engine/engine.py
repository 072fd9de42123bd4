# chargestop_engine/engine.py

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from .charging_optimizer import ChargingStopOptimizer, validate_trip_bounds
from .config import PlannerConfig
from .errors import InvalidInput
from .pricing import PricingConfig, TripCostEngine, resolve_station
from .route_segments import build_segments
from .station_scorer import filter_stations
from .strategies import ChargingStrategy, get_strategy
from .types import Coordinates, PlanResult, ResolvedStation, Station
from .vehicle_model import CONSUMPTION_MULTIPLIERS, STANDARD_VEHICLE, Vehicle, vehicle_from_database

logger = logging.getLogger(__name__)


@dataclass
class TripPlanInput:
    """Structuur die 1-op-1 lijkt op de FastAPI request body."""
    origin: str
    destination: str
    distance_km: float
    duration_min: float
    stations: List[Station] = field(default_factory=list)

    # Gebruikerskeuzes
    initial_battery: float = 80.0
    minimum_arrival_battery: float = 15.0
    strategy: Union[str, int] = "balanced"
    traffic_multiplier: float = 1.0
    demo_mode: bool = False

    # Voertuig (leeg → standaardvoertuig)
    vehicle: Optional[Vehicle] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None

    origin_coords: Optional[Coordinates] = None
    destination_coords: Optional[Coordinates] = None

    # Stationsfilter
    only_available: bool = False
    only_fast_chargers: bool = False
    min_power_kw: Optional[float] = None
    connector_types: Optional[List[str]] = None
    station_search_radius_km: Optional[float] = None


def validate_input(data: TripPlanInput) -> None:
    validate_trip_bounds(
        data.distance_km,
        data.initial_battery,
        data.minimum_arrival_battery,
        data.traffic_multiplier,
    )
    if data.duration_min < 0:
        raise InvalidInput(f"duration must be >= 0 min, got {data.duration_min}")


class TripPlannerEngine:
    """
    Publieke interface van de planner.
    Wordt aangeroepen door FastAPI in main.py (endpoint /plan_trip).
    """

    # ------------------------------------------------------
    # Opbouw
    # ------------------------------------------------------
    @staticmethod
    def resolve_vehicle(data: TripPlanInput) -> Vehicle:
        if data.vehicle is not None:
            return data.vehicle
        if data.vehicle_make and data.vehicle_model:
            return vehicle_from_database(data.vehicle_make, data.vehicle_model)
        return STANDARD_VEHICLE

    @staticmethod
    def build_config(
        data: TripPlanInput,
        base: Optional[PlannerConfig] = None,
    ) -> PlannerConfig:
        cfg = base or PlannerConfig()
        cfg = replace(cfg, vehicle=TripPlannerEngine.resolve_vehicle(data))
        if data.demo_mode:
            cfg = replace(cfg, demo_multiplier=CONSUMPTION_MULTIPLIERS["demo"])
        if data.station_search_radius_km is not None:
            cfg = replace(cfg, station_search_radius_km=data.station_search_radius_km)
        return cfg

    @staticmethod
    def prepare_stations(
        stations: Sequence[Station],
        data: TripPlanInput,
        pricing: PricingConfig,
        vehicle: Vehicle = STANDARD_VEHICLE,
    ) -> List[ResolvedStation]:
        """Zonder expliciete connectorkeuze bepalen de stekkers van het voertuig de filter."""
        resolved = [resolve_station(s, pricing) for s in stations]
        return filter_stations(
            resolved,
            only_available=data.only_available,
            only_fast_chargers=data.only_fast_chargers,
            min_power_kw=data.min_power_kw,
            connector_types=data.connector_types,
            vehicle=vehicle,
        )

    # ------------------------------------------------------
    # Plannen
    # ------------------------------------------------------
    @staticmethod
    def plan(
        data: TripPlanInput,
        strategy: Optional[ChargingStrategy] = None,
        base_config: Optional[PlannerConfig] = None,
    ) -> PlanResult:
        validate_input(data)

        strategy = strategy or get_strategy(data.strategy)
        cfg = TripPlannerEngine.build_config(data, base_config)
        stations = TripPlannerEngine.prepare_stations(data.stations, data, cfg.pricing, cfg.vehicle)

        logger.info(
            "Planning %s -> %s: %.1f km, battery %.0f%%, strategy %s, %d stations",
            data.origin, data.destination, data.distance_km,
            data.initial_battery, strategy.name, len(stations),
        )

        optimizer = ChargingStopOptimizer(
            total_distance_km=data.distance_km,
            initial_battery=data.initial_battery,
            stations=stations,
            strategy=strategy,
            config=cfg,
            minimum_arrival_battery=data.minimum_arrival_battery,
            traffic_multiplier=data.traffic_multiplier,
        )
        result = optimizer.run()

        result.segments = build_segments(
            data.origin,
            data.destination,
            data.distance_km,
            data.duration_min,
            data.initial_battery,
            result.route,
            origin_coords=data.origin_coords,
            destination_coords=data.destination_coords,
        )
        result.cost_breakdown = TripCostEngine(cfg.pricing).compute_breakdown(result.route.stops)

        for stop in result.route.stops:
            if stop.station.available_chargers == 0:
                result.warnings.append(
                    f"{stop.station.name} reports no free chargers; availability may be outdated"
                )
        if data.stations and not stations:
            result.warnings.append("All candidate stations were removed by the station filter")

        return result

    @staticmethod
    def compute(data: TripPlanInput) -> Dict[str, Any]:
        """
        Hoofdfunctie: plant de rit en geeft API-ready output terug.
        """
        result = TripPlannerEngine.plan(data)
        out = result.to_dict()
        out["total_travel_min"] = data.duration_min
        out["total_duration_min"] = data.duration_min + result.route.total_charging_minutes
        return out
