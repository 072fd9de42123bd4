# chargestop_engine/types.py

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


Coordinates = Tuple[float, float]   # (latitude, longitude)


# ============================================================
# Enums
# ============================================================

class ChargingSpeed(str, Enum):
    SLOW = "Slow"              # AC tot en met 22 kW
    FAST = "Fast"              # DC tot en met 100 kW
    ULTRA_FAST = "Ultra Fast"  # DC boven 100 kW


class SegmentType(str, Enum):
    START = "start"
    TRAVEL = "travel"
    CHARGING_STATION = "charging_station"
    DESTINATION = "destination"


class InfeasibilityKind(str, Enum):
    INSUFFICIENT_START_BATTERY = "insufficient_start_battery"
    BATTERY_BREACH_MID_ROUTE = "battery_breach_mid_route"
    NO_STATION_AVAILABLE = "no_station_available"
    MINIMUM_ARRIVAL_UNREACHABLE = "minimum_arrival_unreachable"
    TOO_MANY_STOPS = "too_many_stops"
    BATTERY_EXHAUSTED = "battery_exhausted"
    BELOW_MINIMUM_ARRIVAL = "below_minimum_arrival"


# ============================================================
# Charge curve
# ============================================================

@dataclass(frozen=True)
class ChargeCurvePoint:
    soc_percent: float         # 0..100
    charging_power_kw: float   # max vermogen dat de auto op deze SoC accepteert


# ============================================================
# Station: ruwe input uit station discovery
# ============================================================

@dataclass(frozen=True)
class Station:
    id: str
    name: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Optioneel: ontbrekende waarden worden ingevuld door resolve_station()
    power_kw: Optional[float] = None
    price_per_kwh: Optional[float] = None
    connection_fee: Optional[float] = None
    available_chargers: Optional[int] = None
    total_chargers: Optional[int] = None

    is_fast_brand: bool = False
    is_fast_charger: bool = True
    distance_from_start_km: Optional[float] = None   # positie langs de route
    connector_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedStation:
    """Station met alle defaults ingevuld; snapshot die aan een stop hangt."""
    id: str
    name: str
    latitude: Optional[float]
    longitude: Optional[float]
    power_kw: float
    price_per_kwh: float
    connection_fee: float
    available_chargers: int
    total_chargers: int
    is_fast_brand: bool
    distance_from_start_km: Optional[float]
    charging_speed: ChargingSpeed
    connector_types: Tuple[str, ...] = ()

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "power_kw": self.power_kw,
            "price_per_kwh": self.price_per_kwh,
            "connection_fee": self.connection_fee,
            "available_chargers": self.available_chargers,
            "total_chargers": self.total_chargers,
            "is_fast_brand": self.is_fast_brand,
            "distance_from_start_km": self.distance_from_start_km,
            "charging_speed": self.charging_speed.value,
        }


# ============================================================
# Optimizer output
# ============================================================

@dataclass(frozen=True)
class OptimizedStop:
    station: ResolvedStation
    arrival_battery: float          # %
    departure_battery: float        # %
    charging_minutes: int
    energy_added_kwh: float
    cost: float                     # PHP, incl. connection fee
    distance_from_start_km: float
    reason: str

    def to_dict(self):
        return {
            "station": self.station.to_dict(),
            "arrival_battery": self.arrival_battery,
            "departure_battery": self.departure_battery,
            "charging_minutes": self.charging_minutes,
            "energy_added_kwh": self.energy_added_kwh,
            "cost": self.cost,
            "distance_from_start_km": self.distance_from_start_km,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class OptimizedRoute:
    stops: Tuple[OptimizedStop, ...]
    total_charging_minutes: int
    total_cost: float
    total_distance_km: float
    strategy: str
    final_battery: float
    distance_covered_km: float

    @property
    def total_energy_added_kwh(self) -> float:
        return sum(s.energy_added_kwh for s in self.stops)

    @property
    def is_feasible(self) -> bool:
        # Geen clamping: een lege batterij is informatie voor de UI
        if self.distance_covered_km < self.total_distance_km:
            return False
        if self.final_battery <= 0:
            return False
        return all(s.arrival_battery > 0 for s in self.stops)

    def to_dict(self):
        return {
            "stops": [s.to_dict() for s in self.stops],
            "total_charging_minutes": self.total_charging_minutes,
            "total_cost": self.total_cost,
            "total_distance_km": self.total_distance_km,
            "total_energy_added_kwh": self.total_energy_added_kwh,
            "strategy": self.strategy,
            "final_battery": self.final_battery,
            "distance_covered_km": self.distance_covered_km,
        }


# ============================================================
# Route segments (display)
# ============================================================

@dataclass(frozen=True)
class RouteSegment:
    order: int
    type: SegmentType
    location: str
    coordinates: Optional[Coordinates]

    distance_from_previous_km: float
    duration_from_previous_min: float
    cumulative_distance_km: float
    cumulative_duration_min: float

    battery_at_arrival: float
    battery_at_departure: Optional[float] = None

    station: Optional[ResolvedStation] = None
    charging_minutes: Optional[int] = None
    energy_charged_kwh: Optional[float] = None
    charging_cost: Optional[float] = None

    @property
    def id(self) -> str:
        return f"segment-{self.order}"

    def to_dict(self):
        return {
            "id": self.id,
            "order": self.order,
            "type": self.type.value,
            "location": self.location,
            "coordinates": list(self.coordinates) if self.coordinates else None,
            "distance_from_previous_km": self.distance_from_previous_km,
            "duration_from_previous_min": self.duration_from_previous_min,
            "cumulative_distance_km": self.cumulative_distance_km,
            "cumulative_duration_min": self.cumulative_duration_min,
            "battery_at_arrival": self.battery_at_arrival,
            "battery_at_departure": self.battery_at_departure,
            "station": self.station.to_dict() if self.station else None,
            "charging_minutes": self.charging_minutes,
            "energy_charged_kwh": self.energy_charged_kwh,
            "charging_cost": self.charging_cost,
        }


# ============================================================
# Kosten & resultaat
# ============================================================

@dataclass(frozen=True)
class CostBreakdown:
    charging_cost: float
    booking_fee: float
    commission_fee: float
    service_fee: float
    total_cost: float

    def to_dict(self):
        return {
            "charging_cost": self.charging_cost,
            "booking_fee": self.booking_fee,
            "commission_fee": self.commission_fee,
            "service_fee": self.service_fee,
            "total_cost": self.total_cost,
        }


@dataclass(frozen=True)
class PlanFailure:
    kind: InfeasibilityKind
    message: str
    stop_index: Optional[int] = None      # stop waar het misging (0-based)
    distance_km: Optional[float] = None
    battery_percent: Optional[float] = None
    guidance: Tuple[str, ...] = ()

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "message": self.message,
            "stop_index": self.stop_index,
            "distance_km": self.distance_km,
            "battery_percent": self.battery_percent,
            "guidance": list(self.guidance),
        }


@dataclass
class PlanResult:
    success: bool
    route: OptimizedRoute
    failure: Optional[PlanFailure] = None
    segments: List[RouteSegment] = field(default_factory=list)
    cost_breakdown: Optional[CostBreakdown] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "success": self.success,
            "route": self.route.to_dict(),
            "failure": self.failure.to_dict() if self.failure else None,
            "segments": [s.to_dict() for s in self.segments],
            "cost_breakdown": self.cost_breakdown.to_dict() if self.cost_breakdown else None,
            "warnings": list(self.warnings),
        }
