# chargestop_engine/station_scorer.py

from __future__ import annotations
from typing import List, Optional, Sequence

from .strategies import ChargingStrategy
from .types import ResolvedStation
from .vehicle_model import Vehicle, is_plug_compatible


# Normalisatie: boven 150 kW levert vermogen geen extra score op,
# prijzen tussen ₱15 en ₱45 lopen van 1.0 naar 0.0
POWER_CAP_KW = 150.0
PRICE_FLOOR = 15.0
PRICE_SPAN = 30.0

FAST_BRAND_BONUS = 1.15
MIN_AVAILABILITY_FACTOR = 0.5


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


# ============================================================
# SCORING
# ============================================================

class StationScorer:

    @staticmethod
    def power_score(station: ResolvedStation) -> float:
        return min(station.power_kw / POWER_CAP_KW, 1.0)

    @staticmethod
    def price_score(station: ResolvedStation) -> float:
        return _clamp(1.0 - (station.price_per_kwh - PRICE_FLOOR) / PRICE_SPAN, 0.0, 1.0)

    @staticmethod
    def availability_factor(station: ResolvedStation) -> float:
        """
        0.5 (niets vrij) .. 1.0 (alles vrij). Niet uitsluiten: de
        beschikbaarheid is vaak verouderd of niet gemeld.
        """
        if station.total_chargers <= 0:
            return 1.0
        ratio = _clamp(station.available_chargers / station.total_chargers, 0.0, 1.0)
        return MIN_AVAILABILITY_FACTOR + (1.0 - MIN_AVAILABILITY_FACTOR) * ratio

    @staticmethod
    def score(station: ResolvedStation, strategy: ChargingStrategy) -> float:
        base = (
            strategy.speed_weight * StationScorer.power_score(station)
            + strategy.price_weight * StationScorer.price_score(station)
        )
        if station.is_fast_brand:
            base *= FAST_BRAND_BONUS
        return base * StationScorer.availability_factor(station)

    @staticmethod
    def select_best(
        stations: Sequence[ResolvedStation],
        strategy: ChargingStrategy,
    ) -> Optional[ResolvedStation]:
        if not stations:
            return None
        # max() houdt bij gelijke score het eerste station
        return max(stations, key=lambda s: StationScorer.score(s, strategy))


# ============================================================
# FILTERS
# ============================================================

def stations_near(
    stations: Sequence[ResolvedStation],
    previous_km: float,
    target_km: float,
    radius_km: Optional[float],
) -> List[ResolvedStation]:
    """
    Stations die bereikbaar zijn vóór het geplande stoppunt:
    positie in (previous_km, target_km], hooguit radius_km terug.
    Stations zonder bekende positie doen altijd mee.
    """
    near = []
    for station in stations:
        pos = station.distance_from_start_km
        if pos is None:
            near.append(station)
            continue
        if pos <= previous_km or pos > target_km:
            continue
        if radius_km is not None and target_km - pos > radius_km:
            continue
        near.append(station)
    return near


def filter_stations(
    stations: Sequence[ResolvedStation],
    only_available: bool = False,
    only_fast_chargers: bool = False,
    min_power_kw: Optional[float] = None,
    connector_types: Optional[Sequence[str]] = None,
    vehicle: Optional[Vehicle] = None,
) -> List[ResolvedStation]:
    result = []
    for station in stations:
        if only_available and station.available_chargers <= 0:
            continue
        if only_fast_chargers and station.power_kw <= 22.0:
            continue
        if min_power_kw and station.power_kw < min_power_kw:
            continue
        if connector_types:
            # Stations zonder connectorinfo laten we door
            if station.connector_types and not any(
                wanted in ct for wanted in connector_types for ct in station.connector_types
            ):
                continue
        elif vehicle is not None and vehicle.supported_plugs and station.connector_types:
            if not any(is_plug_compatible(vehicle, ct) for ct in station.connector_types):
                continue
        result.append(station)
    return result
