# chargestop_engine/pricing.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from .types import CostBreakdown, OptimizedStop, ResolvedStation, Station
from .vehicle_model import SLOW_MAX_KW, FAST_MAX_KW, charging_speed_category


# ============================================================
# PRICING CONFIG: PH laadmarkt 2024-2025 (PHP)
# ============================================================

@dataclass(frozen=True)
class PricingConfig:
    # Per-kWh tarief per laadklasse
    slow_rate: float = 25.0          # AC <= 22 kW
    fast_rate: float = 33.0          # DC <= 100 kW
    ultra_fast_rate: float = 38.0    # DC > 100 kW
    premium_brand_rate: float = 19.0

    # Sessie- en ritkosten
    connection_fee: float = 25.0     # per laadsessie
    booking_fee: float = 30.0        # vast per rit
    commission_rate: float = 0.02    # over de laadkosten
    service_fee: float = 0.0

    # Fallbacks voor onvolledige stationsdata
    default_fast_power_kw: float = 50.0
    default_slow_power_kw: float = 22.0


# ============================================================
# Prijs & kosten
# ============================================================

def price_for_power(
    power_kw: float,
    is_premium_brand: bool = False,
    station_price: Optional[float] = None,
    pricing: PricingConfig = PricingConfig(),
) -> float:
    """
    Prijs per kWh:
    - stationprijs wint als die bekend en positief is
    - anders vast merk-tarief voor premium snelladers
    - anders tabel op laadvermogen
    """
    if station_price is not None and station_price > 0:
        return float(station_price)

    if is_premium_brand:
        return pricing.premium_brand_rate

    if power_kw <= SLOW_MAX_KW:
        return pricing.slow_rate
    if power_kw <= FAST_MAX_KW:
        return pricing.fast_rate
    return pricing.ultra_fast_rate


def charging_cost(
    energy_kwh: float,
    price_per_kwh: float,
    include_connection_fee: bool = True,
    connection_fee: float = PricingConfig.connection_fee,
) -> float:
    fee = connection_fee if include_connection_fee else 0.0
    return energy_kwh * price_per_kwh + fee


# ============================================================
# Station defaults: de enige plek waar ontbrekende velden
# worden ingevuld (optimizer en scorer lezen allebei hieruit)
# ============================================================

def resolve_station(station: Station, pricing: PricingConfig = PricingConfig()) -> ResolvedStation:
    if station.power_kw is not None and station.power_kw > 0:
        power = float(station.power_kw)
    elif station.is_fast_charger:
        power = pricing.default_fast_power_kw
    else:
        power = pricing.default_slow_power_kw

    price = price_for_power(power, station.is_fast_brand, station.price_per_kwh, pricing)

    fee = station.connection_fee
    if fee is None or fee < 0:
        fee = pricing.connection_fee

    # Onbekende beschikbaarheid → neutraal (alles vrij)
    total = station.total_chargers if station.total_chargers and station.total_chargers > 0 else None
    available = station.available_chargers
    if total is None:
        total = max(1, available or 0)
        available = total if available is None else available
    elif available is None:
        available = total
    available = max(0, min(available, total))

    return ResolvedStation(
        id=station.id,
        name=station.name or f"Station {station.id}",
        latitude=station.latitude,
        longitude=station.longitude,
        power_kw=power,
        price_per_kwh=price,
        connection_fee=float(fee),
        available_chargers=int(available),
        total_chargers=int(total),
        is_fast_brand=station.is_fast_brand,
        distance_from_start_km=station.distance_from_start_km,
        charging_speed=charging_speed_category(power),
        connector_types=tuple(station.connector_types),
    )


# ============================================================
# TRIP COST ENGINE: kostenopbouw van een complete rit
# ============================================================

class TripCostEngine:
    def __init__(self, cfg: PricingConfig):
        self.cfg = cfg

    def compute_breakdown(self, stops: Sequence[OptimizedStop]) -> CostBreakdown:

        charging = sum(stop.cost for stop in stops)

        # Geen laadstops → geen boeking, geen commissie
        if not stops:
            return CostBreakdown(0.0, 0.0, 0.0, 0.0, 0.0)

        booking = self.cfg.booking_fee
        commission = charging * self.cfg.commission_rate
        service = self.cfg.service_fee

        total = charging + booking + commission + service

        return CostBreakdown(
            charging_cost=round(charging, 2),
            booking_fee=round(booking, 2),
            commission_fee=round(commission, 2),
            service_fee=round(service, 2),
            total_cost=round(total, 2),
        )
