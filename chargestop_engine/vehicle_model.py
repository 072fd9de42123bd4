# chargestop_engine/vehicle_model.py

from __future__ import annotations
from dataclasses import dataclass
from math import ceil
from typing import Dict, Optional, Sequence, Tuple

from .errors import InvalidInput
from .types import ChargeCurvePoint, ChargingSpeed


# ------------------------------------------------------------
# Laadsnelheid-drempels (kW)
# ------------------------------------------------------------
SLOW_MAX_KW = 22.0
FAST_MAX_KW = 100.0

# Stapgrootte voor curve-integratie (%-punt SoC)
SOC_STEP = 1.0


@dataclass(frozen=True)
class Vehicle:
    """
    Statisch referentiemodel van een EV voor de trip planner.
    """

    name: str
    battery_capacity_kwh: float          # bruikbare capaciteit (kWh)
    avg_consumption_kwh_per_km: float    # gemiddeld verbruik (kWh/km)
    max_charging_power_kw: float         # wat de auto maximaal accepteert (kW)
    charge_curve: Tuple[ChargeCurvePoint, ...]

    standard_charging_power_kw: float = 11.0
    fast_charging_power_kw: float = 0.0
    supported_plugs: Tuple[str, ...] = ()

    def __post_init__(self) -> None:

        # -----------------------------
        # Harde grenzen: contractfouten falen luid
        # -----------------------------
        if self.battery_capacity_kwh <= 0:
            raise InvalidInput(f"battery capacity must be > 0 kWh, got {self.battery_capacity_kwh}")
        if self.avg_consumption_kwh_per_km <= 0:
            raise InvalidInput(
                f"average consumption must be > 0 kWh/km, got {self.avg_consumption_kwh_per_km}"
            )
        if self.max_charging_power_kw <= 0:
            raise InvalidInput(f"max charging power must be > 0 kW, got {self.max_charging_power_kw}")

        validate_charge_curve(self.charge_curve)

    @property
    def max_range_km(self) -> float:
        return self.battery_capacity_kwh / self.avg_consumption_kwh_per_km


def validate_charge_curve(curve: Sequence[ChargeCurvePoint]) -> None:
    if not curve:
        raise InvalidInput("charge curve is empty")

    previous = None
    for point in curve:
        if point.charging_power_kw <= 0:
            raise InvalidInput(
                f"charge curve power must be > 0 kW (soc {point.soc_percent}: {point.charging_power_kw})"
            )
        if previous is not None and point.soc_percent < previous.soc_percent:
            raise InvalidInput(
                f"charge curve is not sorted by SoC ({previous.soc_percent} > {point.soc_percent})"
            )
        previous = point


def make_curve(points: Sequence[Tuple[float, float]]) -> Tuple[ChargeCurvePoint, ...]:
    return tuple(ChargeCurvePoint(float(soc), float(kw)) for soc, kw in points)


# ============================================================
# STANDAARDVOERTUIG: Tesla Model 3 Long Range (2023)
# ============================================================
# Curve op basis van praktijkmetingen: 250 kW tot 20%,
# daarna afbouw, boven 80% zeer traag (batterijbescherming).

STANDARD_CHARGE_CURVE = make_curve([
    (0, 250), (10, 250), (20, 250),
    (30, 240), (40, 200), (50, 140),
    (60, 100), (70, 70), (80, 50),
    (90, 30), (95, 20), (100, 15),
])

STANDARD_VEHICLE = Vehicle(
    name="Tesla Model 3 Long Range",
    battery_capacity_kwh=82.0,
    avg_consumption_kwh_per_km=0.141,     # 82 kWh / 580 km
    max_charging_power_kw=250.0,
    charge_curve=STANDARD_CHARGE_CURVE,
    standard_charging_power_kw=11.0,
    fast_charging_power_kw=250.0,
    supported_plugs=("CCS2", "Type 2", "Tesla Supercharger"),
)


# Verbruiksfactoren per rijomstandigheid
CONSUMPTION_MULTIPLIERS: Dict[str, float] = {
    "city": 1.0,
    "highway": 1.15,
    "uphill": 1.25,
    "downhill": 0.85,
    "with_ac": 1.08,
    "cold_weather": 1.12,
    "demo": 2.8,    # kunstmatig hoog, alleen voor demonstraties
}


# ============================================================
# Verbruik
# ============================================================

def consumption_for_distance(
    vehicle: Vehicle,
    distance_km: float,
    multiplier: float = 1.0,
) -> float:
    """Batterijpercentage dat een afstand kost (max 100)."""
    kwh_used = distance_km * vehicle.avg_consumption_kwh_per_km * multiplier
    percent_used = kwh_used / vehicle.battery_capacity_kwh * 100.0
    return min(100.0, percent_used)


# ============================================================
# Laadcurve
# ============================================================

def interpolate_charge_power(curve: Sequence[ChargeCurvePoint], soc_percent: float) -> float:
    """
    Lineaire interpolatie van het laadvermogen op de curve.
    Buiten het domein wordt geklemd op het eerste/laatste punt.
    """
    first = curve[0]
    last = curve[-1]

    if soc_percent <= first.soc_percent:
        return first.charging_power_kw
    if soc_percent >= last.soc_percent:
        return last.charging_power_kw

    for p1, p2 in zip(curve, curve[1:]):
        if soc_percent == p1.soc_percent:
            return p1.charging_power_kw
        if soc_percent == p2.soc_percent:
            return p2.charging_power_kw
        if p1.soc_percent < soc_percent < p2.soc_percent:
            ratio = (soc_percent - p1.soc_percent) / (p2.soc_percent - p1.soc_percent)
            return p1.charging_power_kw + ratio * (p2.charging_power_kw - p1.charging_power_kw)

    return last.charging_power_kw


def charging_time_minutes(
    vehicle: Vehicle,
    from_soc: float,
    to_soc: float,
    station_power_kw: float,
    curve: Optional[Sequence[ChargeCurvePoint]] = None,
) -> int:
    """
    Laadtijd via integratie over de curve in stappen van 1% SoC.

    Per stap is het vermogen min(curve(soc), stationvermogen); een snellader
    boven het piekvermogen van de auto helpt dus niet meer zodra de auto
    zelf afknijpt. Resultaat in hele minuten (naar boven afgerond).
    """
    if from_soc >= to_soc:
        return 0
    if station_power_kw <= 0:
        raise InvalidInput(f"station power must be > 0 kW, got {station_power_kw}")

    curve = curve if curve is not None else vehicle.charge_curve
    kwh_per_percent = vehicle.battery_capacity_kwh / 100.0

    total_hours = 0.0
    soc = from_soc
    while soc < to_soc:
        # Laatste stap is bewust fractioneel (geen hele 1% voorbij het doel),
        # anders telt een lading tot 70.4% als een lading tot 71%
        step = min(SOC_STEP, to_soc - soc)
        power = min(interpolate_charge_power(curve, soc), station_power_kw)
        total_hours += (kwh_per_percent * step) / power
        soc += step

    return int(ceil(total_hours * 60.0))


# ============================================================
# Laadsnelheid & stekkers
# ============================================================

def charging_speed_category(power_kw: float) -> ChargingSpeed:
    if power_kw <= SLOW_MAX_KW:
        return ChargingSpeed.SLOW
    if power_kw <= FAST_MAX_KW:
        return ChargingSpeed.FAST
    return ChargingSpeed.ULTRA_FAST


def is_plug_compatible(vehicle: Vehicle, plug_type: str) -> bool:
    wanted = plug_type.strip().lower()
    return any(plug.lower() == wanted for plug in vehicle.supported_plugs)


# ============================================================
# Voertuigdatabase (benaderde fabrieksdata)
# ============================================================

@dataclass(frozen=True)
class VehicleSpec:
    make: str
    model: str
    battery_capacity_kwh: float
    range_km: float
    fast_charging: bool


EV_DATABASE: Tuple[VehicleSpec, ...] = (
    VehicleSpec("Tesla", "Model 3", 60, 430, True),
    VehicleSpec("Tesla", "Model S", 100, 652, True),
    VehicleSpec("Tesla", "Model X", 100, 536, True),
    VehicleSpec("Tesla", "Model Y", 75, 525, True),
    VehicleSpec("BYD", "Atto 3", 60, 420, True),
    VehicleSpec("BYD", "Seal", 82, 570, True),
    VehicleSpec("BYD", "Dolphin", 44, 340, False),
    VehicleSpec("Nissan", "Leaf", 40, 270, False),
    VehicleSpec("Nissan", "Ariya", 87, 500, True),
    VehicleSpec("Hyundai", "Kona Electric", 64, 484, True),
    VehicleSpec("Hyundai", "Ioniq 5", 77, 481, True),
    VehicleSpec("Hyundai", "Ioniq 6", 77, 614, True),
    VehicleSpec("Kia", "EV6", 77, 528, True),
    VehicleSpec("Kia", "Niro EV", 64, 463, True),
    VehicleSpec("MG", "ZS EV", 51, 320, False),
    VehicleSpec("MG", "MG4", 64, 450, True),
    VehicleSpec("Chevrolet", "Bolt EV", 66, 417, True),
    VehicleSpec("Ford", "Mustang Mach-E", 88, 491, True),
    VehicleSpec("Volkswagen", "ID.4", 82, 418, True),
    VehicleSpec("BMW", "i3", 42, 260, False),
    VehicleSpec("BMW", "iX", 111, 630, True),
    VehicleSpec("Mercedes-Benz", "EQS", 107, 770, True),
    VehicleSpec("Mercedes-Benz", "EQE", 90, 639, True),
    VehicleSpec("Audi", "e-tron", 95, 436, True),
    VehicleSpec("Polestar", "2", 78, 540, True),
    VehicleSpec("Rivian", "R1T", 135, 505, True),
)

# Piekvermogen waarmee de standaardcurve geschaald wordt
FAST_PEAK_KW = 150.0
STANDARD_PEAK_KW = 50.0


def find_vehicle_spec(make: str, model: str) -> Optional[VehicleSpec]:
    make_l = make.strip().lower()
    model_l = model.strip().lower()
    for spec in EV_DATABASE:
        if spec.make.lower() == make_l and spec.model.lower() == model_l:
            return spec
    return None


def vehicle_from_database(make: str, model: str) -> Vehicle:
    """
    Bouwt een Vehicle uit de database. De standaardcurve wordt
    geschaald naar het piekvermogen van de laadklasse.
    """
    spec = find_vehicle_spec(make, model)
    if spec is None:
        raise InvalidInput(f"unknown vehicle: {make} {model}")

    peak = FAST_PEAK_KW if spec.fast_charging else STANDARD_PEAK_KW
    scale = peak / STANDARD_VEHICLE.max_charging_power_kw
    curve = tuple(
        ChargeCurvePoint(p.soc_percent, p.charging_power_kw * scale)
        for p in STANDARD_CHARGE_CURVE
    )

    return Vehicle(
        name=f"{spec.make} {spec.model}",
        battery_capacity_kwh=float(spec.battery_capacity_kwh),
        avg_consumption_kwh_per_km=spec.battery_capacity_kwh / spec.range_km,
        max_charging_power_kw=peak,
        charge_curve=curve,
        fast_charging_power_kw=peak,
        supported_plugs=("CCS2", "Type 2") if spec.fast_charging else ("Type 2",),
    )
