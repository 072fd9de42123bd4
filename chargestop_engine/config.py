# chargestop_engine/config.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .pricing import PricingConfig
from .vehicle_model import STANDARD_VEHICLE, Vehicle


@dataclass(frozen=True)
class PlannerConfig:
    """
    Alle constanten van de planner, expliciet meegegeven i.p.v. globals.

    safety_margin en close_destination_fraction zijn empirisch gekozen
    (demo-tuning); nog niet gevalideerd tegen echte veiligheidsmarges.
    """

    vehicle: Vehicle = STANDARD_VEHICLE
    pricing: PricingConfig = field(default_factory=PricingConfig)

    safety_margin: float = 0.85              # plan een stop op 85% van het bereik
    close_destination_fraction: float = 0.5  # rest < 50% bereik → bijladen op maat
    close_destination_buffer: float = 10.0   # %-punt extra bij bijladen op maat
    charging_ceiling: float = 90.0           # nooit boven 90% laden (curve-taper)
    top_up_leg_fraction: float = 0.5         # stoppositie als het bereik net niet volstaat
    max_stops: int = 10

    # Stations binnen deze afstand vóór het geplande stoppunt komen in aanmerking
    station_search_radius_km: Optional[float] = 150.0

    demo_multiplier: float = 1.0

    def effective_multiplier(self, traffic_multiplier: float = 1.0) -> float:
        return self.demo_multiplier * traffic_multiplier
