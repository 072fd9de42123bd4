# chargestop_engine/strategies.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Union

from .errors import InvalidInput


@dataclass(frozen=True)
class ChargingStrategy:
    """
    Vaste preset per planningsverzoek.

    target_soc   : waarheen geladen wordt (%)
    min_stop_soc : minimale SoC bij aankomst op een laadstation (%)
    speed_weight : gewicht van laadsnelheid t.o.v. prijs (0..1)
    """
    name: str
    code: int
    target_soc: float
    min_stop_soc: float
    speed_weight: float

    @property
    def price_weight(self) -> float:
        return 1.0 - self.speed_weight


FEW_LONG = ChargingStrategy("few_long", 0, target_soc=85.0, min_stop_soc=15.0, speed_weight=0.3)
BALANCED = ChargingStrategy("balanced", 1, target_soc=70.0, min_stop_soc=20.0, speed_weight=0.5)
MANY_SHORT = ChargingStrategy("many_short", 2, target_soc=55.0, min_stop_soc=25.0, speed_weight=0.7)

STRATEGIES: Dict[str, ChargingStrategy] = {
    s.name: s for s in (FEW_LONG, BALANCED, MANY_SHORT)
}


def get_strategy(key: Union[str, int, ChargingStrategy]) -> ChargingStrategy:
    """Accepteert naam ("balanced", "few-long"), code (0/1/2) of een preset."""
    if isinstance(key, ChargingStrategy):
        return key

    if isinstance(key, int) and not isinstance(key, bool):
        for strategy in STRATEGIES.values():
            if strategy.code == key:
                return strategy
        raise InvalidInput(f"unknown strategy code: {key}")

    if isinstance(key, str):
        name = key.strip().lower().replace("-", "_")
        if name in STRATEGIES:
            return STRATEGIES[name]

    raise InvalidInput(f"unknown strategy: {key!r}")
