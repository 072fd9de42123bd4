# chargestop_engine/strategy_runner.py

from __future__ import annotations
from typing import Dict, Optional

from .config import PlannerConfig
from .engine import TripPlanInput, TripPlannerEngine
from .strategies import STRATEGIES
from .types import PlanResult


# Scheelt de goedkoopste minder dan dit in reistijd, dan adviseren we die
RECOMMEND_CHEAPEST_WITHIN_MIN = 15.0

StrategyComparison = Dict[str, object]


def total_trip_minutes(driving_min: float, result: PlanResult) -> float:
    return driving_min + result.route.total_charging_minutes


class StrategyRunner:
    """
    Plant dezelfde rit met alle strategieën:
    - few_long   : weinig, lange stops
    - balanced   : gebalanceerd
    - many_short : veel korte stops in de snelle zone
    en kiest een aanbeveling.
    """

    def __init__(self, data: TripPlanInput, base_config: Optional[PlannerConfig] = None):
        self.data = data
        self.base_config = base_config

    def run(self) -> StrategyComparison:
        plans: Dict[str, PlanResult] = {}
        for name, strategy in STRATEGIES.items():
            plans[name] = TripPlannerEngine.plan(self.data, strategy, self.base_config)

        feasible = {name: r for name, r in plans.items() if r.success}

        recommended = None
        if feasible:
            fastest = min(
                feasible,
                key=lambda n: total_trip_minutes(self.data.duration_min, feasible[n]),
            )
            cheapest = min(feasible, key=lambda n: feasible[n].cost_breakdown.total_cost)

            time_difference = (
                total_trip_minutes(self.data.duration_min, feasible[cheapest])
                - total_trip_minutes(self.data.duration_min, feasible[fastest])
            )
            recommended = cheapest if time_difference < RECOMMEND_CHEAPEST_WITHIN_MIN else fastest

        return {
            "plans": {
                name: {
                    **result.to_dict(),
                    "total_duration_min": total_trip_minutes(self.data.duration_min, result),
                }
                for name, result in plans.items()
            },
            "recommended": recommended,
        }
