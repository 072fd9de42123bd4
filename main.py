# ============================================================
# ChargeStop Engine: Backend API
# MAIN.PY (plan_trip + compare_strategies + trip_advice)
# ============================================================

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# OpenAI is optioneel: zonder key geeft /trip_advice de concepttekst terug
from openai import OpenAI

# Engine imports
from chargestop_engine.engine import TripPlanInput, TripPlannerEngine
from chargestop_engine.errors import InvalidInput
from chargestop_engine.logging_setup import setup_logging
from chargestop_engine.settings import get_settings
from chargestop_engine.strategy_runner import StrategyRunner
from chargestop_engine.types import Station


settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger("chargestop_engine.api")


# ============================================================
# FASTAPI INIT
# ============================================================

app = FastAPI(title="ChargeStop Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Geen key of advies uitgeschakeld → client blijft None
client = None
if settings.advice_enabled:
    try:
        client = OpenAI()
    except Exception as exc:
        logger.info("OpenAI client not configured, advice falls back to draft text: %s", exc)


# ============================================================
# REQUEST MODELS
# ============================================================

class StationModel(BaseModel):
    id: str
    name: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    power_kw: Optional[float] = None
    price_per_kwh: Optional[float] = None
    connection_fee: Optional[float] = None
    available_chargers: Optional[int] = None
    total_chargers: Optional[int] = None

    is_fast_brand: bool = False
    is_fast_charger: bool = True
    distance_from_start_km: Optional[float] = None
    connector_types: List[str] = []

    def to_station(self) -> Station:
        return Station(
            id=self.id,
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            power_kw=self.power_kw,
            price_per_kwh=self.price_per_kwh,
            connection_fee=self.connection_fee,
            available_chargers=self.available_chargers,
            total_chargers=self.total_chargers,
            is_fast_brand=self.is_fast_brand,
            is_fast_charger=self.is_fast_charger,
            distance_from_start_km=self.distance_from_start_km,
            connector_types=tuple(self.connector_types),
        )


class PlanTripRequest(BaseModel):
    # ROUTE (uit de routing-service)
    origin: str
    destination: str
    distance_km: float
    duration_min: float
    origin_coords: Optional[List[float]] = None
    destination_coords: Optional[List[float]] = None

    # STATIONS (uit station discovery)
    stations: List[StationModel] = []

    # GEBRUIKER
    initial_battery: float = 80.0
    minimum_arrival_battery: float = 15.0
    strategy: str | int = "balanced"
    traffic_multiplier: float = 1.0
    demo_mode: bool = False

    # VOERTUIG
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None

    # STATIONSFILTER
    only_available: bool = False
    only_fast_chargers: bool = False
    min_power_kw: Optional[float] = None
    connector_types: Optional[List[str]] = None
    station_search_radius_km: Optional[float] = Field(default=None, gt=0)

    def to_input(self) -> TripPlanInput:
        return TripPlanInput(
            origin=self.origin,
            destination=self.destination,
            distance_km=self.distance_km,
            duration_min=self.duration_min,
            stations=[s.to_station() for s in self.stations],

            initial_battery=self.initial_battery,
            minimum_arrival_battery=self.minimum_arrival_battery,
            strategy=self.strategy,
            traffic_multiplier=self.traffic_multiplier,
            demo_mode=self.demo_mode,

            vehicle_make=self.vehicle_make,
            vehicle_model=self.vehicle_model,

            origin_coords=_coords(self.origin_coords),
            destination_coords=_coords(self.destination_coords),

            only_available=self.only_available,
            only_fast_chargers=self.only_fast_chargers,
            min_power_kw=self.min_power_kw,
            connector_types=self.connector_types,
            station_search_radius_km=self.station_search_radius_km,
        )


def _coords(values: Optional[List[float]]):
    if not values:
        return None
    if len(values) != 2:
        raise HTTPException(status_code=422, detail="coordinates must be [latitude, longitude]")
    return (values[0], values[1])


# ============================================================
# ENDPOINTS
# ============================================================

@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/plan_trip")
def plan_trip(req: PlanTripRequest):
    try:
        return TripPlannerEngine.compute(req.to_input())
    except InvalidInput as exc:
        logger.info("Rejected /plan_trip request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))


@app.post("/compare_strategies")
def compare_strategies(req: PlanTripRequest):
    try:
        return StrategyRunner(req.to_input()).run()
    except InvalidInput as exc:
        logger.info("Rejected /compare_strategies request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))


# ============================================================
# ADVICE GENERATOR
# ============================================================

class AdviceContext(BaseModel):
    origin: str
    destination: str
    strategy: str

    success: bool
    stops: List[dict] = []
    final_battery: Optional[float] = None
    total_charging_minutes: Optional[float] = None
    total_cost: Optional[float] = None
    failure: Optional[dict] = None

    trip_assessment: Optional[dict] = None


class AdviceRequest(BaseModel):
    context: AdviceContext
    draft_text: str


@app.post("/trip_advice")
def trip_advice(req: AdviceRequest):

    ctx = req.context

    n_stops = len(ctx.stops)
    ctx.trip_assessment = {
        "stops_label": "none" if n_stops == 0 else "few" if n_stops <= 2 else "many",
        "arrival_label": (
            None if ctx.final_battery is None
            else "critical" if ctx.final_battery < 10
            else "low" if ctx.final_battery < 20
            else "comfortable"
        ),
        "guidance": (ctx.failure or {}).get("guidance", []),
    }

    if client is None:
        return {
            "advice": req.draft_text
        }

    prompt = f"""
ROLE
You write short, practical trip notes for drivers of electric vehicles.

RULES (DO NOT BREAK)
- Do NOT calculate anything.
- Do NOT introduce numbers, prices or percentages that are not in the CONTEXT.
- Use ONLY the facts from the CONTEXT block.
- If the trip is not feasible, explain the reason and repeat the guidance in plain words.

STRUCTURE
1. Summary of the trip
2. Charging stops (or why none are needed)
3. Advice

CONTEXT (FACTS):
From: {ctx.origin}
To: {ctx.destination}
Strategy: {ctx.strategy}
Feasible: {ctx.success}

Stops:
{ctx.stops}

Final battery: {ctx.final_battery}
Total charging minutes: {ctx.total_charging_minutes}
Total cost: {ctx.total_cost}

Failure:
{ctx.failure}

Assessment:
{ctx.trip_assessment}

DRAFT (MAY BE REWRITTEN AND RESTRUCTURED):
{req.draft_text}
"""

    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": "You are an EV road-trip assistant."},
                {"role": "user", "content": prompt}
            ],
            max_tokens=settings.advice_max_tokens,
            temperature=settings.advice_temperature,
        )
        return {"advice": response.choices[0].message.content}

    except Exception as e:
        logger.warning("Advice generation failed: %s", e)
        return {
            "error": str(e),
            "advice": req.draft_text
        }
