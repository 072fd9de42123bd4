# chargestop_engine/route_segments.py

from __future__ import annotations
from typing import List, Optional

from .errors import InvalidInput
from .types import Coordinates, OptimizedRoute, RouteSegment, SegmentType


def build_segments(
    origin: str,
    destination: str,
    route_distance_km: float,
    route_duration_min: float,
    initial_battery: float,
    route: OptimizedRoute,
    origin_coords: Optional[Coordinates] = None,
    destination_coords: Optional[Coordinates] = None,
) -> List[RouteSegment]:
    """
    Zet de stops van de optimizer om in weergave-segmenten:
    start → (travel → charging_station)* → travel → destination.

    Rijtijd per travel-segment is het evenredige deel van de routeduur.
    Batterijwaarden komen 1-op-1 uit de optimizer; hier wordt niets
    opnieuw berekend of geklemd.
    """
    if route_distance_km <= 0:
        raise InvalidInput(f"route distance must be > 0 km, got {route_distance_km}")

    segments: List[RouteSegment] = []
    order = 0

    cum_distance = 0.0
    cum_duration = 0.0

    # -----------------------------
    # START
    # -----------------------------
    segments.append(RouteSegment(
        order=order,
        type=SegmentType.START,
        location=origin,
        coordinates=origin_coords,
        distance_from_previous_km=0.0,
        duration_from_previous_min=0.0,
        cumulative_distance_km=0.0,
        cumulative_duration_min=0.0,
        battery_at_arrival=initial_battery,
        battery_at_departure=initial_battery,
    ))
    order += 1

    # -----------------------------
    # STOPS
    # -----------------------------
    previous_km = 0.0
    for stop in route.stops:
        station = stop.station
        leg_km = stop.distance_from_start_km - previous_km
        leg_min = leg_km / route_distance_km * route_duration_min

        cum_distance += leg_km
        cum_duration += leg_min

        segments.append(RouteSegment(
            order=order,
            type=SegmentType.TRAVEL,
            location=f"Traveling to {station.name}",
            coordinates=station.coordinates,
            distance_from_previous_km=leg_km,
            duration_from_previous_min=leg_min,
            cumulative_distance_km=cum_distance,
            cumulative_duration_min=cum_duration,
            battery_at_arrival=stop.arrival_battery,
        ))
        order += 1

        cum_duration += stop.charging_minutes

        segments.append(RouteSegment(
            order=order,
            type=SegmentType.CHARGING_STATION,
            location=station.name,
            coordinates=station.coordinates,
            distance_from_previous_km=0.0,
            duration_from_previous_min=0.0,
            cumulative_distance_km=cum_distance,
            cumulative_duration_min=cum_duration,
            battery_at_arrival=stop.arrival_battery,
            battery_at_departure=stop.departure_battery,
            station=station,
            charging_minutes=stop.charging_minutes,
            energy_charged_kwh=stop.energy_added_kwh,
            charging_cost=stop.cost,
        ))
        order += 1

        previous_km = stop.distance_from_start_km

    # -----------------------------
    # LAATSTE RIT + BESTEMMING
    # -----------------------------
    final_km = route_distance_km - previous_km
    final_min = final_km / route_distance_km * route_duration_min
    cum_distance += final_km
    cum_duration += final_min

    segments.append(RouteSegment(
        order=order,
        type=SegmentType.TRAVEL,
        location=f"Traveling to {destination}",
        coordinates=destination_coords,
        distance_from_previous_km=final_km,
        duration_from_previous_min=final_min,
        cumulative_distance_km=cum_distance,
        cumulative_duration_min=cum_duration,
        battery_at_arrival=route.final_battery,
    ))
    order += 1

    segments.append(RouteSegment(
        order=order,
        type=SegmentType.DESTINATION,
        location=destination,
        coordinates=destination_coords,
        distance_from_previous_km=0.0,
        duration_from_previous_min=0.0,
        cumulative_distance_km=cum_distance,
        cumulative_duration_min=cum_duration,
        battery_at_arrival=route.final_battery,
    ))

    return segments
