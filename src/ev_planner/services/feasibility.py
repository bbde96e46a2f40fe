from __future__ import annotations

import math
from dataclasses import replace

from ev_planner.services.types import ChargingStop, RouteCandidate


def plan_charging_stops(distance_km: float, max_range_km: float) -> tuple[ChargingStop, ...]:
    if not (math.isfinite(distance_km) and math.isfinite(max_range_km)):
        return ()
    if max_range_km <= 0 or distance_km <= max_range_km:
        return ()

    stop_count = math.floor(distance_km / max_range_km)
    stops = []
    for index in range(1, stop_count + 1):
        km_at = index * max_range_km
        stops.append(
            ChargingStop(
                id=f"stop-{index}",
                km_at=km_at,
                label=f"Charging Stop {index} ({km_at:g}km)",
            )
        )
    return tuple(stops)


def apply_feasibility(
    routes: list[RouteCandidate],
    max_range_km: float,
) -> list[RouteCandidate]:
    return [
        replace(route, charging_stops=plan_charging_stops(route.distance_km, max_range_km))
        for route in routes
    ]
