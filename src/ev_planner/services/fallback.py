from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

from django.conf import settings

from ev_planner.services.distance import DistanceEstimator
from ev_planner.services.types import RouteCandidate, TrafficLevel

MINUTES_PER_KM = 1.8
CONSUMPTION_PERCENT_PER_100_KM = 20.0
CONSUMPTION_STEP_PERCENT = 0.1
MAP_SEARCH_URL = "https://www.google.com/maps/search/"

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RouteVariant:
    id: str
    name: str
    distance_factor: float
    duration_factor: float
    consumption_factor: float
    elevation_gain_m: float
    elevation_loss_m: float
    traffic_level: TrafficLevel
    is_optimal: bool
    reasoning: str


ECO_VARIANT = RouteVariant(
    id="1",
    name="Eco-Simulated Optimized",
    distance_factor=0.9,
    duration_factor=1.0,
    consumption_factor=0.9,
    elevation_gain_m=30.0,
    elevation_loss_m=140.0,
    traffic_level="Low",
    is_optimal=True,
    reasoning=(
        "OFFLINE MODE: Simulated route calculated using localized elevation "
        "heuristics and standard EV power curves."
    ),
)
FAST_VARIANT = RouteVariant(
    id="2",
    name="Simulated Direct",
    distance_factor=1.1,
    duration_factor=0.8,
    consumption_factor=1.3,
    elevation_gain_m=55.0,
    elevation_loss_m=55.0,
    traffic_level="Moderate",
    is_optimal=False,
    reasoning="OFFLINE MODE: Estimated highway routing based on standard topology.",
)
BALANCED_VARIANT = RouteVariant(
    id="3",
    name="Simulated Balanced",
    distance_factor=1.05,
    duration_factor=0.95,
    consumption_factor=1.0,
    elevation_gain_m=40.0,
    elevation_loss_m=40.0,
    traffic_level="High",
    is_optimal=False,
    reasoning=(
        "OFFLINE MODE: Mixed urban and arterial estimation. Expect some "
        "stop-and-go consumption."
    ),
)
FALLBACK_VARIANTS = (ECO_VARIANT, FAST_VARIANT, BALANCED_VARIANT)


def map_search_uri(destination: str) -> str:
    return f"{MAP_SEARCH_URL}{quote(destination, safe='')}"


class FallbackRouteSynthesizer:
    def __init__(
        self,
        estimator: DistanceEstimator | None = None,
        reserve_percent: float | None = None,
    ) -> None:
        self.estimator = estimator or DistanceEstimator()
        self.reserve_percent = (
            reserve_percent
            if reserve_percent is not None
            else float(settings.BATTERY_RESERVE_PERCENT)
        )

    def synthesize(self, destination: str, battery_percent: float) -> list[RouteCandidate]:
        base_distance_km = self.estimator.estimate(destination)
        base_duration_min = round(base_distance_km * MINUTES_PER_KM)
        consumption_cap = battery_percent - self.reserve_percent
        # Variants stay strictly below the reserve line.
        variant_ceiling = round(consumption_cap - CONSUMPTION_STEP_PERCENT, 1)
        base_consumption = min(
            consumption_cap,
            base_distance_km / 100.0 * CONSUMPTION_PERCENT_PER_100_KM,
        )
        if consumption_cap <= 0:
            # Not clamped: a negative draw marks the trip as infeasible.
            logger.warning(
                "Battery at %.1f%% is at or below the %.1f%% reserve; simulated consumption is negative",
                battery_percent,
                self.reserve_percent,
            )

        uri = map_search_uri(destination)
        return [
            RouteCandidate(
                id=variant.id,
                name=variant.name,
                distance_km=round(base_distance_km * variant.distance_factor, 1),
                duration_min=round(base_duration_min * variant.duration_factor),
                elevation_gain_m=variant.elevation_gain_m,
                elevation_loss_m=variant.elevation_loss_m,
                traffic_level=variant.traffic_level,
                estimated_battery_consumption=min(
                    round(base_consumption * variant.consumption_factor, 1),
                    variant_ceiling,
                ),
                is_optimal=variant.is_optimal,
                reasoning=variant.reasoning,
                is_simulated=True,
                map_uri=uri,
            )
            for variant in FALLBACK_VARIANTS
        ]
