from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict
from typing import Any

from django.conf import settings
from django.core.cache import cache
from pydantic import ValidationError

from ev_planner.exceptions import (
    ExternalServiceError,
    MalformedResponseError,
    ProviderQuotaError,
    ProviderRefusalError,
)
from ev_planner.schemas import ProviderRoute
from ev_planner.services.fallback import FallbackRouteSynthesizer, map_search_uri
from ev_planner.services.provider import RouteProviderClient
from ev_planner.services.types import GeoPoint, ProviderAnswer, RouteCandidate

REFUSAL_PHRASES = ("i am sorry", "i'm sorry", "i apologize", "cannot fulfill")

ROUTE_PROMPT_TEMPLATE = """You are an expert EV routing engine.
TASK: Find 3 potential routes to "{destination}" from coordinates [{latitude}, {longitude}].

1. Use Google Maps to get real-time routing and traffic.
2. Use your knowledge of terrain to ESTIMATE 'elevationGainM', 'elevationLossM' and 'estimatedBatteryConsumption'.
3. Make one route "Eco-Optimal" (best for range), one "Fastest" and one "Balanced".

OUTPUT FORMAT: Return ONLY a raw JSON array. Do not apologize.

Schema:
[
  {{
    "id": "1",
    "name": "Route Name",
    "distanceKm": number,
    "durationMin": number,
    "elevationGainM": number,
    "elevationLossM": number,
    "trafficLevel": "Low" | "Moderate" | "High",
    "estimatedBatteryConsumption": number,
    "isOptimal": boolean,
    "reasoning": "Explain why this route is good for an EV"
  }}
]

Current Vehicle Battery: {battery_percent:g}%"""

logger = logging.getLogger(__name__)


def build_route_prompt(destination: str, battery_percent: float, origin: GeoPoint) -> str:
    return ROUTE_PROMPT_TEMPLATE.format(
        destination=destination,
        latitude=origin.latitude,
        longitude=origin.longitude,
        battery_percent=battery_percent,
    )


def is_refusal(text: str) -> bool:
    lowered = text.strip().lower()
    if not lowered:
        return True
    return any(phrase in lowered for phrase in REFUSAL_PHRASES)


def extract_route_array(text: str) -> list[dict[str, Any]]:
    """Return the first JSON array of objects embedded in ``text``.

    Models often wrap the array in prose or code fences, so every ``[`` is tried
    as a starting point until one decodes to a non-empty list of objects.
    """
    decoder = json.JSONDecoder()
    position = text.find("[")
    while position != -1:
        try:
            value, _ = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list) and value and all(isinstance(item, dict) for item in value):
            return value
        position = text.find("[", position + 1)

    raise MalformedResponseError("No route array found in provider response")


def parse_routes(answer: ProviderAnswer, destination: str) -> list[RouteCandidate]:
    if is_refusal(answer.text):
        raise ProviderRefusalError("Route provider refused or returned no content")

    items = extract_route_array(answer.text)
    try:
        provider_routes = [ProviderRoute.model_validate(item) for item in items]
    except ValidationError as exc:
        raise MalformedResponseError("Route objects do not match the expected shape") from exc

    fallback_uri = answer.map_uris[0] if answer.map_uris else map_search_uri(destination)
    return [
        RouteCandidate(
            id=route.id,
            name=route.name,
            distance_km=route.distance_km,
            duration_min=route.duration_min,
            elevation_gain_m=route.elevation_gain_m,
            elevation_loss_m=route.elevation_loss_m,
            traffic_level=route.traffic_level,
            estimated_battery_consumption=route.estimated_battery_consumption,
            is_optimal=route.is_optimal,
            reasoning=route.reasoning,
            is_simulated=False,
            map_uri=route.map_uri or fallback_uri,
        )
        for route in provider_routes
    ]


class RouteAcquisitionClient:
    """Fetches candidate routes from the provider, degrading to simulated routes on failure."""

    def __init__(
        self,
        provider: RouteProviderClient | None = None,
        synthesizer: FallbackRouteSynthesizer | None = None,
        default_origin: GeoPoint | None = None,
    ) -> None:
        self.provider = provider or RouteProviderClient()
        self.synthesizer = synthesizer or FallbackRouteSynthesizer()
        self.default_origin = default_origin or GeoPoint(
            latitude=settings.DEFAULT_ORIGIN_LATITUDE,
            longitude=settings.DEFAULT_ORIGIN_LONGITUDE,
        )

    def acquire_routes(
        self,
        destination: str,
        battery_percent: float,
        location: GeoPoint | None = None,
    ) -> list[RouteCandidate]:
        origin = location or self.default_origin
        cache_key = self._cache_key(destination, battery_percent, origin)
        cached = cache.get(cache_key)
        if cached:
            return [RouteCandidate(**item) for item in cached]

        try:
            prompt = build_route_prompt(destination, battery_percent, origin)
            answer = self.provider.route_answer(prompt, origin)
            routes = parse_routes(answer, destination)
        except ProviderQuotaError as exc:
            logger.warning("Route provider quota exceeded, using simulated routes: %s", exc)
            return self.synthesizer.synthesize(destination, battery_percent)
        except ExternalServiceError as exc:
            logger.warning(
                "Route provider unavailable, using simulated routes: %s (cause: %r)",
                exc,
                exc.__cause__,
            )
            return self.synthesizer.synthesize(destination, battery_percent)
        except ProviderRefusalError as exc:
            logger.warning("Route provider refused, using simulated routes: %s", exc)
            return self.synthesizer.synthesize(destination, battery_percent)
        except MalformedResponseError as exc:
            logger.warning("Route provider response unusable, using simulated routes: %s", exc)
            return self.synthesizer.synthesize(destination, battery_percent)

        cache.set(
            cache_key,
            [asdict(route) for route in routes],
            timeout=settings.ROUTE_CACHE_TTL_SECONDS,
        )
        logger.info("Acquired %d provider routes for %r", len(routes), destination)
        return routes

    @staticmethod
    def _cache_key(destination: str, battery_percent: float, origin: GeoPoint) -> str:
        encoded = (
            f"{destination.strip().lower()}|{origin.latitude:.5f}:{origin.longitude:.5f}"
            f"|{battery_percent:.1f}"
        ).encode()
        digest = hashlib.sha256(encoded).hexdigest()
        return f"routes:{digest}"
