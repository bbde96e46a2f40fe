from __future__ import annotations

import random

import pytest
from django.core.cache import cache
from django.test import Client

from ev_planner import views
from ev_planner.services.types import ProviderAnswer


@pytest.fixture(autouse=True)
def _reset_state():
    cache.clear()
    views._trip_controller = None
    views._tip_service = None
    yield
    cache.clear()
    views._trip_controller = None
    views._tip_service = None


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(7)


@pytest.fixture
def provider_routes_text() -> str:
    return """Here are your routes:
[
  {"id": "1", "name": "Coastal Eco", "distanceKm": 250, "durationMin": 240,
   "elevationGainM": 120, "elevationLossM": 110, "trafficLevel": "Low",
   "estimatedBatteryConsumption": 48.5, "isOptimal": true,
   "reasoning": "Flat terrain and steady speeds."},
  {"id": "2", "name": "Highway Express", "distanceKm": 100, "durationMin": 70,
   "elevationGainM": 60, "elevationLossM": 60, "trafficLevel": "Moderate",
   "estimatedBatteryConsumption": 25, "isOptimal": false,
   "reasoning": "Fastest option."},
  {"id": "3", "name": "City Balanced", "distanceKm": 99.5, "durationMin": 95,
   "elevationGainM": 30, "elevationLossM": 35, "trafficLevel": "High",
   "estimatedBatteryConsumption": 21.2, "isOptimal": false,
   "reasoning": "Shorter but congested."}
]
Drive safely!"""


@pytest.fixture
def provider_answer(provider_routes_text: str) -> ProviderAnswer:
    return ProviderAnswer(
        text=provider_routes_text,
        map_uris=["https://maps.google.com/?cid=123"],
    )
