from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

TrafficLevel = Literal["Low", "Moderate", "High"]


@dataclass(slots=True, frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class ChargingStop:
    id: str
    km_at: float
    label: str


@dataclass(slots=True, frozen=True)
class RouteCandidate:
    id: str
    name: str
    distance_km: float
    duration_min: float
    elevation_gain_m: float
    elevation_loss_m: float
    traffic_level: TrafficLevel
    estimated_battery_consumption: float
    is_optimal: bool
    reasoning: str
    is_simulated: bool = False
    charging_stops: tuple[ChargingStop, ...] = ()
    map_uri: str | None = None


@dataclass(slots=True, frozen=True)
class ProviderAnswer:
    text: str
    map_uris: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class TripSession:
    active_destination: str
    candidates: tuple[RouteCandidate, ...] = ()
    selected_id: str | None = None
    location: GeoPoint | None = None

    @property
    def is_simulated(self) -> bool:
        return any(candidate.is_simulated for candidate in self.candidates)

    @property
    def selected_route(self) -> RouteCandidate | None:
        for candidate in self.candidates:
            if candidate.id == self.selected_id:
                return candidate
        return None
