from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_ROUTE_DISTANCE_KM = 40000.0


class ProviderRoute(BaseModel):
    """One route object as the provider is asked to return it."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
        allow_inf_nan=False,
    )

    id: str = Field(min_length=1)
    name: str = ""
    distance_km: float = Field(alias="distanceKm", gt=0.0, le=MAX_ROUTE_DISTANCE_KM)
    duration_min: float = Field(alias="durationMin", gt=0.0)
    elevation_gain_m: float = Field(default=0.0, alias="elevationGainM", ge=0.0)
    elevation_loss_m: float = Field(default=0.0, alias="elevationLossM", ge=0.0)
    traffic_level: Literal["Low", "Moderate", "High"] = Field(alias="trafficLevel")
    estimated_battery_consumption: float = Field(alias="estimatedBatteryConsumption")
    is_optimal: bool = Field(default=False, alias="isOptimal")
    reasoning: str = ""
    map_uri: str | None = Field(default=None, alias="mapUri")


class ProviderPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class ProviderContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[ProviderPart] | None = None


class ProviderMapsSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uri: str | None = None


class ProviderGroundingChunk(BaseModel):
    model_config = ConfigDict(extra="ignore")

    maps: ProviderMapsSource | None = None


class ProviderGroundingMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    grounding_chunks: list[ProviderGroundingChunk] | None = Field(
        default=None, alias="groundingChunks"
    )


class ProviderCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    content: ProviderContent | None = None
    grounding_metadata: ProviderGroundingMetadata | None = Field(
        default=None, alias="groundingMetadata"
    )


class ProviderEnvelope(BaseModel):
    """Top level of a ``generateContent`` response."""

    model_config = ConfigDict(extra="ignore")

    candidates: list[ProviderCandidate] | None = None


class Coordinate(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class RouteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    destination: str = Field(min_length=1, max_length=300)
    location: Coordinate | None = None
    battery_percent: float | None = Field(default=None, ge=0.0, le=100.0)


class RefreshRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    location: Coordinate | None = None


class SelectRouteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    route_id: str = Field(min_length=1, max_length=50)


class EfficiencyTipQuery(BaseModel):
    speed_kmh: float = Field(default=0.0, ge=0.0, le=400.0)
    battery_percent: float = Field(default=100.0, ge=0.0, le=100.0)


class ChargingStopResponse(BaseModel):
    id: str
    km_at: float
    label: str


class RouteCandidateResponse(BaseModel):
    id: str
    name: str
    distance_km: float
    duration_min: float
    elevation_gain_m: float
    elevation_loss_m: float
    traffic_level: Literal["Low", "Moderate", "High"]
    estimated_battery_consumption: float
    is_optimal: bool
    is_simulated: bool
    reasoning: str
    map_uri: str | None
    charging_stops: list[ChargingStopResponse]


class TripSessionResponse(BaseModel):
    active_destination: str
    candidates: list[RouteCandidateResponse]
    selected_id: str | None
    is_simulated: bool
    is_acquiring: bool
    max_range_km: float
    needs_recharge: bool
    charging_stop_count: int
    location: Coordinate | None
