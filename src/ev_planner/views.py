from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from pydantic import BaseModel, ValidationError

from ev_planner.schemas import (
    ChargingStopResponse,
    Coordinate,
    EfficiencyTipQuery,
    RefreshRequest,
    RouteCandidateResponse,
    RouteRequest,
    SelectRouteRequest,
    TripSessionResponse,
)
from ev_planner.services.session import TripSessionController
from ev_planner.services.tips import EfficiencyTipService
from ev_planner.services.types import GeoPoint, TripSession

_trip_controller: TripSessionController | None = None
_tip_service: EfficiencyTipService | None = None


def get_trip_controller() -> TripSessionController:
    global _trip_controller
    if _trip_controller is None:
        _trip_controller = TripSessionController()
    return _trip_controller


def get_tip_service() -> EfficiencyTipService:
    global _tip_service
    if _tip_service is None:
        _tip_service = EfficiencyTipService()
    return _tip_service


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    controller = get_trip_controller()
    return JsonResponse(
        {
            "status": "ok",
            "provider_configured": controller.acquisition_client.provider.is_configured,
            "max_range_km": controller.max_range_km,
        }
    )


@require_GET
def trip_view(_: HttpRequest) -> HttpResponse:
    controller = get_trip_controller()
    session = controller.ensure_routes()
    return _session_response(controller, session)


@csrf_exempt
@require_POST
def request_routes_view(request: HttpRequest) -> HttpResponse:
    parsed = _parse_body(request, RouteRequest)
    if isinstance(parsed, JsonResponse):
        return parsed

    controller = get_trip_controller()
    session = controller.request_routes(
        parsed.destination,
        location=_to_point(parsed.location),
        battery_percent=parsed.battery_percent,
    )
    return _session_response(controller, session)


@csrf_exempt
@require_POST
def refresh_view(request: HttpRequest) -> HttpResponse:
    parsed = _parse_body(request, RefreshRequest)
    if isinstance(parsed, JsonResponse):
        return parsed

    controller = get_trip_controller()
    session = controller.request_routes(
        controller.session.active_destination,
        location=_to_point(parsed.location),
    )
    return _session_response(controller, session)


@csrf_exempt
@require_POST
def select_route_view(request: HttpRequest) -> HttpResponse:
    parsed = _parse_body(request, SelectRouteRequest)
    if isinstance(parsed, JsonResponse):
        return parsed

    controller = get_trip_controller()
    session = controller.select_route(parsed.route_id)
    return _session_response(controller, session)


@require_GET
def efficiency_tip_view(request: HttpRequest) -> HttpResponse:
    try:
        query = EfficiencyTipQuery.model_validate(request.GET.dict())
    except ValidationError as exc:
        return _validation_error(exc)

    simulated = get_trip_controller().session.is_simulated
    tip = get_tip_service().tip(query.speed_kmh, query.battery_percent, simulated=simulated)
    return JsonResponse({"tip": tip, "is_simulated": simulated})


def _session_response(controller: TripSessionController, session: TripSession) -> JsonResponse:
    selected = session.selected_route
    payload = TripSessionResponse(
        active_destination=session.active_destination,
        candidates=[
            RouteCandidateResponse(
                id=route.id,
                name=route.name,
                distance_km=route.distance_km,
                duration_min=route.duration_min,
                elevation_gain_m=route.elevation_gain_m,
                elevation_loss_m=route.elevation_loss_m,
                traffic_level=route.traffic_level,
                estimated_battery_consumption=route.estimated_battery_consumption,
                is_optimal=route.is_optimal,
                is_simulated=route.is_simulated,
                reasoning=route.reasoning,
                map_uri=route.map_uri,
                charging_stops=[
                    ChargingStopResponse(id=stop.id, km_at=stop.km_at, label=stop.label)
                    for stop in route.charging_stops
                ],
            )
            for route in session.candidates
        ],
        selected_id=session.selected_id,
        is_simulated=session.is_simulated,
        is_acquiring=controller.is_acquiring,
        max_range_km=controller.max_range_km,
        needs_recharge=bool(selected and selected.distance_km > controller.max_range_km),
        charging_stop_count=len(selected.charging_stops) if selected else 0,
        location=(
            Coordinate(
                latitude=session.location.latitude,
                longitude=session.location.longitude,
            )
            if session.location
            else None
        ),
    )
    return JsonResponse(payload.model_dump(mode="json"), status=200)


def _to_point(coordinate: Coordinate | None) -> GeoPoint | None:
    if coordinate is None:
        return None
    return GeoPoint(latitude=coordinate.latitude, longitude=coordinate.longitude)


def _parse_body(request: HttpRequest, schema: type[BaseModel]) -> Any:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _validation_error(exc: ValidationError) -> JsonResponse:
    return JsonResponse(
        {
            "error": {
                "code": "validation_error",
                "message": "Invalid request payload",
                "details": exc.errors(include_url=False, include_context=False),
            }
        },
        status=400,
    )


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)
