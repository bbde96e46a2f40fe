from __future__ import annotations

import math

import pytest

from ev_planner.services.feasibility import apply_feasibility, plan_charging_stops
from ev_planner.services.types import RouteCandidate


def _route(route_id: str, distance_km: float) -> RouteCandidate:
    return RouteCandidate(
        id=route_id,
        name=f"Route {route_id}",
        distance_km=distance_km,
        duration_min=distance_km * 1.8,
        elevation_gain_m=10.0,
        elevation_loss_m=10.0,
        traffic_level="Low",
        estimated_battery_consumption=20.0,
        is_optimal=route_id == "1",
        reasoning="test",
    )


def test_route_over_range_gets_stops_at_each_range_multiple() -> None:
    [result] = apply_feasibility([_route("1", 250.0)], max_range_km=100.0)

    assert [stop.km_at for stop in result.charging_stops] == [100.0, 200.0]
    assert [stop.id for stop in result.charging_stops] == ["stop-1", "stop-2"]
    assert result.charging_stops[0].label == "Charging Stop 1 (100km)"


def test_route_equal_to_range_needs_no_stop() -> None:
    [result] = apply_feasibility([_route("1", 100.0)], max_range_km=100.0)

    assert result.charging_stops == ()


def test_route_just_over_range_gets_one_stop() -> None:
    stops = plan_charging_stops(100.5, 100.0)

    assert len(stops) == 1
    assert stops[0].km_at == 100.0


@pytest.mark.parametrize("distance_km", [0.5, 42.0, 99.9, 100.0, 100.1, 199.9, 200.0, 333.3, 1234.0])
def test_stop_count_matches_floor_of_distance_over_range(distance_km: float) -> None:
    max_range_km = 100.0
    [result] = apply_feasibility([_route("1", distance_km)], max_range_km)

    assert (distance_km > max_range_km) == (len(result.charging_stops) >= 1)
    if distance_km > max_range_km:
        assert len(result.charging_stops) == math.floor(distance_km / max_range_km)
    for index, stop in enumerate(result.charging_stops):
        assert stop.km_at == (index + 1) * max_range_km
        assert str(index + 1) in stop.label


def test_apply_feasibility_does_not_mutate_inputs() -> None:
    original = _route("1", 250.0)
    routes = [original, _route("2", 50.0)]

    results = apply_feasibility(routes, max_range_km=100.0)

    assert original.charging_stops == ()
    assert results[0] is not original
    assert results[0].name == original.name
    assert results[0].distance_km == original.distance_km
    assert [route.id for route in results] == ["1", "2"]


def test_apply_feasibility_replaces_existing_stops() -> None:
    stale = apply_feasibility([_route("1", 450.0)], max_range_km=100.0)

    [result] = apply_feasibility(stale, max_range_km=200.0)

    assert [stop.km_at for stop in result.charging_stops] == [200.0, 400.0]


def test_non_positive_range_yields_no_stops() -> None:
    assert plan_charging_stops(250.0, 0.0) == ()


@pytest.mark.parametrize("distance_km", [math.inf, math.nan])
def test_non_finite_distance_yields_no_stops(distance_km: float) -> None:
    [result] = apply_feasibility([_route("1", distance_km)], max_range_km=100.0)

    assert result.charging_stops == ()
