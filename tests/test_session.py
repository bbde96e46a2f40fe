from __future__ import annotations

import threading

from ev_planner.exceptions import ProviderQuotaError
from ev_planner.services.acquisition import RouteAcquisitionClient
from ev_planner.services.distance import DistanceEstimator
from ev_planner.services.fallback import FallbackRouteSynthesizer
from ev_planner.services.session import TripSessionController, default_selection
from ev_planner.services.types import GeoPoint, ProviderAnswer, RouteCandidate


def _route(route_id: str, distance_km: float, *, optimal: bool = False, simulated: bool = False):
    return RouteCandidate(
        id=route_id,
        name=f"Route {route_id}",
        distance_km=distance_km,
        duration_min=30.0,
        elevation_gain_m=0.0,
        elevation_loss_m=0.0,
        traffic_level="Moderate",
        estimated_battery_consumption=10.0,
        is_optimal=optimal,
        reasoning="",
        is_simulated=simulated,
    )


def _controller(acquisition_client) -> TripSessionController:
    return TripSessionController(
        acquisition_client=acquisition_client,
        max_range_km=100.0,
        default_destination="VIT Chennai",
        battery_percent=80.0,
    )


def test_initial_session_has_default_destination_and_no_routes(mocker) -> None:
    controller = _controller(mocker.Mock())

    assert controller.session.active_destination == "VIT Chennai"
    assert controller.session.candidates == ()
    assert controller.session.is_simulated is False
    assert controller.is_acquiring is False


def test_request_routes_replaces_session_and_selects_optimal(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [
        _route("1", 250.0),
        _route("2", 80.0, optimal=True),
    ]
    controller = _controller(acquisition)

    session = controller.request_routes("Vellore")

    assert session.active_destination == "Vellore"
    assert session.selected_id == "2"
    assert [len(route.charging_stops) for route in session.candidates] == [2, 0]
    assert session.is_simulated is False
    assert controller.is_acquiring is False
    acquisition.acquire_routes.assert_called_once_with("Vellore", 80.0, None)


def test_request_routes_falls_back_to_first_route_without_optimal(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [_route("a", 10.0), _route("b", 20.0)]

    session = _controller(acquisition).request_routes("Vellore")

    assert session.selected_id == "a"


def test_default_selection_of_empty_list_is_none() -> None:
    assert default_selection([]) is None


def test_is_simulated_derived_from_candidates(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.side_effect = [
        [_route("1", 10.0, optimal=True), _route("2", 10.0, simulated=True)],
        [_route("1", 10.0, optimal=True)],
    ]
    controller = _controller(acquisition)

    assert controller.request_routes("A").is_simulated is True
    assert controller.request_routes("B").is_simulated is False


def test_unexpected_failure_keeps_previous_trip_and_clears_acquiring(mocker, caplog) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.side_effect = [
        [_route("1", 10.0, optimal=True)],
        RuntimeError("boom"),
    ]
    controller = _controller(acquisition)
    before = controller.request_routes("Vellore")

    with caplog.at_level("ERROR", logger="ev_planner"):
        after = controller.request_routes("Bangalore")

    assert after is before
    assert after.active_destination == "Vellore"
    assert controller.is_acquiring is False
    assert "Route acquisition failed for 'Bangalore'" in caplog.text


def test_select_route_sets_known_id(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [
        _route("1", 10.0, optimal=True),
        _route("2", 20.0),
    ]
    controller = _controller(acquisition)
    controller.request_routes("Vellore")

    session = controller.select_route("2")

    assert session.selected_id == "2"
    assert session.selected_route.distance_km == 20.0


def test_select_unknown_route_is_noop(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [_route("1", 10.0, optimal=True)]
    controller = _controller(acquisition)
    before = controller.request_routes("Vellore")

    after = controller.select_route("99")

    assert after is before
    assert after.selected_id == "1"


def test_ensure_routes_acquires_default_destination_once(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [_route("1", 10.0, optimal=True)]
    controller = _controller(acquisition)

    controller.ensure_routes()
    controller.ensure_routes()

    acquisition.acquire_routes.assert_called_once_with("VIT Chennai", 80.0, None)


def test_location_and_battery_carry_over_to_later_requests(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [_route("1", 10.0, optimal=True)]
    controller = _controller(acquisition)
    location = GeoPoint(latitude=12.97, longitude=77.59)

    controller.request_routes("Vellore", location, battery_percent=42.0)
    controller.request_routes("Bangalore")

    acquisition.acquire_routes.assert_called_with("Bangalore", 42.0, location)
    assert controller.session.location == location


def test_overlapping_requests_latest_applied_wins(mocker) -> None:
    release_first = threading.Event()
    first_started = threading.Event()

    def acquire(destination, battery_percent, location=None):
        if destination == "Slow":
            first_started.set()
            release_first.wait(timeout=5)
        return [_route("1", 10.0, optimal=True)]

    acquisition = mocker.Mock()
    acquisition.acquire_routes.side_effect = acquire
    controller = _controller(acquisition)

    worker = threading.Thread(target=controller.request_routes, args=("Slow",))
    worker.start()
    assert first_started.wait(timeout=5)
    assert controller.is_acquiring is True

    controller.request_routes("Fast")
    release_first.set()
    worker.join(timeout=5)

    assert controller.session.active_destination == "Fast"
    assert controller.is_acquiring is False


def test_sequential_requests_apply_in_order(mocker) -> None:
    acquisition = mocker.Mock()
    acquisition.acquire_routes.return_value = [_route("1", 10.0, optimal=True)]
    controller = _controller(acquisition)

    controller.request_routes("First")
    controller.request_routes("Second")

    assert controller.session.active_destination == "Second"


def test_quota_failure_end_to_end_yields_simulated_session(mocker) -> None:
    provider = mocker.Mock()
    provider.route_answer.side_effect = ProviderQuotaError("quota")
    acquisition = RouteAcquisitionClient(
        provider=provider,
        synthesizer=FallbackRouteSynthesizer(
            estimator=DistanceEstimator(known_distances=[("bangalore", 330.0)]),
            reserve_percent=5.0,
        ),
        default_origin=GeoPoint(latitude=13.0, longitude=80.0),
    )
    controller = _controller(acquisition)

    session = controller.request_routes("Bangalore")

    assert session.is_simulated is True
    assert session.selected_id == "1"
    eco = session.candidates[0]
    assert [len(route.charging_stops) for route in session.candidates] == [2, 3, 3]
    assert eco.distance_km == 297.0


def test_infinite_provider_distance_still_leaves_a_plan(mocker) -> None:
    provider = mocker.Mock()
    provider.route_answer.return_value = ProviderAnswer(
        text='[{"id": "1", "distanceKm": Infinity, "durationMin": 60, "trafficLevel": "Low",'
        ' "estimatedBatteryConsumption": 20, "isOptimal": true}]'
    )
    acquisition = RouteAcquisitionClient(
        provider=provider,
        synthesizer=FallbackRouteSynthesizer(
            estimator=DistanceEstimator(known_distances=[("vellore", 140.0)]),
            reserve_percent=5.0,
        ),
        default_origin=GeoPoint(latitude=13.0, longitude=80.0),
    )

    session = _controller(acquisition).request_routes("Vellore")

    assert session.active_destination == "Vellore"
    assert len(session.candidates) == 3
    assert session.is_simulated is True
