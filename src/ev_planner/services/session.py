from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace

from django.conf import settings

from ev_planner.services.acquisition import RouteAcquisitionClient
from ev_planner.services.feasibility import apply_feasibility
from ev_planner.services.types import GeoPoint, RouteCandidate, TripSession

logger = logging.getLogger(__name__)


def default_selection(routes: list[RouteCandidate]) -> str | None:
    for route in routes:
        if route.is_optimal:
            return route.id
    return routes[0].id if routes else None


class TripSessionController:
    """Owns the single active trip and the only two ways of changing it.

    Every change swaps the whole ``TripSession`` snapshot. When requests overlap,
    a result is applied only if no newer request has already been applied.
    """

    def __init__(
        self,
        acquisition_client: RouteAcquisitionClient | None = None,
        max_range_km: float | None = None,
        default_destination: str | None = None,
        battery_percent: float | None = None,
    ) -> None:
        self.acquisition_client = acquisition_client or RouteAcquisitionClient()
        self.max_range_km = (
            max_range_km if max_range_km is not None else float(settings.MAX_RANGE_KM)
        )
        self.battery_percent = (
            battery_percent
            if battery_percent is not None
            else float(settings.DEFAULT_BATTERY_PERCENT)
        )
        self._session = TripSession(
            active_destination=default_destination or settings.DEFAULT_DESTINATION
        )
        self._lock = threading.Lock()
        self._tickets = itertools.count(1)
        self._applied_ticket = 0
        self._in_flight = 0

    @property
    def session(self) -> TripSession:
        return self._session

    @property
    def is_acquiring(self) -> bool:
        return self._in_flight > 0

    def ensure_routes(self) -> TripSession:
        if not self._session.candidates:
            return self.request_routes(self._session.active_destination)
        return self._session

    def request_routes(
        self,
        destination: str,
        location: GeoPoint | None = None,
        battery_percent: float | None = None,
    ) -> TripSession:
        with self._lock:
            ticket = next(self._tickets)
            self._in_flight += 1
            if battery_percent is not None:
                self.battery_percent = battery_percent
            battery = self.battery_percent
            origin = location or self._session.location

        try:
            routes = self.acquisition_client.acquire_routes(destination, battery, origin)
            routes = apply_feasibility(routes, self.max_range_km)
            updated = TripSession(
                active_destination=destination,
                candidates=tuple(routes),
                selected_id=default_selection(routes),
                location=origin,
            )
            with self._lock:
                if ticket > self._applied_ticket:
                    self._session = updated
                    self._applied_ticket = ticket
                else:
                    logger.info("Discarding stale routes for %r (request %d)", destination, ticket)
        except Exception:
            logger.exception("Route acquisition failed for %r, keeping previous trip", destination)
        finally:
            with self._lock:
                self._in_flight -= 1

        return self._session

    def select_route(self, route_id: str) -> TripSession:
        with self._lock:
            if any(candidate.id == route_id for candidate in self._session.candidates):
                self._session = replace(self._session, selected_id=route_id)
        return self._session
