from __future__ import annotations

import random

from django.conf import settings

BASE_UNKNOWN_DISTANCE_KM = 15.0
KM_PER_CHARACTER = 2.0
MAX_JITTER_KM = 9


class DistanceEstimator:
    """Guesses a trip length from free-text destinations when no provider data exists.

    Known places are matched by substring against an ordered table, first match
    wins. Anything else gets a length-based estimate with a small random jitter.
    """

    def __init__(
        self,
        known_distances: list[tuple[str, float]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        table = (
            known_distances
            if known_distances is not None
            else settings.KNOWN_DESTINATION_DISTANCES_KM
        )
        self.known_distances = [(pattern.lower(), float(distance)) for pattern, distance in table]
        self.rng = rng or random.Random()

    def estimate(self, destination: str) -> float:
        normalized = destination.strip().lower()
        for pattern, distance_km in self.known_distances:
            if pattern in normalized:
                return distance_km

        jitter = self.rng.randint(0, MAX_JITTER_KM)
        return BASE_UNKNOWN_DISTANCE_KM + KM_PER_CHARACTER * len(destination) + jitter
