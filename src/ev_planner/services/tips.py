from __future__ import annotations

import logging

from ev_planner.exceptions import TripPlannerError
from ev_planner.services.provider import RouteProviderClient

DEFAULT_TIP = "Optimize throttle for better range."
SIMULATED_TIP = "Drive smoothly to maximize your simulated range."

logger = logging.getLogger(__name__)


class EfficiencyTipService:
    def __init__(self, provider: RouteProviderClient | None = None) -> None:
        self.provider = provider or RouteProviderClient()

    def tip(self, speed_kmh: float, battery_percent: float, *, simulated: bool = False) -> str:
        if simulated:
            return SIMULATED_TIP

        prompt = (
            f"Status: {speed_kmh:.0f}km/h, {battery_percent:.0f}% battery. "
            "Short EV driving tip (max 8 words)."
        )
        try:
            answer = self.provider.short_answer(prompt)
        except TripPlannerError as exc:
            logger.info("Efficiency tip unavailable: %s", exc)
            return DEFAULT_TIP

        text = answer.text.strip().strip('"')
        return text or DEFAULT_TIP
