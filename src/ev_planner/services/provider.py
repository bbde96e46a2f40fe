from __future__ import annotations

import time
from typing import Any

import httpx
from django.conf import settings
from pydantic import ValidationError

from ev_planner.exceptions import (
    ExternalServiceError,
    MalformedResponseError,
    ProviderQuotaError,
)
from ev_planner.schemas import ProviderEnvelope
from ev_planner.services.types import GeoPoint, ProviderAnswer

QUOTA_MARKERS = ("quota", "resource_exhausted", "rate limit")


class RouteProviderClient:
    """Client for the AI mapping provider (Gemini ``generateContent`` REST API)."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        tip_model: str | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.ROUTE_PROVIDER_API_KEY
        self.base_url = (base_url or settings.ROUTE_PROVIDER_BASE_URL).rstrip("/")
        self.model = model or settings.ROUTE_PROVIDER_MODEL
        self.tip_model = tip_model or settings.ROUTE_PROVIDER_TIP_MODEL
        self.timeout = timeout if timeout is not None else settings.ROUTE_PROVIDER_TIMEOUT_SECONDS
        self.retry_count = (
            retry_count if retry_count is not None else settings.ROUTE_PROVIDER_RETRY_COUNT
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def route_answer(self, prompt: str, origin: GeoPoint) -> ProviderAnswer:
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"googleMaps": {}}],
            "toolConfig": {
                "retrievalConfig": {
                    "latLng": {
                        "latitude": origin.latitude,
                        "longitude": origin.longitude,
                    }
                }
            },
        }
        return self._generate(self.model, body)

    def short_answer(self, prompt: str) -> ProviderAnswer:
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        return self._generate(self.tip_model, body)

    def _generate(self, model: str, body: dict[str, Any]) -> ProviderAnswer:
        if not self.is_configured:
            raise ExternalServiceError("Route provider API key is not configured")

        endpoint = f"{self.base_url}/models/{model}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        for attempt in range(self.retry_count + 1):
            try:
                response = httpx.post(endpoint, json=body, headers=headers, timeout=self.timeout)
                if self._is_quota_response(response):
                    raise ProviderQuotaError(
                        f"Route provider quota exceeded (HTTP {response.status_code})"
                    )
                response.raise_for_status()
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise MalformedResponseError("Route provider returned invalid JSON") from exc
                return self._parse_answer(payload)
            except httpx.HTTPError as exc:
                if attempt >= self.retry_count:
                    raise ExternalServiceError("Route provider request failed") from exc
                time.sleep(0.3 * (attempt + 1))

        raise ExternalServiceError("Route provider request failed")

    @staticmethod
    def _is_quota_response(response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code < 400:
            return False
        body = response.text.lower()
        return any(marker in body for marker in QUOTA_MARKERS)

    @staticmethod
    def _parse_answer(payload: Any) -> ProviderAnswer:
        try:
            envelope = ProviderEnvelope.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError("Route provider payload has an unexpected shape") from exc

        if not envelope.candidates:
            return ProviderAnswer(text="")

        first = envelope.candidates[0]
        parts = (first.content.parts if first.content else None) or []
        text = "".join(part.text or "" for part in parts).strip()

        metadata = first.grounding_metadata
        chunks = (metadata.grounding_chunks if metadata else None) or []
        map_uris = [chunk.maps.uri for chunk in chunks if chunk.maps and chunk.maps.uri]
        return ProviderAnswer(text=text, map_uris=map_uris)
