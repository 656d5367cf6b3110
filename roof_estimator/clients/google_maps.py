import time
from dataclasses import dataclass
from typing import Any

import httpx

from roof_estimator.config import settings
from roof_estimator.errors import MeasurementUnavailableError
from roof_estimator.observability.prometheus import OUTBOUND_LATENCY


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


class GoogleMapsClient:
    """Geocoding + Solar building insights over one API key."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = settings.google_maps_api_key if api_key is None else api_key
        seconds = settings.measurement_timeout_seconds if timeout is None else timeout
        self._timeout = httpx.Timeout(seconds, connect=min(seconds, 5.0))
        self._client = httpx.Client(timeout=self._timeout, transport=transport)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def close(self) -> None:
        self._client.close()

    def _get_json(self, provider: str, url: str, params: dict[str, Any]) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            resp = self._client.get(url, params={**params, "key": self.api_key})
        except httpx.TimeoutException as e:
            raise MeasurementUnavailableError(f"{provider}_timeout") from e
        except httpx.RequestError as e:
            raise MeasurementUnavailableError(f"{provider}_unreachable", str(e)) from e
        finally:
            OUTBOUND_LATENCY.labels(provider=provider).observe(time.perf_counter() - started)

        if resp.status_code != 200:
            raise MeasurementUnavailableError(
                f"{provider}_http_{resp.status_code}", resp.text[:200]
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise MeasurementUnavailableError(f"{provider}_invalid_json") from e
        if not isinstance(data, dict):
            raise MeasurementUnavailableError(f"{provider}_invalid_json")
        return data

    def geocode(self, address: str) -> Coordinates:
        data = self._get_json("geocode", settings.geocode_url, {"address": address})

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise MeasurementUnavailableError("geocode_no_result", f"status={status}")

        try:
            location = results[0]["geometry"]["location"]
            return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise MeasurementUnavailableError("geocode_no_result", "missing location") from e

    def roof_segments(self, coords: Coordinates) -> list[dict[str, Any]]:
        data = self._get_json(
            "building_insights",
            settings.building_insights_url,
            {
                "location.latitude": coords.lat,
                "location.longitude": coords.lng,
                "requiredQuality": settings.solar_required_quality,
            },
        )
        potential = data.get("solarPotential")
        if not isinstance(potential, dict):
            raise MeasurementUnavailableError("no_roof_segments")
        segments = potential.get("roofSegmentStats") or []
        if not isinstance(segments, list) or not segments:
            raise MeasurementUnavailableError("no_roof_segments")
        return [s for s in segments if isinstance(s, dict)]
