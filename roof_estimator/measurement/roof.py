import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from roof_estimator.clients.google_maps import Coordinates, GoogleMapsClient
from roof_estimator.errors import MeasurementUnavailableError
from roof_estimator.observability.logging import log
from roof_estimator.observability.prometheus import MEASUREMENTS_TOTAL

SQFT_PER_M2 = 10.7639
SQFT_PER_SQUARE = 100


@dataclass(frozen=True)
class MeasurementResult:
    raw_squares: int
    area_m2: float
    coordinates: Optional[Coordinates] = None


def segment_area_m2(segment: dict[str, Any]) -> float:
    # Two response shapes: {"stats": {"areaMeters2": ..}} or {"areaMeters2": ..}
    stats = segment.get("stats")
    value = stats.get("areaMeters2") if isinstance(stats, dict) else None
    if value is None:
        value = segment.get("areaMeters2")
    try:
        area = float(value)
    except (TypeError, ValueError):
        return 0.0
    return area if math.isfinite(area) and area > 0 else 0.0


def total_area_m2(segments: Iterable[dict[str, Any]]) -> float:
    return sum(segment_area_m2(s) for s in segments)


def m2_to_squares(area_m2: float) -> int:
    return math.ceil(area_m2 * SQFT_PER_M2 / SQFT_PER_SQUARE)


def apply_buffer(raw_squares: int) -> int:
    """Satellite footprints under-measure; pad auto-measured squares only."""
    if raw_squares <= 15:
        return raw_squares + 3
    if raw_squares <= 25:
        return raw_squares + 4
    return raw_squares + 5


class RoofMeasurer:
    def __init__(self, client: GoogleMapsClient):
        self.client = client

    def measure_or_raise(self, address: str) -> MeasurementResult:
        if not self.client.configured:
            raise MeasurementUnavailableError("provider_not_configured")

        coords = self.client.geocode(address)
        segments = self.client.roof_segments(coords)

        area = total_area_m2(segments)
        if not math.isfinite(area) or area <= 0:
            raise MeasurementUnavailableError("zero_roof_area")

        return MeasurementResult(raw_squares=m2_to_squares(area), area_m2=area, coordinates=coords)

    def measure(self, address: str) -> Optional[MeasurementResult]:
        """Returns None whenever the roof cannot be measured automatically."""
        try:
            result = self.measure_or_raise(address)
        except MeasurementUnavailableError as e:
            MEASUREMENTS_TOTAL.labels(outcome=e.reason).inc()
            log().warning("roof_measurement_unavailable", reason=e.reason, detail=e.message)
            return None

        MEASUREMENTS_TOTAL.labels(outcome="ok").inc()
        log().info(
            "roof_measured",
            area_m2=round(result.area_m2, 2),
            raw_squares=result.raw_squares,
        )
        return result
