from pathlib import Path
from typing import Any

import httpx
import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

load_dotenv(Path(__file__).resolve().parent.parent / ".env.test", override=True)

GEOCODE_OK = {
    "status": "OK",
    "results": [{"geometry": {"location": {"lat": 30.2672, "lng": -97.7431}}}],
}


def solar_body(*areas: float, nested: bool = True) -> dict[str, Any]:
    if nested:
        segments = [{"stats": {"areaMeters2": a}} for a in areas]
    else:
        segments = [{"areaMeters2": a} for a in areas]
    return {"name": "buildings/x", "solarPotential": {"roofSegmentStats": segments}}


class FakeUpstream:
    """Answers outbound geocode, building-insights and CRM calls; records every request."""

    def __init__(self):
        self.geocode: Any = (200, GEOCODE_OK)
        self.solar: Any = (200, solar_body(139.0))
        self.crm: list[Any] = [(200, {"succeded": True})]
        self.requests: list[httpx.Request] = []

    def calls_to(self, marker: str) -> list[httpx.Request]:
        return [r for r in self.requests if marker in str(r.url)]

    def _answer(self, reply: Any, request: httpx.Request) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, text=body, request=request)
        return httpx.Response(status, json=body, request=request)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if "geocode" in url:
            return self._answer(self.geocode, request)
        if "buildingInsights" in url:
            return self._answer(self.solar, request)
        if "/contacts/" in url:
            reply = self.crm.pop(0) if len(self.crm) > 1 else self.crm[0]
            return self._answer(reply, request)
        return httpx.Response(404, request=request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def build_service(upstream):
    from roof_estimator.clients.crm import CrmClient
    from roof_estimator.clients.google_maps import GoogleMapsClient
    from roof_estimator.measurement.roof import RoofMeasurer
    from roof_estimator.pricing.material import MaterialTieredPricing
    from roof_estimator.pricing.story import StoryTieredPricing
    from roof_estimator.services.estimate_service import EstimateService
    from roof_estimator.storage.results import InMemoryResultStore

    def _build(writeback: bool = False, strategy: str = "story", store=None):
        maps = GoogleMapsClient(api_key="test-key", transport=upstream.transport)
        crm = CrmClient(
            token="crm-token" if writeback else "",
            field_id="fld_total_estimate" if writeback else "",
            base_url="https://crm.test",
            max_attempts=2,
            backoff_seconds=0,
            transport=upstream.transport,
        )
        if strategy == "material":
            pricing = MaterialTieredPricing(
                base_prices={"asphalt": 500, "metal": 950, "tile": 1200, "clay": 1200},
                story_multipliers={1: 1.0, 2: 1.15, 3: 1.30},
            )
        else:
            pricing = StoryTieredPricing({1: 500, 2: 575, 3: 650})
        return EstimateService(
            measurer=RoofMeasurer(maps),
            pricing=pricing,
            crm=crm,
            result_store=store if store is not None else InMemoryResultStore(),
        )

    return _build


@pytest.fixture
def make_client(build_service):
    from roof_estimator.dependencies import get_estimate_service, get_result_store
    from roof_estimator.main import app

    opened: list[TestClient] = []

    def _make(**kwargs) -> TestClient:
        service = build_service(**kwargs)
        app.dependency_overrides[get_estimate_service] = lambda: service
        app.dependency_overrides[get_result_store] = lambda: service.result_store
        c = TestClient(app, raise_server_exceptions=False)
        c.__enter__()
        opened.append(c)
        return c

    yield _make

    for c in opened:
        c.__exit__(None, None, None)
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()
