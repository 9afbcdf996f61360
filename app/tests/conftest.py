import asyncio
import os
import sys
from typing import Any, Dict, List

import httpx
import pytest

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from config import Settings
from services.fioletowe import FioletoweService

# Kraków center is 50.0614, 19.9383 with a 15 km radius
KRAKOW_CAR = {"lat": 50.0620, "lng": 19.9400}
# ~19 km north: outside the strict radius, inside the soft one
KRAKOW_OUTSKIRTS = {"lat": 50.2314, "lng": 19.9383}
WARSAW_CAR = {"lat": 52.2297, "lng": 21.0122}


def car(plate: str, point: Dict[str, float] = None, **fields) -> Dict[str, Any]:
    record = {"regNumber": plate, "available": True, "reserved": False}
    record.update(point or KRAKOW_CAR)
    record.update(fields)
    return record


class FakeUpstream:
    """fioletowe.live stand-in served through httpx.MockTransport"""

    def __init__(self):
        self.zones: Dict[int, Any] = {}
        self.delays: Dict[int, float] = {}
        self.models: Any = [{"id": 1, "name": "Fiat 500", "maxFuel": 35}]
        self.routes: Dict[str, Any] = {}
        self.fail_status: int = None
        self.calls: List[httpx.Request] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.fail_status:
            return httpx.Response(self.fail_status, json={"error": "upstream down"})

        path = request.url.path
        if path == "/api/v1/cars":
            zone_id = int(request.url.params["zoneId"])
            if zone_id in self.delays:
                self.in_flight += 1
                self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
                try:
                    await asyncio.sleep(self.delays[zone_id])
                finally:
                    self.in_flight -= 1
            payload = self.zones.get(zone_id, [])
            if isinstance(payload, httpx.Response):
                return payload
            return httpx.Response(200, json=payload)
        if path == "/api/v1/car-models":
            return httpx.Response(200, json=self.models)

        key = path + (f"?{request.url.query.decode()}" if request.url.query else "")
        if key in self.routes:
            payload = self.routes[key]
            if isinstance(payload, httpx.Response):
                return payload
            return httpx.Response(200, json=payload)
        return httpx.Response(404, json={"error": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def zone_calls(self) -> List[int]:
        return [
            int(r.url.params["zoneId"]) for r in self.calls if r.url.path == "/api/v1/cars"
        ]

    def model_calls(self) -> int:
        return sum(1 for r in self.calls if r.url.path == "/api/v1/car-models")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        fioletowe_origin="https://fioletowe.test",
        request_timeout=0.5,
        request_pause=0,
        batch_budget=2.0,
        zone_workers=4,
        probe_first_zone=1,
        probe_last_zone=10,
        discovery_batch_size=5,
        discovery_target=3,
        zone_ttl_seconds=600,
        models_ttl_seconds=600,
        soft_radius_factor=1.5,
        default_city="krakow",
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def fioletowe(test_settings, upstream) -> FioletoweService:
    return FioletoweService(test_settings, transport=upstream.transport)
