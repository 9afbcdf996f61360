from datetime import datetime, timedelta, timezone

import pytest

from services.availability import Policy
from services.car_finder import CarFinder
from services.cities import CITIES
from services.fioletowe import FioletoweService
from services.model_dictionary import ModelDictionary
from services.warm_cache import WarmCache, ZoneCache
from conftest import KRAKOW_OUTSKIRTS, car


class Clock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def zone_cache(test_settings, clock):
    return ZoneCache(test_settings.zone_ttl_seconds, clock=clock)


@pytest.fixture
def finder(fioletowe, zone_cache, test_settings, clock):
    models = ModelDictionary(fioletowe, WarmCache(test_settings.models_ttl_seconds, clock=clock))
    return CarFinder(fioletowe, zone_cache, models, test_settings)


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_first_request_discovers_and_caches(self, finder, upstream, zone_cache):
        upstream.zones = {2: [car("KR1", modelId=1)], 7: [car("KR2")]}

        response = await finder.find("krakow")

        assert response.source == "discovery"
        assert response.zones == [2, 7]
        assert [c.plate for c in response.cars] == ["KR1", "KR2"]
        assert response.cars[0].model == "Fiat 500"
        assert sorted(upstream.zone_calls()) == list(range(1, 11))
        assert await zone_cache.fresh_zones("krakow") == [2, 7]

    @pytest.mark.asyncio
    async def test_second_request_within_window_skips_discovery(self, finder, upstream, clock):
        upstream.zones = {2: [car("KR1")], 7: [car("KR2")]}
        await finder.find("krakow")
        upstream.calls.clear()

        clock.advance(300)
        response = await finder.find("krakow")

        assert response.source == "cache"
        assert sorted(upstream.zone_calls()) == [2, 7]
        assert upstream.model_calls() == 0

    @pytest.mark.asyncio
    async def test_stale_zone_list_triggers_new_discovery(self, finder, upstream, clock):
        upstream.zones = {2: [car("KR1")]}
        await finder.find("krakow")
        upstream.calls.clear()

        clock.advance(601)
        response = await finder.find("krakow")

        assert response.source == "discovery"
        assert len(upstream.zone_calls()) == 10

    @pytest.mark.asyncio
    async def test_discovery_stops_at_target(self, finder, upstream):
        # target is 3 populated zones, batches of 5
        upstream.zones = {z: [car(f"KR{z}")] for z in (1, 2, 3, 4)}
        response = await finder.find("krakow")
        assert response.zones == [1, 2, 3, 4]
        assert sorted(upstream.zone_calls()) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_soft_only_zone_is_discovered_but_not_served(self, finder, upstream):
        upstream.zones = {
            3: [car("EDGE", KRAKOW_OUTSKIRTS)],
            4: [{"regNumber": "SILENT", "lat": 50.06, "lng": 19.94}],
        }
        response = await finder.find("krakow")
        assert response.zones == [3, 4]
        assert response.cars == []

    @pytest.mark.asyncio
    async def test_nothing_found_is_not_cached(self, finder, upstream, zone_cache):
        response = await finder.find("krakow")
        assert response.cars == [] and response.zones == []
        assert await zone_cache.fresh_zones("krakow") is None

    @pytest.mark.asyncio
    async def test_unknown_city_uses_default(self, finder, upstream):
        upstream.zones = {1: [car("KR1")]}
        response = await finder.find("atlantis")
        assert response.city == "krakow"
        assert response.count == 1

    @pytest.mark.asyncio
    async def test_batches_share_one_deadline(self, test_settings, upstream, clock):
        # each batch fits the budget alone, both together do not
        cfg = test_settings.model_copy(
            update={"request_timeout": 5.0, "batch_budget": 0.6, "zone_workers": 5}
        )
        service = FioletoweService(cfg, transport=upstream.transport)
        finder = CarFinder(
            service,
            ZoneCache(cfg.zone_ttl_seconds, clock=clock),
            ModelDictionary(service, WarmCache(cfg.models_ttl_seconds, clock=clock)),
            cfg,
        )
        upstream.zones = {z: [car(f"KR{z}")] for z in range(6, 11)}
        upstream.delays = {z: 0.4 for z in range(1, 11)}

        records, found = await finder.discover(CITIES["krakow"])

        assert found == []
        assert all(records[z] == [] for z in range(6, 11))


class TestFastPath:
    @pytest.mark.asyncio
    async def test_explicit_zones_skip_discovery(self, finder, upstream, zone_cache):
        upstream.zones = {4: [car("KR4")], 5: [car("KR5")]}
        response = await finder.find("krakow", zones=[5])
        assert response.source == "explicit"
        assert upstream.zone_calls() == [5]
        assert [c.plate for c in response.cars] == ["KR5"]
        assert await zone_cache.fresh_zones("krakow") is None

    @pytest.mark.asyncio
    async def test_empty_fast_path_falls_back_to_last_result(self, finder, upstream):
        upstream.zones = {2: [car("KR1")]}
        first = await finder.find("krakow")

        upstream.fail_status = 500
        second = await finder.find("krakow")

        assert second.source == "fallback"
        assert second.stale is True
        assert second.cars == first.cars

    @pytest.mark.asyncio
    async def test_fallback_is_per_policy(self, finder, upstream):
        upstream.zones = {2: [car("KR1")]}
        await finder.find("krakow", policy=Policy.STRICT)
        upstream.fail_status = 500
        response = await finder.find("krakow", policy=Policy.ALL)
        assert response.cars == []
        assert response.source == "cache"

    @pytest.mark.asyncio
    async def test_policy_all_returns_busy_cars(self, finder, upstream):
        upstream.zones = {1: [car("FREE"), car("BUSY", status="RENTED")]}
        response = await finder.find("krakow", policy=Policy.ALL)
        assert sorted(c.plate for c in response.cars) == ["BUSY", "FREE"]

    @pytest.mark.asyncio
    async def test_everything_failing_is_empty_not_an_error(self, finder, upstream):
        upstream.fail_status = 500
        response = await finder.find("krakow")
        assert response.cars == []
        assert response.count == 0
