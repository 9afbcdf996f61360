"""
Car finder
Entry point of the pipeline: city -> zone ids (explicit, cached or
discovered) -> filtered, de-duplicated vehicles.
"""

import logging
import time
from typing import List, Optional, Tuple

from config import Settings, settings as default_settings
from models.vehicle import CarsResponse, CityConfig
from services.availability import Policy
from services.cities import resolve_city
from services.fioletowe import FioletoweService
from services.model_dictionary import ModelDictionary
from services.warm_cache import ZoneCache
from services.zone_fetcher import (
    ZoneRecords,
    fetch_zone_records,
    populated_zones,
    select_vehicles,
)

logger = logging.getLogger(__name__)


class CarFinder:
    def __init__(
        self,
        fioletowe: FioletoweService,
        zone_cache: ZoneCache,
        model_dictionary: ModelDictionary,
        settings: Optional[Settings] = None,
    ):
        self.fioletowe = fioletowe
        self.zone_cache = zone_cache
        self.model_dictionary = model_dictionary
        self.settings = settings or default_settings

    def candidate_zones(self) -> List[int]:
        return list(range(self.settings.probe_first_zone, self.settings.probe_last_zone + 1))

    async def discover(self, city: CityConfig) -> Tuple[ZoneRecords, List[int]]:
        """
        Probe candidate zone ids batch by batch with the soft pass until
        enough populated zones are known or the range runs out.
        All batches share one batch_budget deadline.
        Returns the records fetched along the way and the populated ids.
        """
        start = time.monotonic()
        deadline = start + self.settings.batch_budget
        candidates = self.candidate_zones()
        batch_size = max(1, self.settings.discovery_batch_size)
        records: ZoneRecords = {}
        found: List[int] = []

        for offset in range(0, len(candidates), batch_size):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"Discovery for {city.key} ran out of time at zone {candidates[offset]}")
                break
            batch = await fetch_zone_records(
                self.fioletowe,
                candidates[offset : offset + batch_size],
                self.settings,
                budget=remaining,
            )
            records.update(batch)
            found.extend(populated_zones(batch, city, self.settings.soft_radius_factor))
            if len(found) >= self.settings.discovery_target:
                break

        logger.info(
            f"Discovery for {city.key}: {len(found)} zones in {len(records)} probes, {time.monotonic() - start:.2f}s"
        )
        await self.zone_cache.remember_zones(city.key, found)
        return records, found

    async def find(
        self,
        city_key: Optional[str],
        zones: Optional[List[int]] = None,
        policy: Policy = Policy.STRICT,
    ) -> CarsResponse:
        city = resolve_city(city_key, self.settings.default_city)
        models = await self.model_dictionary.load()

        if zones:
            source = "explicit"
            used = list(dict.fromkeys(zones))
            records = await fetch_zone_records(self.fioletowe, used, self.settings)
        else:
            cached = await self.zone_cache.fresh_zones(city.key)
            if cached:
                source = "cache"
                used = cached
                logger.info(f"Zone cache hit for {city.key}: {len(cached)} zones")
                records = await fetch_zone_records(self.fioletowe, used, self.settings)
            else:
                source = "discovery"
                records, used = await self.discover(city)

        vehicles = select_vehicles(
            records, city, policy, models=models, soft_factor=self.settings.soft_radius_factor
        )

        if source != "explicit":
            if vehicles:
                await self.zone_cache.remember_result(city.key, vehicles, policy.value)
            else:
                previous = await self.zone_cache.fallback(city.key, policy.value)
                if previous:
                    logger.warning(
                        f"No cars for {city.key} from {source}, serving {len(previous)} cached cars"
                    )
                    return CarsResponse(
                        city=city.key,
                        cars=previous,
                        zones=used,
                        source="fallback",
                        stale=True,
                        count=len(previous),
                    )

        return CarsResponse(
            city=city.key,
            cars=vehicles,
            zones=used,
            source=source,
            count=len(vehicles),
        )
