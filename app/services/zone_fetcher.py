"""
Zone fetcher
Pulls /api/v1/cars for many zone ids through a small worker pool, then
filters the merged records down to one de-duplicated vehicle list.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from config import Settings
from models.vehicle import CityConfig, ModelInfo, Vehicle
from services.availability import Policy, is_available
from services.coordinates import extract_coordinates
from services.fioletowe import FioletoweService
from services.geo import SOFT_RADIUS_FACTOR, in_city
from services.normalizer import dedupe, to_vehicle
from services.shapes import normalize_records

logger = logging.getLogger(__name__)

ZoneRecords = Dict[int, List[Dict[str, Any]]]


async def fetch_zone_records(
    fioletowe: FioletoweService,
    zone_ids: Iterable[int],
    settings: Optional[Settings] = None,
    budget: Optional[float] = None,
) -> ZoneRecords:
    """
    Raw records per zone id. Every requested id is present in the result;
    zones that failed, timed out or missed the batch deadline map to [].
    budget overrides settings.batch_budget for callers sharing one deadline.
    """
    cfg = settings or fioletowe.settings
    budget = cfg.batch_budget if budget is None else budget
    ids = list(dict.fromkeys(zone_ids))
    results: ZoneRecords = {zone_id: [] for zone_id in ids}
    if not ids:
        return results

    queue: asyncio.Queue = asyncio.Queue()
    for zone_id in ids:
        queue.put_nowait(zone_id)

    async def worker(client):
        while True:
            try:
                zone_id = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            payload = await fioletowe.zone_cars(zone_id, client)
            results[zone_id] = normalize_records(payload)
            if cfg.request_pause > 0 and not queue.empty():
                await asyncio.sleep(cfg.request_pause)

    async with fioletowe.session() as client:
        workers = [
            asyncio.create_task(worker(client))
            for _ in range(max(1, min(cfg.zone_workers, len(ids))))
        ]
        done, pending = await asyncio.wait(workers, timeout=budget)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                f"Zone batch hit the {budget:.2f}s budget, {queue.qsize()} zones never fetched"
            )
        for task in done:
            if task.exception() is not None:
                logger.error(f"Zone worker crashed: {task.exception()!r}")

    return results


def select_vehicles(
    records_by_zone: ZoneRecords,
    city: CityConfig,
    policy: Policy = Policy.STRICT,
    soft_geo: bool = False,
    models: Optional[Dict[int, ModelInfo]] = None,
    soft_factor: float = SOFT_RADIUS_FACTOR,
) -> List[Vehicle]:
    """
    Coordinate extraction, geo filter and availability check over every
    record. Zones are walked in ascending id order so the output, and which
    duplicate survives, does not depend on fetch completion order.
    """
    vehicles = []
    for zone_id in sorted(records_by_zone):
        for record in records_by_zone[zone_id]:
            point = extract_coordinates(record)
            if point is None:
                continue
            if not in_city(point[0], point[1], city, soft=soft_geo, soft_factor=soft_factor):
                continue
            if not is_available(record, policy):
                continue
            vehicle = to_vehicle(record, models, zone_id, point)
            if vehicle:
                vehicles.append(vehicle)
    return dedupe(vehicles)


def populated_zones(
    records_by_zone: ZoneRecords, city: CityConfig, soft_factor: float = SOFT_RADIUS_FACTOR
) -> List[int]:
    """Zone ids holding at least one car under the soft geo/availability pass"""
    return [
        zone_id
        for zone_id in sorted(records_by_zone)
        if select_vehicles(
            {zone_id: records_by_zone[zone_id]},
            city,
            Policy.SOFT,
            soft_geo=True,
            soft_factor=soft_factor,
        )
    ]
