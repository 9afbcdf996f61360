from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from api.deps import error_response, get_car_finder
from models.vehicle import CarsResponse
from services.availability import Policy
from services.car_finder import CarFinder
from services.field_rules import to_flag

router = APIRouter()


def parse_zone_ids(zones: Optional[str], zone_id: Optional[str]) -> List[int]:
    """'3, 7,x,7' + '12' -> [3, 7, 12]; junk tokens are ignored"""
    ids = []
    for raw in (zones or "").split(",") + [zone_id or ""]:
        token = raw.strip()
        if token.isascii() and token.isdigit():
            ids.append(int(token))
    return list(dict.fromkeys(ids))


def is_set(value: Optional[str]) -> bool:
    return bool(to_flag(value)) if value is not None else False


def pick_policy(all_cars: Optional[str], strict: Optional[str]) -> Policy:
    if is_set(all_cars):
        return Policy.ALL
    if strict is not None and to_flag(strict) is False:
        return Policy.SOFT
    return Policy.STRICT


@router.get("/cars", response_model=CarsResponse)
async def get_cars(
    city: Optional[str] = Query(None, description="City key, e.g. krakow"),
    zones: Optional[str] = Query(None, description="Comma-separated zone ids"),
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    include_zones: Optional[str] = Query(
        None, alias="includeZones", description="Accepted for old clients; zones are always returned"
    ),
    all_cars: Optional[str] = Query(None, alias="all", description="1 = skip availability filter"),
    strict: Optional[str] = Query(None, description="0 = soft availability policy"),
    finder: CarFinder = Depends(get_car_finder),
):
    """
    Available Traficar cars in a city.

    Known zone ids (explicit or cached) are fetched directly; otherwise the
    zone range is probed first. Upstream failures produce an empty list or
    the last known result, never an error.
    """
    if not city or not city.strip():
        return error_response(400, "missing city")

    return await finder.find(
        city,
        zones=parse_zone_ids(zones, zone_id) or None,
        policy=pick_policy(all_cars, strict),
    )
