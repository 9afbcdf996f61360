"""
Debug API - see what the upstream really sends
"""

import asyncio
import logging
import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from api.deps import error_response, get_fioletowe, get_settings
from config import Settings
from services.cities import normalize_city_key
from services.endpoint_probe import probe_cars_endpoint
from services.fioletowe import CARS_PATH, FioletoweService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/zone")
async def raw_zone(
    zone_id: str = Query("1", alias="zoneId"),
    last_update: str = Query("0", alias="lastUpdate"),
    fioletowe: FioletoweService = Depends(get_fioletowe),
):
    """Raw /api/v1/cars body with the upstream status and content type"""
    params = {"zoneId": zone_id, "lastUpdate": last_update}
    url = str(httpx.URL(fioletowe.url(CARS_PATH), params=params))
    try:
        upstream = await fioletowe.raw(CARS_PATH, params)
    except (httpx.HTTPError, asyncio.TimeoutError) as e:
        logger.warning(f"Raw zone fetch failed: {e!r}")
        return error_response(502, "upstream unreachable", detail=str(e) or repr(e), tried=[url])

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )


@router.get("/probe")
async def probe(
    city: str = Query(None),
    fioletowe: FioletoweService = Depends(get_fioletowe),
    settings: Settings = Depends(get_settings),
):
    """Guess the cars endpoint; 502 with every tried URL when nothing answers"""
    key = normalize_city_key(city) or settings.default_city
    result = await probe_cars_endpoint(fioletowe, key)
    if not result.ok:
        return error_response(
            502,
            "All endpoint attempts failed",
            detail=f"{len(result.tried)} candidates returned no JSON",
            tried=result.tried,
        )
    return JSONResponse(content=result.payload, headers={"x-upstream-url": result.url})
