from fastapi import APIRouter, Depends, Query
from typing import Optional

from api.deps import error_response, get_fioletowe
from models.vehicle import AreasResponse
from services.areas import fetch_areas
from services.cities import normalize_city_key
from services.fioletowe import FioletoweService

router = APIRouter()


@router.get("/areas", response_model=AreasResponse)
async def get_areas(
    city: Optional[str] = Query(None),
    fioletowe: FioletoweService = Depends(get_fioletowe),
):
    """Relocation, no-parking and 'ogarniam' polygons as three FeatureCollections"""
    key = normalize_city_key(city)
    if not key:
        return error_response(400, "missing city")
    return await fetch_areas(fioletowe, key)
