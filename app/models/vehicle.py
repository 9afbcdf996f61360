from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict, Any


class Vehicle(BaseModel):
    """Single rentable car as served to the map frontend"""

    id: Optional[str] = None
    lat: float
    lng: float
    model: str = "Traficar"
    electric: bool = False
    max_fuel: Optional[float] = None  # tank litres or battery kWh
    plate: Optional[str] = None
    side_number: Optional[str] = None
    fuel: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    range_km: Optional[float] = None
    address: Optional[str] = None
    zone_id: Optional[int] = None

    @property
    def key(self) -> tuple:
        """De-duplication key: first known identifier plus rounded position"""
        ident = self.plate or self.side_number or self.id or ""
        return (ident, round(self.lat, 6), round(self.lng, 6))


class CityConfig(BaseModel):
    key: str
    name: str
    lat: float
    lng: float
    radius_km: float


class ModelInfo(BaseModel):
    id: int
    name: str
    electric: bool = False
    max_fuel: Optional[float] = None


CarsSource = Literal["explicit", "cache", "discovery", "fallback"]


class CarsResponse(BaseModel):
    """Response contract v1 of /api/cars"""

    version: int = 1
    city: str
    cars: List[Vehicle]
    zones: List[int]
    source: CarsSource
    stale: bool = False
    count: int = 0


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    tried: Optional[List[str]] = None


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Dict[str, Any]] = []


class AreasResponse(BaseModel):
    relocation: FeatureCollection
    nopark: FeatureCollection
    ogarniam: FeatureCollection
