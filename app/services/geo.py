import math
from models.vehicle import CityConfig

EARTH_RADIUS_KM = 6371.0
SOFT_RADIUS_FACTOR = 1.5


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def search_radius_km(city: CityConfig, soft: bool = False, soft_factor: float = SOFT_RADIUS_FACTOR) -> float:
    return city.radius_km * soft_factor if soft else city.radius_km


def in_city(
    lat: float,
    lng: float,
    city: CityConfig,
    soft: bool = False,
    soft_factor: float = SOFT_RADIUS_FACTOR,
) -> bool:
    """
    True when the point lies within the city's radius.
    Soft mode uses the enlarged radius and is only meant for zone discovery.
    """
    distance = haversine_km(lat, lng, city.lat, city.lng)
    return distance <= search_radius_km(city, soft, soft_factor)
