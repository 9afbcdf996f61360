"""
Coordinate extraction
Pulls a finite lat/lng pair out of whatever shape the upstream returned:
plain fields, 1e6 fixed-point integers, GeoJSON geometry or nested containers.
"""

from typing import Any, Dict, Optional, Tuple
from services.field_rules import LAT_RULES, LNG_RULES, pick, to_number

MAX_DEPTH = 6
FIXED_POINT_SCALE = 1e6
NESTED_CONTAINERS = ("location", "position", "gps", "coords")

Point = Tuple[float, float]


def _descale(value: Optional[float]) -> Optional[float]:
    # 50061400 is Kraków's latitude in micro-degrees
    if value is not None and abs(value) > 1000:
        return value / FIXED_POINT_SCALE
    return value


def _valid(lat: Optional[float], lng: Optional[float]) -> Optional[Point]:
    if lat is None or lng is None:
        return None
    if abs(lat) > 90 or abs(lng) > 180:
        return None
    return lat, lng


def _direct(record: Dict[str, Any]) -> Optional[Point]:
    lat = _descale(pick(record, LAT_RULES))
    lng = _descale(pick(record, LNG_RULES))
    return _valid(lat, lng)


def _geometry(record: Dict[str, Any]) -> Optional[Point]:
    geometry = record.get("geometry")
    if not isinstance(geometry, dict):
        return None
    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    # GeoJSON order is [longitude, latitude]
    lng = _descale(to_number(coords[0]))
    lat = _descale(to_number(coords[1]))
    return _valid(lat, lng)


def extract_coordinates(record: Any, depth: int = 0) -> Optional[Point]:
    """
    Returns (lat, lng) as finite floats, or None when no position is found.

    Order: direct fields, then geometry.coordinates, then the nested
    containers, recursing at most MAX_DEPTH levels.
    """
    if not isinstance(record, dict) or depth > MAX_DEPTH:
        return None

    point = _direct(record) or _geometry(record)
    if point:
        return point

    for name in NESTED_CONTAINERS:
        nested = record.get(name)
        point = extract_coordinates(nested, depth + 1)
        if point:
            return point
    return None
