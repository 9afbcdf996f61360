from typing import Any, Dict, Iterable, List, Optional

from models.vehicle import ModelInfo, Vehicle
from services.coordinates import Point, extract_coordinates
from services.field_rules import (
    ADDRESS_RULES,
    FUEL_RULES,
    ID_RULES,
    PLATE_RULES,
    RANGE_RULES,
    SIDE_NUMBER_RULES,
    pick,
)
from services.model_dictionary import join_model


def clamp_percent(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return max(0.0, min(100.0, value))


def to_vehicle(
    record: Dict[str, Any],
    models: Optional[Dict[int, ModelInfo]] = None,
    zone_id: Optional[int] = None,
    point: Optional[Point] = None,
) -> Optional[Vehicle]:
    """Raw upstream record -> Vehicle, or None when it has no usable position"""
    point = point or extract_coordinates(record)
    if point is None:
        return None

    name, electric, max_fuel = join_model(record, models or {})
    return Vehicle(
        id=pick(record, ID_RULES),
        lat=point[0],
        lng=point[1],
        model=name,
        electric=electric,
        max_fuel=max_fuel,
        plate=pick(record, PLATE_RULES),
        side_number=pick(record, SIDE_NUMBER_RULES),
        fuel=clamp_percent(pick(record, FUEL_RULES)),
        range_km=pick(record, RANGE_RULES),
        address=pick(record, ADDRESS_RULES),
        zone_id=zone_id,
    )


def dedupe(vehicles: Iterable[Vehicle]) -> List[Vehicle]:
    """Keep the first vehicle per (plate|side number|id, lat/lng to 6 dp)"""
    seen = set()
    unique = []
    for vehicle in vehicles:
        if vehicle.key in seen:
            continue
        seen.add(vehicle.key)
        unique.append(vehicle)
    return unique
