"""
Field candidate rules
The upstream API spells the same attribute a dozen ways depending on the
endpoint version. Every logical attribute gets an ordered list of rules;
the first rule that yields a usable value wins.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldRule:
    """Dotted path into a record plus the converter applied to the raw value"""

    path: str
    kind: str = "text"  # text | number | flag | label


def lookup(record: Any, path: str) -> Any:
    """Walk a dotted path through nested dicts; None when any hop is missing"""
    current = record
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def to_number(value: Any) -> Optional[float]:
    """Numbers and numeric strings ("12.5", "12,5") to a finite float"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


_TRUE = {"true", "1", "yes", "y", "t"}
_FALSE = {"false", "0", "no", "n", "f"}


def to_flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    return None


def to_label(value: Any) -> Optional[str]:
    """Human readable names only; numeric strings are ids, not labels"""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or to_number(text) is not None:
        return None
    return text


CONVERTERS = {"text": to_text, "number": to_number, "flag": to_flag, "label": to_label}


def apply_rule(record: Dict[str, Any], rule: FieldRule) -> Any:
    return CONVERTERS[rule.kind](lookup(record, rule.path))


def pick(record: Dict[str, Any], rules: Sequence[FieldRule], default: Any = None) -> Any:
    """First usable value in rule priority order"""
    for rule in rules:
        value = apply_rule(record, rule)
        if value is not None:
            return value
    return default


def pick_all(record: Dict[str, Any], rules: Sequence[FieldRule]) -> List[Any]:
    """Every usable value, in rule priority order"""
    values = []
    for rule in rules:
        value = apply_rule(record, rule)
        if value is not None:
            values.append(value)
    return values


def _rules(kind: str, *paths: str) -> List[FieldRule]:
    return [FieldRule(path, kind) for path in paths]


# Identity
ID_RULES = _rules("text", "id", "carId", "vehicleId", "uuid")
PLATE_RULES = _rules(
    "text",
    "regNumber",
    "registrationNumber",
    "registration",
    "plate",
    "plateNumber",
    "licensePlate",
    "numberPlate",
)
SIDE_NUMBER_RULES = _rules(
    "text", "sideNumber", "sideNo", "fleetNumber", "boardNumber", "number"
)

# Model
MODEL_ID_RULES = _rules(
    "number",
    "modelId",
    "carModelId",
    "model_id",
    "model.id",
    "carModel.id",
    "model",
    "carModel",
)
MODEL_NAME_RULES = _rules(
    "label", "modelName", "model.name", "carModel.name", "model", "carModel"
)
MAX_FUEL_RULES = _rules(
    "number",
    "maxFuel",
    "maxFuelLevel",
    "fuelCapacity",
    "tankCapacity",
    "batteryCapacity",
    "capacity",
)
ELECTRIC_FLAG_RULES = _rules("flag", "electric", "isElectric", "ev")
ENGINE_TYPE_RULES = _rules("text", "fuelType", "engineType", "powertrain", "type")

# Telemetry
FUEL_RULES = _rules(
    "number",
    "fuelLevel",
    "fuelPercentage",
    "fuelPercent",
    "fuel",
    "fuel.level",
    "batteryLevel",
    "chargeLevel",
    "soc",
)
RANGE_RULES = _rules(
    "number", "range", "rangeKm", "remainingRange", "distanceLeft", "range.km"
)
ADDRESS_RULES = _rules(
    "text",
    "address",
    "location.address",
    "locationDescription",
    "streetName",
    "street",
)

# Position (direct fields only, see services.coordinates for the rest)
LAT_RULES = _rules("number", "lat", "latitude")
LNG_RULES = _rules("number", "lng", "lon", "longitude")

# Availability signals
AVAILABLE_FLAG_RULES = _rules(
    "flag", "available", "isAvailable", "free", "isFree", "rentable", "canRent"
)
BUSY_FLAG_RULES = _rules(
    "flag",
    "reserved",
    "isReserved",
    "rented",
    "isRented",
    "inUse",
    "booked",
    "isBooked",
    "occupied",
)
STATUS_RULES = _rules(
    "text", "status", "state", "availability", "carStatus", "rentalStatus"
)
