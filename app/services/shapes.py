"""
Upstream payload shapes
Depending on the endpoint the upstream answers with a bare list, a GeoJSON
FeatureCollection, an envelope object ({"cars": [...]}, {"data": ...}) or a
map of id -> record. detect_shape() tags the payload once and a dedicated
normaliser flattens each variant to a list of plain dict records.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

ENVELOPE_KEYS = ("cars", "vehicles", "items", "results", "data", "features")
MAX_UNWRAP = 4


class Shape(str, Enum):
    LIST = "list"
    FEATURE_COLLECTION = "feature_collection"
    WRAPPED = "wrapped"
    OBJECT_MAP = "object_map"
    EMPTY = "empty"


def detect_shape(payload: Any) -> Shape:
    if isinstance(payload, list):
        return Shape.LIST if payload else Shape.EMPTY
    if not isinstance(payload, dict) or not payload:
        return Shape.EMPTY
    if payload.get("type") == "FeatureCollection" and isinstance(
        payload.get("features"), list
    ):
        return Shape.FEATURE_COLLECTION
    if any(key in payload for key in ENVELOPE_KEYS):
        return Shape.WRAPPED
    if all(isinstance(value, dict) for value in payload.values()):
        return Shape.OBJECT_MAP
    return Shape.EMPTY


def flatten_feature(feature: Dict[str, Any]) -> Dict[str, Any]:
    """GeoJSON feature -> properties with geometry (and feature id) kept alongside"""
    record = dict(feature.get("properties") or {})
    if "geometry" in feature:
        record.setdefault("geometry", feature["geometry"])
    if feature.get("id") is not None:
        record.setdefault("id", feature["id"])
    return record


def _from_list(payload: List[Any], depth: int) -> List[Dict[str, Any]]:
    records = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        if item.get("type") == "Feature":
            records.append(flatten_feature(item))
        else:
            records.append(item)
    return records


def _from_feature_collection(payload: Dict[str, Any], depth: int) -> List[Dict[str, Any]]:
    return [flatten_feature(f) for f in payload["features"] if isinstance(f, dict)]


def _from_wrapped(payload: Dict[str, Any], depth: int) -> List[Dict[str, Any]]:
    for key in ENVELOPE_KEYS:
        if key in payload:
            return normalize_records(payload[key], depth + 1)
    return []


def _from_object_map(payload: Dict[str, Any], depth: int) -> List[Dict[str, Any]]:
    records = []
    for key, value in payload.items():
        record = dict(value)
        record.setdefault("id", key)
        records.append(record)
    return records


def _from_empty(payload: Any, depth: int) -> List[Dict[str, Any]]:
    return []


NORMALIZERS: Dict[Shape, Callable[[Any, int], List[Dict[str, Any]]]] = {
    Shape.LIST: _from_list,
    Shape.FEATURE_COLLECTION: _from_feature_collection,
    Shape.WRAPPED: _from_wrapped,
    Shape.OBJECT_MAP: _from_object_map,
    Shape.EMPTY: _from_empty,
}


def normalize_records(payload: Any, depth: int = 0) -> List[Dict[str, Any]]:
    """Any upstream payload -> list of dict records (empty when unrecognised)"""
    if depth > MAX_UNWRAP:
        return []
    return NORMALIZERS[detect_shape(payload)](payload, depth)


def to_feature_collection(payload: Any) -> Optional[Dict[str, Any]]:
    """
    Anything GeoJSON-like -> FeatureCollection dict, or None.
    Used for zone polygons where the features themselves must be kept intact.
    """
    if isinstance(payload, list):
        return {"type": "FeatureCollection", "features": payload}
    if not isinstance(payload, dict):
        return None
    if detect_shape(payload) == Shape.FEATURE_COLLECTION:
        return payload
    data = payload.get("data")
    if isinstance(data, dict) and data.get("type") == "FeatureCollection":
        return data
    if isinstance(payload.get("features"), list):
        return {"type": "FeatureCollection", "features": payload["features"]}
    return None
