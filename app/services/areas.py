"""
Zone polygons for the map overlay
Nobody knows which endpoint serves them, so every candidate is tried and
whatever GeoJSON comes back is sorted into relocation / no-parking /
"ogarniam" layers by the words in its properties.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from models.vehicle import AreasResponse, FeatureCollection
from services.fioletowe import FioletoweService
from services.shapes import to_feature_collection

logger = logging.getLogger(__name__)

AREA_PATHS = [
    "/api/v1/zones?city={city}",
    "/api/v1/areas?city={city}",
    "/api/{city}/zones",
    "/api/zones?city={city}",
    "/{city}/zones.geojson",
    "/api/v1/relocation-zones?city={city}",
    "/api/v1/parking-zones?city={city}",
    "/api/v1/geo/{city}",
]

# Checked in this order; the first match wins, unmatched features are dropped
LAYERS = [
    ("relocation", re.compile(r"relok|reloc|yellow|przeprowadz", re.IGNORECASE)),
    ("nopark", re.compile(r"no[\s-]?park|ban|red|zakaz", re.IGNORECASE)),
    ("ogarniam", re.compile(r"ogarnia|ogarn|purple|fiolet", re.IGNORECASE)),
]


def area_urls(city: str) -> List[str]:
    return [path.format(city=quote(city, safe="")) for path in AREA_PATHS]


def classify_feature(feature: Dict[str, Any]) -> Optional[str]:
    """Layer name for a feature, or None"""
    properties = feature.get("properties") or {}
    text = json.dumps(properties, ensure_ascii=False).lower()
    for layer, pattern in LAYERS:
        if pattern.search(text):
            return layer
    return None


def split_features(collection: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    layers = {name: [] for name, _ in LAYERS}
    for feature in collection.get("features") or []:
        if not isinstance(feature, dict):
            continue
        layer = classify_feature(feature)
        if layer:
            layers[layer].append(feature)
    return layers


async def fetch_areas(fioletowe: FioletoweService, city: str) -> AreasResponse:
    merged = {name: [] for name, _ in LAYERS}
    urls = area_urls(city)

    async with fioletowe.session() as client:
        payloads = await asyncio.gather(
            *(fioletowe.get_json(url, client=client) for url in urls)
        )

    for url, payload in zip(urls, payloads):
        collection = to_feature_collection(payload)
        if collection is None:
            continue
        logger.info(f"Area candidate {url} returned {len(collection.get('features') or [])} features")
        for layer, features in split_features(collection).items():
            merged[layer].extend(features)

    return AreasResponse(
        **{layer: FeatureCollection(features=features) for layer, features in merged.items()}
    )
