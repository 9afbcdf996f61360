"""
Cars endpoint probe
Diagnostic for when the known /api/v1/cars endpoint moves: read the
upstream OpenAPI document, collect GET paths mentioning cars or vehicles,
add the historical guesses and return the first one that answers JSON.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import quote

from services.fioletowe import FioletoweService

logger = logging.getLogger(__name__)

OPENAPI_PATH = "/api/openapi.json"

FALLBACK_PATHS = [
    "/api/{city}/cars",
    "/api/cars",
    "/{city}/cars",
    "/api/city/{city}/cars",
    "/api/{city}/vehicles",
    "/api/vehicles",
]

UNWRAP_KEYS = ("cars", "features", "items", "results", "data")


@dataclass
class ProbeResult:
    ok: bool
    url: Optional[str] = None
    payload: Any = None
    tried: List[str] = field(default_factory=list)


def car_paths_from_openapi(document: Any) -> List[str]:
    paths = document.get("paths") if isinstance(document, dict) else None
    if not isinstance(paths, dict):
        return []
    found = []
    for path, item in paths.items():
        if not isinstance(item, dict) or "get" not in item:
            continue
        name = path.lower()
        if "car" in name or "vehicle" in name:
            found.append(path)
    return found


def candidate_urls(origin: str, paths: List[str], city: str) -> List[str]:
    """Each path as-is and, unless it already has one, with ?city= appended"""
    encoded = quote(city, safe="")
    urls = []
    for path in paths:
        full = f"{origin}{path.replace('{city}', encoded)}"
        urls.append(full)
        if "city=" not in full.lower():
            separator = "&" if "?" in full else "?"
            urls.append(f"{full}{separator}city={encoded}")
    return list(dict.fromkeys(urls))


def unwrap_payload(payload: Any) -> Any:
    if isinstance(payload, list) or not isinstance(payload, dict):
        return payload
    for key in UNWRAP_KEYS:
        if payload.get(key):
            return payload[key]
    return payload


async def probe_cars_endpoint(fioletowe: FioletoweService, city: str) -> ProbeResult:
    async with fioletowe.session() as client:
        document = await fioletowe.get_json(OPENAPI_PATH, client=client)
        paths = car_paths_from_openapi(document) + FALLBACK_PATHS
        urls = candidate_urls(fioletowe.origin, paths, city)

        # Tried in order; any parseable body counts, whatever its content type
        for url in urls:
            payload = await fioletowe.get_json(url, client=client, require_json_type=False)
            if payload is not None:
                logger.info(f"Cars endpoint probe hit {url}")
                return ProbeResult(ok=True, url=url, payload=unwrap_payload(payload), tried=urls)

    logger.warning(f"Cars endpoint probe failed for {city}, {len(urls)} urls tried")
    return ProbeResult(ok=False, tried=urls)
