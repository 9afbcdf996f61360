"""
fioletowe.live API Integration
Undocumented, versionless upstream behind the Traficar map.
Every failure (network, timeout, non-2xx, non-JSON) degrades to None.
"""

import asyncio
import logging
import re
import httpx
from typing import Optional, Dict, Any
from config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

JSON_CONTENT = re.compile(r"json", re.IGNORECASE)

CARS_PATH = "/api/v1/cars"
CAR_MODELS_PATH = "/api/v1/car-models"


class FioletoweService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self.origin = self.settings.fioletowe_origin.rstrip("/")
        self.timeout = self.settings.request_timeout
        # Tests swap in httpx.MockTransport here
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self.settings.user_agent,
            "Referer": f"{self.origin}/",
        }

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.origin}{path}"

    def session(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._get_headers(),
            transport=self.transport,
            follow_redirects=True,
        )

    async def _get(self, client: httpx.AsyncClient, url: str, params=None) -> httpx.Response:
        # wait_for bounds the whole exchange, httpx only bounds each phase
        return await asyncio.wait_for(
            client.get(url, params=params), timeout=self.timeout
        )

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
        require_json_type: bool = True,
    ) -> Optional[Any]:
        """Parsed JSON body, or None for any kind of upstream failure"""
        if client is None:
            async with self.session() as own_client:
                return await self.get_json(path, params, own_client, require_json_type)

        url = self.url(path)
        try:
            response = await self._get(client, url, params)
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.debug(f"{url} failed: {e!r}")
            return None

        if not response.is_success:
            logger.debug(f"{url} -> HTTP {response.status_code}")
            return None

        content_type = response.headers.get("content-type", "")
        if require_json_type and not JSON_CONTENT.search(content_type):
            logger.debug(f"{url} -> unexpected content type {content_type!r}")
            return None

        try:
            return response.json()
        except ValueError:
            logger.debug(f"{url} -> invalid JSON")
            return None

    async def zone_cars(
        self, zone_id: int, client: Optional[httpx.AsyncClient] = None, last_update: int = 0
    ) -> Optional[Any]:
        """GET /api/v1/cars?zoneId={id}&lastUpdate=0"""
        params = {"zoneId": zone_id, "lastUpdate": last_update}
        return await self.get_json(CARS_PATH, params, client)

    async def car_models(self, client: Optional[httpx.AsyncClient] = None) -> Optional[Any]:
        """GET /api/v1/car-models"""
        return await self.get_json(CAR_MODELS_PATH, client=client)

    async def raw(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Untouched upstream response for diagnostics.
        Unlike get_json this raises httpx.HTTPError / asyncio.TimeoutError.
        """
        async with self.session() as client:
            response = await self._get(client, self.url(path), params)
            await response.aread()
            return response
