# expertfinder/providers/nominatim.py
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..core.errors import GeocodingError
from .base import Coordinate, coordinate_from_payload

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class NominatimConfig:
    base_url: str = "https://nominatim.openstreetmap.org"
    # Nominatim's usage policy requires an identifying User-Agent.
    user_agent: str = "Planora-Construction-App/1.0"
    # e.g. "in" to bias results to India
    country_codes: Optional[str] = None

    # Hard caps / safety
    timeout_s: float = 10.0
    max_retries: int = 1
    base_backoff_s: float = 1.0


class NominatimGeocoder:
    """
    OpenStreetMap Nominatim geocoder:
      - GET {base}/search?q=<place>&format=json&limit=1

    Only the first match is used. Used as the last-resort location source, so a failure
    here is reported once as GeocodingError and never retried by callers.
    """

    provider_name = "nominatim"

    def __init__(self, cfg: Optional[NominatimConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.cfg = cfg or NominatimConfig()
        if not self.cfg.user_agent:
            raise ValueError("NominatimConfig.user_agent is required")
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.cfg.timeout_s)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("NominatimGeocoder must be used with 'async with' or provide a client.")
        return self._client

    async def _search(self, params: dict) -> Any:
        url = f"{self.cfg.base_url.rstrip('/')}/search"
        headers = {"User-Agent": self.cfg.user_agent, "Accept": "application/json"}
        last_err: Optional[Exception] = None
        for attempt in range(self.cfg.max_retries + 1):
            try:
                resp = await self.client.get(url, params=params, headers=headers)
                if resp.status_code in _TRANSIENT_STATUSES:
                    raise httpx.HTTPStatusError(
                        f"transient status {resp.status_code}",
                        request=resp.request,
                        response=resp,
                    )
                resp.raise_for_status()
                return resp.json()
            except (httpx.TransportError, httpx.HTTPStatusError) as e:
                last_err = e
                if isinstance(e, httpx.HTTPStatusError) and e.response.status_code not in _TRANSIENT_STATUSES:
                    break
                if attempt >= self.cfg.max_retries:
                    break
                await asyncio.sleep(self.cfg.base_backoff_s * (2 ** attempt) + random.random() * 0.25)
            except ValueError as e:
                last_err = e
                break
        raise GeocodingError(f"Nominatim lookup failed: {last_err}") from last_err

    async def geocode(self, place: str) -> Optional[Coordinate]:
        place = (place or "").strip()
        if not place:
            return None

        params = {"q": place, "format": "json", "limit": 1}
        if self.cfg.country_codes:
            params["countrycodes"] = self.cfg.country_codes

        data = await self._search(params)
        if not isinstance(data, list) or not data:
            logger.warning("geocoding found nothing for %r", place)
            return None

        first = data[0]
        coordinate = coordinate_from_payload(first, lat_key="lat", lon_key="lon") if isinstance(first, dict) else None
        if coordinate is None:
            logger.warning("geocoding result for %r has no usable lat/lon", place)
        return coordinate
