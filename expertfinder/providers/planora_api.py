# expertfinder/providers/planora_api.py
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..core.errors import ApiError
from .base import (
    Coordinate,
    ProfessionalRecord,
    ProfileRecord,
    TeamMember,
    professional_from_payload,
    profile_from_payload,
    team_member_from_payload,
)

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class PlanoraApiConfig:
    # e.g. "http://localhost:5000/api"
    base_url: str
    api_key: str = ""

    # Hard caps / safety
    timeout_s: float = 15.0
    # Only idempotent reads (profile, team) are retried; search and assign never are.
    max_read_retries: int = 2
    base_backoff_s: float = 0.5


class PlanoraApiClient:
    """
    Planora backend client:
      - GET  {base}/users/{id}
      - GET  {base}/professionals/nearby?lat&lon&radius&category&sub_category
      - POST {base}/projects/{id}/assign   body {userId, role}
      - GET  {base}/projects/{id}/team

    Auth header (optional):
      - X-API-Key: <key>
    """

    def __init__(self, cfg: PlanoraApiConfig, client: Optional[httpx.AsyncClient] = None):
        if not cfg.base_url:
            raise ValueError("PlanoraApiConfig.base_url is required")
        self.cfg = cfg
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
            raise RuntimeError("PlanoraApiClient must be used with 'async with' or provide a client.")
        return self._client

    def _url(self, path: str) -> str:
        return f"{self.cfg.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/json"}
        if self.cfg.api_key:
            h["X-API-Key"] = self.cfg.api_key
        return h

    async def _request(
        self,
        method: str,
        path: str,
        *,
        retries: int = 0,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Sends one request and decodes the JSON body.
        With retries > 0, transient failures (429/5xx/timeouts) are retried with exponential backoff + jitter.
        Any remaining failure becomes ApiError.
        """
        url = self._url(path)
        last_err: Optional[Exception] = None
        status: Optional[int] = None
        for attempt in range(retries + 1):
            try:
                resp = await self.client.request(method, url, headers=self._headers(), json=json, params=params)
                status = resp.status_code
                if resp.status_code in _TRANSIENT_STATUSES and attempt < retries:
                    raise httpx.HTTPStatusError(
                        f"transient status {resp.status_code}",
                        request=resp.request,
                        response=resp,
                    )
                resp.raise_for_status()
                if not resp.content:
                    return None
                return resp.json()
            except httpx.HTTPStatusError as e:
                last_err = e
                if e.response.status_code not in _TRANSIENT_STATUSES or attempt >= retries:
                    break
            except httpx.TransportError as e:
                last_err = e
                status = None
                if attempt >= retries:
                    break
            except ValueError as e:
                # body was not JSON
                last_err = e
                break
            backoff = self.cfg.base_backoff_s * (2 ** attempt)
            jitter = random.random() * 0.25
            logger.debug("retrying %s %s in %.2fs after %s", method, path, backoff + jitter, last_err)
            await asyncio.sleep(backoff + jitter)
        raise ApiError(f"{method} {path} failed: {last_err}", status_code=status) from last_err

    async def get_profile(self, user_id: str) -> ProfileRecord:
        data = await self._request("GET", f"/users/{user_id}", retries=self.cfg.max_read_retries)
        if not isinstance(data, dict):
            raise ApiError(f"unexpected profile payload for user {user_id}")
        return profile_from_payload(user_id, data)

    async def nearby_professionals(
        self,
        origin: Coordinate,
        radius_km: float,
        *,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
    ) -> List[ProfessionalRecord]:
        params: Dict[str, Any] = {
            "lat": origin.lat,
            "lon": origin.lon,
            "radius": radius_km,
        }
        if category:
            params["category"] = category
        if sub_category:
            params["sub_category"] = sub_category

        data = await self._request("GET", "/professionals/nearby", params=params)
        if not isinstance(data, list):
            raise ApiError("Expected JSON array from nearby search")

        records: List[ProfessionalRecord] = []
        for row in data:
            if not isinstance(row, dict):
                continue
            try:
                records.append(professional_from_payload(row))
            except ValueError as e:
                logger.warning("skipping unusable directory row: %s", e)
        return records

    async def assign_professional(self, project_id: str, professional_id: str, role: Optional[str]) -> None:
        await self._request(
            "POST",
            f"/projects/{project_id}/assign",
            json={"userId": professional_id, "role": role},
        )

    async def project_team(self, project_id: str) -> List[TeamMember]:
        data = await self._request("GET", f"/projects/{project_id}/team", retries=self.cfg.max_read_retries)
        if not isinstance(data, list):
            raise ApiError(f"Expected JSON array for team of project {project_id}")
        members: List[TeamMember] = []
        for row in data:
            if isinstance(row, dict):
                try:
                    members.append(team_member_from_payload(row))
                except ValueError as e:
                    logger.warning("skipping team row: %s", e)
        return members
