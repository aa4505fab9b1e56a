from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

from expertfinder.core.config import Settings
from expertfinder.core.controller import DiscoveryViewController
from expertfinder.core.discovery_types import DiscoveryPolicy, SessionContext
from expertfinder.core.presenters import MapMarkerPresenter, PresenterView
from expertfinder.core.resolver import LocationResolver
from expertfinder.core.search import ProximitySearchClient
from expertfinder.core.session import DiscoverySession
from expertfinder.providers.nominatim import NominatimConfig, NominatimGeocoder
from expertfinder.providers.planora_api import PlanoraApiClient, PlanoraApiConfig
from expertfinder.providers.positioning import ChannelPositionProvider, WatchOptions


async def main():
    repo_root = Path(__file__).resolve().parents[2]
    load_dotenv(repo_root / ".env", override=False)
    # re-read now that .env is loaded
    settings = Settings()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    user_id = os.getenv("DEMO_USER_ID", "")
    if not user_id:
        raise ValueError(
            "DEMO_USER_ID is not set. "
            "Add it to the repo root .env or export it in the shell."
        )
    actor = SessionContext(user_id=user_id, category=os.getenv("DEMO_USER_CATEGORY") or None)
    project_id = os.getenv("DEMO_PROJECT_ID") or None

    api_cfg = PlanoraApiConfig(
        base_url=settings.planora_api_url,
        api_key=settings.planora_api_key,
        timeout_s=settings.http_timeout_s,
    )
    geo_cfg = NominatimConfig(base_url=settings.geocoder_url, user_agent=settings.geocoder_user_agent)

    # No device here: the watch never gets a fix and times out into the profile fallback.
    positions = ChannelPositionProvider()
    view = PresenterView(MapMarkerPresenter(), on_render=lambda payload: print(json.dumps(payload, indent=2)))

    async with PlanoraApiClient(api_cfg) as api, NominatimGeocoder(geo_cfg) as geocoder:
        controller = DiscoveryViewController(
            ProximitySearchClient(api),
            view,
            actor=actor,
            policy=DiscoveryPolicy(name="map", radius_km=settings.map_radius_km),
            team_source=api,
        )

        def make_resolver() -> LocationResolver:
            return LocationResolver(
                actor,
                api,
                geocoder,
                positions,
                watch_options=WatchOptions(timeout_s=settings.position_timeout_s),
            )

        async with DiscoverySession(controller, make_resolver) as session:
            await session.mount(project_id)
            await asyncio.sleep(settings.position_timeout_s + 5)
            await session.idle()
            print(f"Final state: {controller.state.value}; {len(controller.visible())} professionals shown")

if __name__ == "__main__":
    asyncio.run(main())
