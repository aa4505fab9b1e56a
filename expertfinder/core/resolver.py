from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from ..providers.base import Coordinate, Geocoder, ProfileSource
from ..providers.positioning import (
    PositionError,
    PositionProvider,
    PositionSubscription,
    PositionUnsupported,
    WatchOptions,
)
from .discovery_types import LocationSource, ResolvedLocation, SessionContext
from .errors import ApiError, GeocodingError, LocationUnavailable

logger = logging.getLogger(__name__)


class LocationResolver:
    """
    Best-effort current location of the acting user.

    Sources, each tried only when the previous one is missing or failed:
      1. live positioning (continuous watch, every fix is emitted)
      2. the coordinate stored on the user's profile
      3. the profile's city, geocoded

    Failures of a source are logged and fall through to the next one. When all three fail
    nothing is emitted; callers treat that as "location unavailable", not as an error.
    Once a live fix has been emitted, a later positioning failure ends the stream without
    falling back.

    The positioning watch is the only long-lived resource; close() releases it.
    """

    def __init__(
        self,
        session: SessionContext,
        profiles: ProfileSource,
        geocoder: Geocoder,
        positions: Optional[PositionProvider] = None,
        *,
        watch_options: Optional[WatchOptions] = None,
    ):
        self.session = session
        self.profiles = profiles
        self.geocoder = geocoder
        self.positions = positions
        self.watch_options = watch_options or WatchOptions()
        self._subscription: Optional[PositionSubscription] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    async def resolve(self) -> AsyncIterator[ResolvedLocation]:
        emitted_live = False
        sub = self._start_watch()
        if sub is not None:
            try:
                async for fix in sub:
                    if self._closed:
                        return
                    emitted_live = True
                    yield ResolvedLocation(
                        coordinate=Coordinate(lat=float(fix.latitude), lon=float(fix.longitude)),
                        source=LocationSource.LIVE_GPS,
                    )
            except PositionError as e:
                if emitted_live:
                    logger.info("live positioning stopped after fixes: %s", e)
                    return
                logger.info("live positioning unavailable (%s); falling back to profile location", e)
            finally:
                sub.cancel()
                if self._subscription is sub:
                    self._subscription = None

        if self._closed or emitted_live:
            return

        fallback = await self._from_profile()
        if fallback is not None and not self._closed:
            yield fallback

    async def current(self) -> ResolvedLocation:
        """First location the chain produces. Raises LocationUnavailable when there is none."""
        stream = self.resolve()
        try:
            async for location in stream:
                return location
        finally:
            await stream.aclose()
            self.close()
        raise LocationUnavailable("no location from device, profile or profile city")

    def _start_watch(self) -> Optional[PositionSubscription]:
        if self._closed or self.positions is None:
            if self.positions is None:
                logger.info("no positioning capability; using profile location")
            return None
        try:
            self._subscription = self.positions.watch(self.watch_options)
        except PositionUnsupported as e:
            logger.info("positioning unsupported (%s); using profile location", e)
            return None
        return self._subscription

    async def _from_profile(self) -> Optional[ResolvedLocation]:
        user_id = self.session.user_id
        if not user_id:
            logger.warning("no acting user in session; cannot use profile location")
            return None

        try:
            profile = await self.profiles.get_profile(str(user_id))
        except ApiError as e:
            logger.warning("profile lookup for %s failed: %s", user_id, e)
            return None

        if profile.coordinate is not None:
            return ResolvedLocation(coordinate=profile.coordinate, source=LocationSource.STORED_PROFILE)

        if not profile.city:
            logger.warning("profile of %s has neither coordinates nor city", user_id)
            return None

        logger.info("profile of %s has no coordinates; geocoding city %r", user_id, profile.city)
        try:
            coordinate = await self.geocoder.geocode(profile.city)
        except GeocodingError as e:
            logger.warning("geocoding %r failed: %s", profile.city, e)
            return None
        if coordinate is None:
            return None
        return ResolvedLocation(coordinate=coordinate, source=LocationSource.GEOCODED_CITY)
