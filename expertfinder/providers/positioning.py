# Continuous device positioning, modelled as an async stream with a cancel handle.
# expertfinder/providers/positioning.py
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class PositionError(Exception):
    """Base for positioning failures. None of these are fatal to location resolution."""


class PositionDenied(PositionError):
    pass


class PositionTimeout(PositionError):
    pass


class PositionUnsupported(PositionError):
    """The platform has no positioning capability."""


@dataclass(frozen=True)
class WatchOptions:
    high_accuracy: bool = True
    # Applies to the first fix; a stationary device may legitimately go quiet afterwards.
    timeout_s: float = 10.0
    # 0 means never hand out a cached position.
    maximum_age_s: float = 0.0


@dataclass(frozen=True)
class PositionFix:
    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None
    timestamp: float = field(default_factory=time.monotonic)


class PositionSubscription(Protocol):
    def __aiter__(self) -> "PositionSubscription":
        ...

    async def __anext__(self) -> PositionFix:
        ...

    def cancel(self) -> None:
        ...

    @property
    def cancelled(self) -> bool:
        ...


class PositionProvider(Protocol):
    def watch(self, options: WatchOptions) -> PositionSubscription:
        """Starts a continuous watch. Raises PositionUnsupported when there is no capability."""
        ...


_CLOSED = object()


class ChannelSubscription:
    """
    One watch on a ChannelPositionProvider.
    Iterating yields fixes in the order they were published; a published failure is raised
    from the iterator and ends it. cancel() is idempotent and ends iteration.
    """

    def __init__(self, provider: "ChannelPositionProvider", options: WatchOptions):
        self._provider = provider
        self.options = options
        self._queue: "asyncio.Queue[Union[PositionFix, PositionError, object]]" = asyncio.Queue()
        self._cancelled = False
        self._finished = False
        self._got_fix = False

    def __aiter__(self) -> "ChannelSubscription":
        return self

    async def __anext__(self) -> PositionFix:
        if self._finished:
            raise StopAsyncIteration
        try:
            if self._got_fix:
                item = await self._queue.get()
            else:
                item = await asyncio.wait_for(self._queue.get(), timeout=self.options.timeout_s)
        except asyncio.TimeoutError:
            self._finish()
            raise PositionTimeout(f"no position fix within {self.options.timeout_s:g}s")

        if item is _CLOSED:
            self._finish()
            raise StopAsyncIteration
        if isinstance(item, PositionError):
            self._finish()
            raise item
        self._got_fix = True
        return item  # type: ignore[return-value]

    def _offer(self, item) -> None:
        if not self._finished:
            self._queue.put_nowait(item)

    def _finish(self) -> None:
        self._finished = True
        self._provider._release(self)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._queue.put_nowait(_CLOSED)
        self._provider._release(self)

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ChannelPositionProvider:
    """
    Position provider fed by a platform bridge (or a test): the bridge calls publish() for
    every device fix and fail() for denial/timeout signals. Every active watch receives them.
    """

    def __init__(self, *, supported: bool = True):
        self.supported = supported
        self._subscriptions: List[ChannelSubscription] = []
        self._last_fix: Optional[PositionFix] = None

    def watch(self, options: WatchOptions) -> ChannelSubscription:
        if not self.supported:
            raise PositionUnsupported("positioning is not available on this platform")
        sub = ChannelSubscription(self, options)
        last = self._last_fix
        if last is not None and options.maximum_age_s > 0 and time.monotonic() - last.timestamp <= options.maximum_age_s:
            sub._offer(last)
        self._subscriptions.append(sub)
        logger.debug("position watch started (high_accuracy=%s)", options.high_accuracy)
        return sub

    def publish(self, latitude: float, longitude: float, accuracy_m: Optional[float] = None) -> PositionFix:
        fix = PositionFix(latitude=latitude, longitude=longitude, accuracy_m=accuracy_m)
        self._last_fix = fix
        for sub in list(self._subscriptions):
            sub._offer(fix)
        return fix

    def fail(self, error: PositionError) -> None:
        for sub in list(self._subscriptions):
            sub._offer(error)

    def deny(self) -> None:
        self.fail(PositionDenied("user denied geolocation"))

    @property
    def active_watches(self) -> int:
        return len(self._subscriptions)

    def _release(self, sub: ChannelSubscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)
            logger.debug("position watch released")
