from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from .controller import DiscoveryViewController
from .resolver import LocationResolver

logger = logging.getLogger(__name__)


class DiscoverySession:
    """
    Owns the live parts of a mounted discovery view: one resolver (and so one positioning
    watch) per project, the task pumping its emissions into the controller in arrival
    order, and the searches those emissions start. unmount() releases all of it.
    """

    def __init__(
        self,
        controller: DiscoveryViewController,
        resolver_factory: Callable[[], LocationResolver],
    ):
        self.controller = controller
        self.resolver_factory = resolver_factory
        self._resolver: Optional[LocationResolver] = None
        self._pump: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def mounted(self) -> bool:
        return self._resolver is not None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.unmount()

    async def mount(self, project_id: Optional[str]) -> None:
        if self.mounted:
            await self.unmount()
        self.controller.switch_project(project_id)
        self._resolver = self.resolver_factory()
        self._pump = asyncio.create_task(self._run(self._resolver))
        self._spawn(self.controller.refresh_team())

    async def switch_project(self, project_id: Optional[str]) -> None:
        await self.mount(project_id)

    async def unmount(self) -> None:
        resolver, self._resolver = self._resolver, None
        if resolver is not None:
            resolver.close()
        self.controller.dispose()

        pending = [t for t in (self._pump, *self._tasks) if t is not None and not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._pump = None
        self._tasks.clear()

    async def set_filters(self, category: Optional[str] = None, sub_category: Optional[str] = None) -> None:
        await self.controller.set_filters(category, sub_category)

    async def idle(self) -> None:
        """Waits until the in-flight searches and refreshes have settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, resolver: LocationResolver) -> None:
        emitted = False
        stream = resolver.resolve()
        try:
            async for location in stream:
                emitted = True
                logger.debug("location from %s: %s", location.source.value, location.coordinate)
                self._spawn(self.controller.handle_location(location))
        finally:
            await stream.aclose()
        if not emitted and not resolver.closed:
            self.controller.location_unavailable()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("discovery task failed", exc_info=exc)
