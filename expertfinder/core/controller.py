from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from ..providers.base import Coordinate, ProfessionalRecord, ProjectService
from .categories import normalize_filters
from .discovery_types import (
    DiscoveryPolicy,
    DiscoverySnapshot,
    DiscoveryState,
    DisplayContext,
    EmptyReason,
    LocationSource,
    ResolvedLocation,
    SearchQuery,
    SessionContext,
)
from .errors import ApiError, DirectoryUnavailable
from .exclusion import ExclusionSet
from .filters import ExcludeEngaged, candidates
from .search import ProximitySearchClient

logger = logging.getLogger(__name__)

_SHOWING_RESULTS = (DiscoveryState.READY, DiscoveryState.REFRESHING)


class DiscoveryView(Protocol):
    """Whatever draws the results: map markers or cards. It never sees raw directory data."""

    def recenter(self, coordinate: Coordinate) -> None:
        ...

    def render(self, snapshot: DiscoverySnapshot) -> None:
        ...


class DiscoveryViewController:
    """
    State machine between the location resolver, the proximity search and a view.

        AWAITING_LOCATION -> SEARCHING -> READY | ERROR
        READY -> REFRESHING -> READY | ERROR

    One instance serves one mounted project at a time; switch_project() rebuilds the
    exclusion set, the recenter flag and the open panel. Every search bumps a generation
    counter and only the response of the newest search may change state.
    """

    def __init__(
        self,
        search_client: ProximitySearchClient,
        view: Optional[DiscoveryView] = None,
        *,
        actor: SessionContext,
        policy: DiscoveryPolicy,
        project_id: Optional[str] = None,
        team_source: Optional[ProjectService] = None,
    ):
        self.search_client = search_client
        self.view = view
        self.actor = actor
        self.policy = policy
        self.team_source = team_source

        self.category: Optional[str] = None
        self.sub_category: Optional[str] = None
        self._generation = 0
        self._team_generation = 0
        self._disposed = False
        self._reset(project_id)

    # -- lifecycle ---------------------------------------------------------

    def _reset(self, project_id: Optional[str]) -> None:
        self.project_id = project_id
        self.exclusions = ExclusionSet(project_id)
        self._state = DiscoveryState.AWAITING_LOCATION
        self._location: Optional[ResolvedLocation] = None
        self._results: List[ProfessionalRecord] = []
        self._selected_id: Optional[str] = None
        self._recentered = False
        self._interacted = False
        self._location_unavailable = False
        self._error: Optional[str] = None
        self._last_query: Optional[SearchQuery] = None
        # drop whatever is still in flight for the previous project
        self._generation += 1
        self._team_generation += 1

    def switch_project(self, project_id: Optional[str]) -> None:
        logger.info("discovery (%s) mounted for project %s", self.policy.name, project_id)
        self._disposed = False
        self._reset(project_id)
        self._publish()

    def dispose(self) -> None:
        """The view is gone: late responses must not reach it."""
        self._disposed = True
        self._generation += 1
        self._team_generation += 1

    # -- read side ---------------------------------------------------------

    @property
    def state(self) -> DiscoveryState:
        return self._state

    @property
    def location(self) -> Optional[ResolvedLocation]:
        return self._location

    @property
    def last_query(self) -> Optional[SearchQuery]:
        return self._last_query

    @property
    def selected(self) -> Optional[ProfessionalRecord]:
        if self._selected_id is None:
            return None
        return self.find(self._selected_id)

    def _display_context(self) -> DisplayContext:
        return DisplayContext(actor=self.actor, policy=self.policy, excluded_ids=self.exclusions.ids)

    def visible(self) -> List[ProfessionalRecord]:
        ctx = self._display_context()
        return ExcludeEngaged().apply(candidates(self._results, ctx), ctx)

    def find(self, professional_id: str) -> Optional[ProfessionalRecord]:
        """Looks in the last directory results, including records hidden by exclusions."""
        return next((r for r in self._results if r.id == str(professional_id)), None)

    def snapshot(self) -> DiscoverySnapshot:
        ctx = self._display_context()
        shortlist = candidates(self._results, ctx)
        shown = ExcludeEngaged().apply(shortlist, ctx)

        reason = EmptyReason.NONE
        if self._state in _SHOWING_RESULTS and not shown:
            reason = EmptyReason.ALL_ENGAGED if shortlist else EmptyReason.NO_MATCHES

        loc = self._location
        return DiscoverySnapshot(
            state=self._state,
            project_id=self.project_id,
            radius_km=self.policy.radius_km,
            origin=loc.coordinate if loc else None,
            origin_source=loc.source if loc else None,
            category=self.category,
            sub_category=self.sub_category,
            professionals=tuple(shown),
            empty_reason=reason,
            selected=self.selected,
            location_unavailable=self._location_unavailable,
            error=self._error,
        )

    # -- events ------------------------------------------------------------

    async def handle_location(self, location: ResolvedLocation) -> None:
        """One resolver emission. Everything up to the search request happens before any await."""
        if self._disposed:
            return
        self._location = location
        self._location_unavailable = False

        if not self._recentered:
            self._recenter(location.coordinate)
        elif location.source is not LocationSource.LIVE_GPS and not self._interacted:
            self._recenter(location.coordinate)

        await self._search()

    def location_unavailable(self) -> None:
        if self._location is not None or self._disposed:
            return
        logger.warning("no location for user %s; discovery stays waiting", self.actor.user_id)
        self._location_unavailable = True
        self._publish()

    async def set_filters(self, category: Optional[str] = None, sub_category: Optional[str] = None) -> None:
        cat, sub = normalize_filters(category, sub_category)
        if (cat, sub) == (self.category, self.sub_category):
            return
        self.category, self.sub_category = cat, sub
        if self._location is None:
            self._publish()
            return
        # results of the old filters must not be shown under the new ones
        await self._search(keep_results=False)

    def mark_interacted(self) -> None:
        """The user panned or zoomed; automatic recentering stops until the next explicit one."""
        self._interacted = True

    def recenter_on_user(self) -> bool:
        if self._location is None:
            return False
        self._recenter(self._location.coordinate)
        return True

    async def retry(self) -> None:
        if self._location is None:
            return
        await self._search()

    def open_profile(self, professional_id: str) -> ProfessionalRecord:
        record = next((r for r in self.visible() if r.id == str(professional_id)), None)
        if record is None:
            raise LookupError(f"professional {professional_id} is not in the current results")
        self._selected_id = record.id
        self._publish()
        return record

    def close_profile(self) -> None:
        if self._selected_id is not None:
            self._selected_id = None
            self._publish()

    def close_profile_for(self, professional_id: str) -> None:
        if self._selected_id == str(professional_id):
            self.close_profile()

    def exclusions_changed(self) -> None:
        sid = self._selected_id
        if sid is not None and sid in self.exclusions and not self.exclusions.is_pending(sid):
            self._selected_id = None
        self._publish()

    async def refresh_team(self) -> bool:
        """Pulls the project's team and makes it the authoritative exclusion set."""
        if self.team_source is None or not self.project_id:
            return False
        # only the newest listing may reconcile; an older one can predate an assignment
        self._team_generation += 1
        generation = self._team_generation
        project_id = self.project_id
        try:
            members = await self.team_source.project_team(project_id)
        except ApiError as e:
            logger.warning("team refresh for project %s failed: %s", project_id, e)
            return False
        if generation != self._team_generation:
            logger.debug("dropping superseded team listing of project %s", project_id)
            return False
        self.exclusions.reconcile(m.user_id for m in members)
        self.exclusions_changed()
        return True

    # -- internals ---------------------------------------------------------

    def _recenter(self, coordinate: Coordinate) -> None:
        self._recentered = True
        self._interacted = False
        if self.view is not None and not self._disposed:
            self.view.recenter(coordinate)

    def _publish(self) -> None:
        if self.view is not None and not self._disposed:
            self.view.render(self.snapshot())

    async def _search(self, keep_results: bool = True) -> None:
        loc = self._location
        if loc is None:
            # no origin, no query
            return
        query = SearchQuery(
            origin=loc.coordinate,
            radius_km=self.policy.radius_km,
            category=self.category,
            sub_category=self.sub_category,
        )
        self._generation += 1
        generation = self._generation
        self._last_query = query
        self._error = None
        if keep_results and self._state in _SHOWING_RESULTS:
            self._state = DiscoveryState.REFRESHING
        else:
            self._state = DiscoveryState.SEARCHING
            self._results = []
            self._selected_id = None
        self._publish()

        try:
            records = await self.search_client.search(query)
        except DirectoryUnavailable as e:
            if generation != self._generation:
                logger.debug("ignoring failure of superseded search #%d", generation)
                return
            self._state = DiscoveryState.ERROR
            self._results = []
            self._selected_id = None
            self._error = "Could not load professionals near you."
            logger.warning("discovery search failed: %s", e)
            self._publish()
            return

        if generation != self._generation:
            logger.debug("discarding response of superseded search #%d", generation)
            return

        self._results = list(records)
        self._state = DiscoveryState.READY
        if self._selected_id is not None and self.find(self._selected_id) is None:
            self._selected_id = None
        self._publish()
