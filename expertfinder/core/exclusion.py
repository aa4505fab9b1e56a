from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Set

logger = logging.getLogger(__name__)

_IN_FLIGHT = "in_flight"
_AWAITING_REFRESH = "awaiting_refresh"


class ExclusionSet:
    """
    Professionals already engaged with one project (assigned or invited).

    Confirmed members come from the project's team listing. Optimistic members are added
    around an assignment call: in flight until the call returns, then awaiting the next team
    refresh. A refresh replaces the confirmed members and drops every settled optimistic
    entry, so the team listing always wins; in-flight entries survive it.
    """

    def __init__(self, project_id: Optional[str]):
        self.project_id = project_id
        self._confirmed: Set[str] = set()
        self._optimistic: Dict[str, str] = {}

    def __contains__(self, professional_id: object) -> bool:
        return professional_id in self._confirmed or professional_id in self._optimistic

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def ids(self) -> FrozenSet[str]:
        return frozenset(self._confirmed) | frozenset(self._optimistic)

    def is_pending(self, professional_id: str) -> bool:
        return self._optimistic.get(professional_id) == _IN_FLIGHT

    def add_optimistic(self, professional_id: str) -> bool:
        """Returns False when the professional was already excluded; nothing changes then."""
        if professional_id in self:
            return False
        self._optimistic[professional_id] = _IN_FLIGHT
        return True

    def settle(self, professional_id: str) -> None:
        if professional_id in self._optimistic:
            self._optimistic[professional_id] = _AWAITING_REFRESH

    def rollback(self, professional_id: str) -> None:
        if self._optimistic.pop(professional_id, None) is not None:
            logger.info("rolled back optimistic exclusion of %s for project %s", professional_id, self.project_id)

    def reconcile(self, team_ids: Iterable[str]) -> None:
        self._confirmed = {str(i) for i in team_ids}
        stale = [pid for pid, state in self._optimistic.items() if state != _IN_FLIGHT]
        for pid in stale:
            del self._optimistic[pid]
            if pid not in self._confirmed:
                logger.warning("team listing for project %s does not contain %s; dropping it from exclusions", self.project_id, pid)
