from __future__ import annotations

from typing import List, Sequence

from ..providers.base import ProfessionalRecord
from .categories import is_land_owner, same_category
from .discovery_types import DisplayContext


class ExcludeSelf:
    name = "exclude_self"

    def apply(self, records: Sequence[ProfessionalRecord], ctx: DisplayContext) -> List[ProfessionalRecord]:
        me = ctx.actor.user_id
        if not me:
            return list(records)
        return [r for r in records if r.id != str(me)]


class ExcludeLandOwners:
    """Owners are never hireable, whatever the filters say."""
    name = "exclude_land_owners"

    def apply(self, records: Sequence[ProfessionalRecord], ctx: DisplayContext) -> List[ProfessionalRecord]:
        return [r for r in records if not is_land_owner(r.category)]


class SuppressPeers:
    """A contractor looking for help does not get other contractors as candidates."""
    name = "suppress_peers"

    def apply(self, records: Sequence[ProfessionalRecord], ctx: DisplayContext) -> List[ProfessionalRecord]:
        if not ctx.policy.suppress_peers or not ctx.actor.category:
            return list(records)
        return [r for r in records if not same_category(r.category, ctx.actor.category)]


class ExcludeEngaged:
    name = "exclude_engaged"

    def apply(self, records: Sequence[ProfessionalRecord], ctx: DisplayContext) -> List[ProfessionalRecord]:
        if not ctx.excluded_ids:
            return list(records)
        return [r for r in records if r.id not in ctx.excluded_ids]


DISPLAY_FILTERS = [ExcludeSelf(), ExcludeLandOwners(), SuppressPeers()]


def candidates(records: Sequence[ProfessionalRecord], ctx: DisplayContext) -> List[ProfessionalRecord]:
    """Directory results after the display-level exclusions, before the project's exclusion set."""
    out = list(records)
    for f in DISPLAY_FILTERS:
        out = f.apply(out, ctx)
    return out
