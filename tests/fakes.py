import asyncio
from typing import List, Optional

from expertfinder.core.errors import ApiError
from expertfinder.providers.base import Coordinate, ProfessionalRecord, ProfileRecord, TeamMember


def pro(pid, category="Planning", sub_category="Architect", lat=18.53, lon=73.86, distance=1.5, name=None):
    return ProfessionalRecord(
        id=str(pid),
        name=name or f"Pro {pid}",
        category=category,
        sub_category=sub_category,
        coordinate=Coordinate(lat=lat, lon=lon),
        distance_km=distance,
    )


class FakeProfiles:
    def __init__(self, profile: Optional[ProfileRecord] = None, error: Optional[Exception] = None):
        self.profile = profile
        self.error = error
        self.calls: List[str] = []

    async def get_profile(self, user_id):
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return self.profile


class FakeGeocoder:
    def __init__(self, result: Optional[Coordinate] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[str] = []

    async def geocode(self, place):
        self.calls.append(place)
        if self.error is not None:
            raise self.error
        return self.result


class FakeDirectory:
    """
    Scripted nearby search. By default answers immediately with `results`.
    With `manual=True` every call parks on a future the test resolves via answer()/fail().
    """

    def __init__(self, results: Optional[List[ProfessionalRecord]] = None, *, manual: bool = False):
        self.results = results or []
        self.manual = manual
        self.error: Optional[Exception] = None
        self.calls: List[dict] = []
        self._pending: List[asyncio.Future] = []

    async def nearby_professionals(self, origin, radius_km, *, category=None, sub_category=None):
        self.calls.append({"origin": origin, "radius_km": radius_km, "category": category, "sub_category": sub_category})
        if self.manual:
            fut = asyncio.get_running_loop().create_future()
            self._pending.append(fut)
            return await fut
        if self.error is not None:
            raise self.error
        return list(self.results)

    def answer(self, index: int, results: List[ProfessionalRecord]) -> None:
        self._pending[index].set_result(results)

    def fail(self, index: int, error: Exception = None) -> None:
        self._pending[index].set_exception(error or ApiError("boom", status_code=503))


class FakeProjects:
    def __init__(self, team: Optional[List[str]] = None):
        self.team: List[str] = list(team or [])
        self.assign_error: Optional[Exception] = None
        self.team_error: Optional[Exception] = None
        self.assign_calls: List[tuple] = []
        self.team_calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def assign_professional(self, project_id, professional_id, role):
        self.assign_calls.append((project_id, professional_id, role))
        if self.gate is not None:
            await self.gate.wait()
        if self.assign_error is not None:
            raise self.assign_error
        if professional_id not in self.team:
            self.team.append(professional_id)

    async def project_team(self, project_id):
        self.team_calls.append(project_id)
        if self.team_error is not None:
            raise self.team_error
        return [TeamMember(user_id=uid, status="Pending") for uid in self.team]


class RecordingView:
    def __init__(self):
        self.recenters: List[Coordinate] = []
        self.snapshots = []

    def recenter(self, coordinate):
        self.recenters.append(coordinate)

    def render(self, snapshot):
        self.snapshots.append(snapshot)

    @property
    def last(self):
        return self.snapshots[-1] if self.snapshots else None


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)
