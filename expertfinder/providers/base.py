# Provider interfaces and dataclasses.
# expertfinder/providers/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point. A new fix is a new value, never a mutation."""
    lat: float
    lon: float


@dataclass(frozen=True)
class ProfessionalRecord:
    """
    A directory entry as returned by the nearby search.
    `distance_km` is the directory's value relative to the query origin; it is never recomputed here.
    """
    id: str
    name: str
    category: Optional[str]
    sub_category: Optional[str]
    coordinate: Coordinate
    distance_km: Optional[float]

    rating: Optional[float] = None
    experience_years: Optional[int] = None
    resume_path: Optional[str] = None
    portfolio_url: Optional[str] = None
    bio: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    specialization: Optional[str] = None

    @property
    def role(self) -> Optional[str]:
        return self.sub_category or self.category


@dataclass(frozen=True)
class ProfileRecord:
    """The acting user's stored profile, as far as location resolution cares."""
    user_id: str
    coordinate: Optional[Coordinate]
    city: Optional[str]
    category: Optional[str] = None


@dataclass(frozen=True)
class TeamMember:
    user_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    assigned_role: Optional[str] = None
    status: Optional[str] = None


def _opt_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _opt_int(value: Any) -> Optional[int]:
    f = _opt_float(value)
    return int(f) if f is not None else None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def coordinate_from_payload(payload: Dict[str, Any], lat_key: str = "latitude", lon_key: str = "longitude") -> Optional[Coordinate]:
    lat = _opt_float(payload.get(lat_key))
    lon = _opt_float(payload.get(lon_key))
    if lat is None or lon is None:
        return None
    return Coordinate(lat=lat, lon=lon)


def professional_from_payload(payload: Dict[str, Any]) -> ProfessionalRecord:
    """
    Builds a record from one nearby-search row.
    Raises ValueError when the row has no id or no coordinate; those rows cannot be placed or assigned.
    """
    raw_id = payload.get("user_id", payload.get("id"))
    if raw_id is None or str(raw_id) == "":
        raise ValueError("professional row without an id")
    coordinate = coordinate_from_payload(payload)
    if coordinate is None:
        raise ValueError(f"professional {raw_id} has no coordinate")

    return ProfessionalRecord(
        id=str(raw_id),
        name=_opt_str(payload.get("name")) or "",
        category=_opt_str(payload.get("category")),
        sub_category=_opt_str(payload.get("sub_category")),
        coordinate=coordinate,
        distance_km=_opt_float(payload.get("distance")),
        rating=_opt_float(payload.get("rating")),
        experience_years=_opt_int(payload.get("experience_years")),
        resume_path=_opt_str(payload.get("resume_path")),
        portfolio_url=_opt_str(payload.get("portfolio_url")),
        bio=_opt_str(payload.get("bio")),
        address=_opt_str(payload.get("address")),
        city=_opt_str(payload.get("city")),
        specialization=_opt_str(payload.get("specialization")),
    )


def profile_from_payload(user_id: str, payload: Dict[str, Any]) -> ProfileRecord:
    return ProfileRecord(
        user_id=str(payload.get("user_id", user_id)),
        coordinate=coordinate_from_payload(payload),
        city=_opt_str(payload.get("city")),
        category=_opt_str(payload.get("category")),
    )


def team_member_from_payload(payload: Dict[str, Any]) -> TeamMember:
    raw_id = payload.get("user_id", payload.get("id"))
    if raw_id is None:
        raise ValueError("team member without an id")
    return TeamMember(
        user_id=str(raw_id),
        name=_opt_str(payload.get("name")),
        category=_opt_str(payload.get("category")),
        sub_category=_opt_str(payload.get("sub_category")),
        assigned_role=_opt_str(payload.get("assigned_role")),
        status=_opt_str(payload.get("status")),
    )


class Geocoder(Protocol):
    async def geocode(self, place: str) -> Optional[Coordinate]:
        """
        Returns the first match for `place`, or None when nothing matched.
        Raises GeocodingError on transport failure.
        """
        ...


class ProfileSource(Protocol):
    async def get_profile(self, user_id: str) -> ProfileRecord:
        ...


class DirectoryProvider(Protocol):
    async def nearby_professionals(
        self,
        origin: Coordinate,
        radius_km: float,
        *,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
    ) -> List[ProfessionalRecord]:
        ...


class ProjectService(Protocol):
    async def assign_professional(self, project_id: str, professional_id: str, role: Optional[str]) -> None:
        ...

    async def project_team(self, project_id: str) -> List[TeamMember]:
        ...
