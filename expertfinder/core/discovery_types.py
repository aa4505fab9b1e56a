from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..providers.base import Coordinate, ProfessionalRecord
from .config import settings


class LocationSource(str, Enum):
    LIVE_GPS = "live_gps"
    STORED_PROFILE = "stored_profile"
    GEOCODED_CITY = "geocoded_city"


@dataclass(frozen=True)
class ResolvedLocation:
    coordinate: Coordinate
    source: LocationSource


@dataclass(frozen=True)
class SessionContext:
    """The acting user, injected by whoever owns authentication."""
    user_id: Optional[str]
    category: Optional[str] = None


@dataclass(frozen=True)
class SearchQuery:
    origin: Coordinate
    radius_km: float
    category: Optional[str] = None
    sub_category: Optional[str] = None

    def __post_init__(self):
        if self.origin is None:
            raise ValueError("a search query needs an origin")
        if self.radius_km <= 0:
            raise ValueError("radius_km must be positive")


class DiscoveryState(str, Enum):
    AWAITING_LOCATION = "awaiting_location"
    SEARCHING = "searching"
    REFRESHING = "refreshing"
    READY = "ready"
    ERROR = "error"


class EmptyReason(str, Enum):
    NONE = "none"
    NO_MATCHES = "no_matches"
    ALL_ENGAGED = "all_engaged"


@dataclass(frozen=True)
class DiscoveryPolicy:
    """Per-call-site knobs of the shared controller."""
    name: str
    radius_km: float
    suppress_peers: bool = True

    def __post_init__(self):
        if not self.radius_km > 0:
            raise ValueError(f"discovery radius must be positive, got {self.radius_km}")

    @classmethod
    def map_view(cls) -> "DiscoveryPolicy":
        return cls(name="map", radius_km=settings.map_radius_km)

    @classmethod
    def list_view(cls) -> "DiscoveryPolicy":
        return cls(name="list", radius_km=settings.list_radius_km)


@dataclass(frozen=True)
class DiscoverySnapshot:
    state: DiscoveryState
    project_id: Optional[str]
    radius_km: float
    origin: Optional[Coordinate] = None
    origin_source: Optional[LocationSource] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    professionals: Tuple[ProfessionalRecord, ...] = ()
    empty_reason: EmptyReason = EmptyReason.NONE
    selected: Optional[ProfessionalRecord] = None
    location_unavailable: bool = False
    error: Optional[str] = None

    @property
    def can_retry(self) -> bool:
        return self.state is DiscoveryState.ERROR


@dataclass
class DisplayContext:
    """What the display filters need to know about the acting user and project."""
    actor: SessionContext
    policy: DiscoveryPolicy
    excluded_ids: frozenset = frozenset()
