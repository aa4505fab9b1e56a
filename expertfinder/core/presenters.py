from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from ..providers.base import Coordinate
from .discovery_types import DiscoverySnapshot, DiscoveryState, EmptyReason

MESSAGES = {
    "waiting": "Locating you...",
    "unavailable": (
        "We couldn't get your location from your browser or profile. "
        "Please enable location services or update your profile city."
    ),
    "searching": "Mapping professionals...",
    "error": "Could not load professionals near you.",
    EmptyReason.NO_MATCHES: "No professionals match these filters nearby.",
    EmptyReason.ALL_ENGAGED: "Everyone matching nearby is already on this project.",
}


def status_message(snapshot: DiscoverySnapshot) -> Optional[str]:
    if snapshot.state is DiscoveryState.AWAITING_LOCATION:
        return MESSAGES["unavailable"] if snapshot.location_unavailable else MESSAGES["waiting"]
    if snapshot.state is DiscoveryState.SEARCHING:
        return MESSAGES["searching"]
    if snapshot.state is DiscoveryState.ERROR:
        return snapshot.error or MESSAGES["error"]
    if snapshot.empty_reason is not EmptyReason.NONE:
        return MESSAGES[snapshot.empty_reason]
    return None


def _distance_text(km: Optional[float]) -> Optional[str]:
    if km is None:
        return None
    if km < 1:
        return f"{int(round(km * 1000))} m away"
    return f"{km:.1f} km away"


class MapMarkerPresenter:
    name = "map_markers"

    def present(self, snapshot: DiscoverySnapshot) -> Dict[str, Any]:
        origin = snapshot.origin
        markers = [
            {
                "id": p.id,
                "lat": p.coordinate.lat,
                "lon": p.coordinate.lon,
                "title": p.name,
                "subtitle": p.role,
                "address": p.address or "Location Verified",
                "experience_years": p.experience_years,
            }
            for p in snapshot.professionals
        ]
        return {
            "you_are_here": {"lat": origin.lat, "lon": origin.lon} if origin else None,
            # the search circle is drawn in metres
            "radius_m": snapshot.radius_km * 1000.0 if origin else None,
            "markers": markers,
            "loading": snapshot.state in (DiscoveryState.AWAITING_LOCATION, DiscoveryState.SEARCHING),
            "message": status_message(snapshot),
            "can_retry": snapshot.can_retry,
            "profile": _profile_panel(snapshot),
        }


class CardListPresenter:
    name = "cards"

    def present(self, snapshot: DiscoverySnapshot) -> Dict[str, Any]:
        cards: List[Dict[str, Any]] = []
        for p in snapshot.professionals:
            cards.append(
                {
                    "id": p.id,
                    "name": p.name,
                    "role": p.role,
                    "rating": p.rating,
                    "distance": _distance_text(p.distance_km),
                    "experience_years": p.experience_years,
                    "selected": snapshot.selected is not None and snapshot.selected.id == p.id,
                }
            )
        return {
            "count": len(cards),
            "cards": cards,
            "loading": snapshot.state in (DiscoveryState.AWAITING_LOCATION, DiscoveryState.SEARCHING),
            "message": status_message(snapshot),
            "can_retry": snapshot.can_retry,
            "profile": _profile_panel(snapshot),
        }


def _profile_panel(snapshot: DiscoverySnapshot) -> Optional[Dict[str, Any]]:
    p = snapshot.selected
    if p is None:
        return None
    return {
        "id": p.id,
        "name": p.name,
        "role": p.role,
        "bio": p.bio,
        "experience_years": p.experience_years,
        "specialization": p.specialization,
        "resume_path": p.resume_path,
        "portfolio_url": p.portfolio_url,
        "can_hire": snapshot.project_id is not None,
    }


class PresenterView:
    """A DiscoveryView that keeps the latest presented payload and every recenter request."""

    def __init__(self, presenter, on_render: Optional[Callable[[Dict[str, Any]], None]] = None):
        self.presenter = presenter
        self.on_render = on_render
        self.last: Optional[Dict[str, Any]] = None
        self.center: Optional[Coordinate] = None
        self.recenters: List[Coordinate] = []

    def recenter(self, coordinate: Coordinate) -> None:
        self.center = coordinate
        self.recenters.append(coordinate)

    def render(self, snapshot: DiscoverySnapshot) -> None:
        self.last = self.presenter.present(snapshot)
        if self.on_render is not None:
            self.on_render(self.last)
