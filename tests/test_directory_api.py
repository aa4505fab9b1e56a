import httpx
import pytest

from expertfinder.api.app import create_app
from expertfinder.api.store import DirectoryStore, great_circle_km
from expertfinder.core.assignment import AssignmentCoordinator
from expertfinder.core.config import settings
from expertfinder.core.controller import DiscoveryViewController
from expertfinder.core.discovery_types import DiscoveryPolicy, DiscoveryState, SessionContext
from expertfinder.core.errors import ApiError
from expertfinder.core.presenters import CardListPresenter, PresenterView
from expertfinder.core.resolver import LocationResolver
from expertfinder.core.search import ProximitySearchClient
from expertfinder.core.session import DiscoverySession
from expertfinder.providers.base import Coordinate
from expertfinder.providers.planora_api import PlanoraApiClient, PlanoraApiConfig

from fakes import FakeGeocoder, settle

PUNE = Coordinate(18.52, 73.85)


def seeded_store():
    store = DirectoryStore()
    store.upsert_user("owner-1", {"name": "Ravi", "category": "Land Owner", "city": "Pune"})
    store.upsert_user("owner-2", {"name": "Meera", "category": "Land Owner", "latitude": 18.53, "longitude": 73.86})
    store.upsert_user(
        "p1",
        {"name": "Asha", "category": "Planning", "sub_category": "Architect", "latitude": 18.55, "longitude": 73.88, "experience_years": 8},
    )
    store.upsert_user("p2", {"name": "Vikram", "category": "SiteWork", "sub_category": "Mason", "latitude": 18.50, "longitude": 73.80})
    store.upsert_user("far", {"name": "Kabir", "category": "Planning", "sub_category": "Architect", "latitude": 19.07, "longitude": 72.87})
    return store


@pytest.fixture
def store():
    return seeded_store()


@pytest.fixture
def http(store):
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=create_app(store)), base_url="http://dir.test")


@pytest.fixture
def api(http):
    return PlanoraApiClient(PlanoraApiConfig(base_url="http://dir.test/api", base_backoff_s=0.0), client=http)


def test_great_circle_distance():
    assert great_circle_km(18.52, 73.85, 18.52, 73.85) < 0.001
    # Pune to Mumbai is roughly 120 km as the crow flies
    assert 115 < great_circle_km(18.52, 73.85, 19.07, 72.87) < 125


@pytest.mark.asyncio
async def test_nearby_is_bounded_sorted_and_filtered(api):
    everyone = await api.nearby_professionals(PUNE, 50.0)
    assert [r.id for r in everyone] == ["owner-2", "p1", "p2"]
    assert all(r.distance_km < 50.0 for r in everyone)
    assert everyone[0].distance_km < everyone[1].distance_km < everyone[2].distance_km

    architects = await api.nearby_professionals(PUNE, 50.0, category="Planning", sub_category="Architect")
    assert [r.id for r in architects] == ["p1"]
    assert architects[0].experience_years == 8

    wide = await api.nearby_professionals(PUNE, 200.0, category="Planning")
    assert [r.id for r in wide] == ["p1", "far"]


@pytest.mark.asyncio
async def test_nearby_requires_an_origin(http):
    resp = await http.get("/api/professionals/nearby", params={"radius": 50})
    assert resp.status_code == 400
    resp = await http.get("/api/professionals/nearby", params={"lat": 1, "lon": 1, "radius": 0})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_profile_without_coordinates(api):
    profile = await api.get_profile("owner-1")
    assert profile.coordinate is None
    assert profile.city == "Pune"

    with pytest.raises(ApiError) as err:
        await api.get_profile("nobody")
    assert err.value.status_code == 404


@pytest.mark.asyncio
async def test_assign_then_team_lists_pending_member(api, http):
    await api.assign_professional("proj-1", "p1", "Architect")
    team = await api.project_team("proj-1")
    assert [(m.user_id, m.assigned_role, m.status) for m in team] == [("p1", "Architect", "Pending")]
    assert await api.project_team("proj-2") == []

    resp = await http.delete("/api/projects/proj-1/team/p1")
    assert resp.status_code == 200
    assert await api.project_team("proj-1") == []

    with pytest.raises(ApiError) as err:
        await api.assign_professional("proj-1", "ghost", None)
    assert err.value.status_code == 404


@pytest.mark.asyncio
async def test_api_key_is_enforced_when_configured(http, monkeypatch):
    monkeypatch.setattr(settings, "directory_api_key", "k-1")

    denied = await http.get("/api/users/owner-1")
    assert denied.status_code == 401
    allowed = await http.get("/api/users/owner-1", headers={"X-API-Key": "k-1"})
    assert allowed.status_code == 200
    assert allowed.json()["city"] == "Pune"


@pytest.mark.asyncio
async def test_city_only_owner_discovers_and_hires_over_http(api):
    actor = SessionContext(user_id="owner-1", category="Land Owner")
    view = PresenterView(CardListPresenter())
    controller = DiscoveryViewController(
        ProximitySearchClient(api),
        view,
        actor=actor,
        policy=DiscoveryPolicy(name="list", radius_km=50.0),
        team_source=api,
    )
    session = DiscoverySession(controller, lambda: LocationResolver(actor, api, FakeGeocoder(PUNE), positions=None))

    async with session:
        await session.mount("proj-1")
        for _ in range(50):
            await settle()
            await session.idle()
            if controller.state is DiscoveryState.READY:
                break

        assert controller.state is DiscoveryState.READY
        assert [c["id"] for c in view.last["cards"]] == ["p1", "p2"]
        assert view.last["cards"][0]["distance"].endswith("km away")

        controller.open_profile("p1")
        await AssignmentCoordinator(api, controller).assign("proj-1", "p1")

        assert [c["id"] for c in view.last["cards"]] == ["p2"]
        assert view.last["profile"] is None
        assert [m.user_id for m in await api.project_team("proj-1")] == ["p1"]


@pytest.mark.asyncio
async def test_directory_is_open_and_warns_without_api_key(store, monkeypatch, caplog):
    monkeypatch.setattr(settings, "directory_api_key", "")

    with caplog.at_level("WARNING", logger="expertfinder.api.app"):
        app = create_app(store)
    assert "DIRECTORY_API_KEY is not set" in caplog.text

    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://dir.test")
    resp = await http.get("/api/users/owner-1")
    assert resp.status_code == 200
