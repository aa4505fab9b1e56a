import pytest

from expertfinder.core.controller import DiscoveryViewController
from expertfinder.core.discovery_types import DiscoveryPolicy, SessionContext
from expertfinder.core.search import ProximitySearchClient

from fakes import FakeDirectory, FakeProjects, RecordingView


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def projects():
    return FakeProjects()


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def actor():
    return SessionContext(user_id="owner-1", category="Land Owner")


@pytest.fixture
def make_controller(directory, projects, view, actor):
    def _make(project_id="proj-1", policy=None, actor_override=None, directory_override=None):
        return DiscoveryViewController(
            ProximitySearchClient(directory_override or directory),
            view,
            actor=actor_override or actor,
            policy=policy or DiscoveryPolicy(name="map", radius_km=50.0),
            project_id=project_id,
            team_source=projects,
        )

    return _make
