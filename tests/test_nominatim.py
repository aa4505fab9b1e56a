import httpx
import pytest

from expertfinder.core.errors import GeocodingError
from expertfinder.providers.base import Coordinate
from expertfinder.providers.nominatim import NominatimConfig, NominatimGeocoder

CFG = NominatimConfig(base_url="http://osm.test", base_backoff_s=0.0)


def geocoder_for(handler, cfg=CFG):
    return NominatimGeocoder(cfg, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_geocode_uses_first_match_and_identifies_itself():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"lat": "18.5204", "lon": "73.8567", "display_name": "Pune, Maharashtra, India"},
                {"lat": "0", "lon": "0"},
            ],
        )

    coordinate = await geocoder_for(handler).geocode("  Pune ")

    assert coordinate == Coordinate(18.5204, 73.8567)
    req = seen[0]
    assert req.url.path == "/search"
    assert dict(req.url.params) == {"q": "Pune", "format": "json", "limit": "1"}
    assert req.headers["User-Agent"] == "Planora-Construction-App/1.0"


@pytest.mark.asyncio
async def test_country_bias_is_forwarded():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    cfg = NominatimConfig(base_url="http://osm.test", country_codes="in")
    assert await geocoder_for(handler, cfg).geocode("Pune") is None
    assert seen[0].url.params["countrycodes"] == "in"


@pytest.mark.asyncio
async def test_blank_place_is_not_looked_up():
    def handler(request):
        raise AssertionError("no request expected")

    assert await geocoder_for(handler).geocode("   ") is None


@pytest.mark.asyncio
async def test_match_without_coordinates_is_no_match():
    def handler(request):
        return httpx.Response(200, json=[{"display_name": "somewhere"}])

    assert await geocoder_for(handler).geocode("Somewhere") is None


@pytest.mark.asyncio
async def test_rate_limit_is_retried_once_then_reported():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429)

    with pytest.raises(GeocodingError):
        await geocoder_for(handler).geocode("Pune")
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(403)

    with pytest.raises(GeocodingError):
        await geocoder_for(handler).geocode("Pune")
    assert len(calls) == 1


def test_user_agent_is_required():
    with pytest.raises(ValueError):
        NominatimGeocoder(NominatimConfig(user_agent=""))
