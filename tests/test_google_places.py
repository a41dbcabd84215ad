"""GooglePlacesProvider request shape and response mapping."""

from __future__ import annotations

import json

import httpx
import pytest

from tourguide.core.errors import EncodingError, HttpError, NetworkError, SearchNotFound
from tourguide.core.search import TOURIST_CATEGORIES
from tourguide.providers.base import Coordinate, Viewport
from tourguide.providers.google_places import GooglePlacesConfig, GooglePlacesProvider

VIEWPORT = Viewport.from_meters(Coordinate(35.6585, 139.7013), 1000.0, 1000.0)

PLACES = {
    "places": [
        {
            "id": "ChIJmeiji",
            "displayName": {"text": "Meiji Jingu"},
            "formattedAddress": "1-1 Yoyogikamizonocho, Shibuya, Tokyo 151-8557, Japan",
            "location": {"latitude": 35.6764, "longitude": 139.6993},
            "primaryType": "historical_landmark",
            "nationalPhoneNumber": "03-3379-5511",
            "websiteUri": "https://www.meijijingu.or.jp/",
        },
        {"id": "ChIJnolocation", "displayName": {"text": "Broken"}},
        {
            "id": "ChIJpark",
            "displayName": {"text": "Yoyogi Park"},
            "location": {"latitude": 35.6717, "longitude": 139.6949},
            "primaryType": "park",
        },
    ]
}


async def _search(handler):
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        provider = GooglePlacesProvider(GooglePlacesConfig(api_key="places-key"), client=http)
        return await provider.search(VIEWPORT, TOURIST_CATEGORIES)


@pytest.mark.asyncio
async def test_search_nearby_request_and_mapping():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=PLACES)

    places = await _search(handler)

    request = seen[0]
    assert request.url == httpx.URL("https://places.googleapis.com/v1/places:searchNearby")
    assert request.headers["X-Goog-Api-Key"] == "places-key"
    assert "places.location" in request.headers["X-Goog-FieldMask"]
    body = json.loads(request.content)
    circle = body["locationRestriction"]["circle"]
    assert circle["center"] == {"latitude": 35.6585, "longitude": 139.7013}
    assert circle["radius"] == pytest.approx(500.0, rel=1e-3)
    assert body["includedTypes"].count("historical_landmark") == 1
    assert "performing_arts_center" in body["includedTypes"]

    assert [p.source_id for p in places] == ["ChIJmeiji", "ChIJpark"]
    shrine = places[0]
    assert shrine.place_id == "google_places:ChIJmeiji"
    assert shrine.name == "Meiji Jingu"
    assert shrine.category == "national_monument"
    assert shrine.phone == "03-3379-5511"
    assert shrine.website_url == "https://www.meijijingu.or.jp/"
    assert (shrine.city, shrine.region, shrine.country) == ("Shibuya", "Tokyo 151-8557", "Japan")
    assert places[1].category == "park"


@pytest.mark.asyncio
async def test_empty_response_is_not_found():
    with pytest.raises(SearchNotFound):
        await _search(lambda request: httpx.Response(200, json={}))


@pytest.mark.asyncio
async def test_http_failure_is_single_attempt():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    with pytest.raises(HttpError) as info:
        await _search(handler)
    assert info.value.status_code == 503
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("dns failure")

    with pytest.raises(NetworkError):
        await _search(handler)


@pytest.mark.asyncio
async def test_undecodable_body_is_encoding_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")

    with pytest.raises(EncodingError) as info:
        await _search(handler)
    assert isinstance(info.value.cause, httpx.DecodingError)


@pytest.mark.asyncio
async def test_redirect_loop_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("redirect loop", request=request)

    with pytest.raises(NetworkError):
        await _search(handler)


def test_requires_api_key():
    with pytest.raises(ValueError):
        GooglePlacesProvider(GooglePlacesConfig(api_key=""))
