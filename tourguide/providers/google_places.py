# tourguide/providers/google_places.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..core.errors import EncodingError, HttpError, InvalidResponseShape, NetworkError, SearchNotFound
from ..core.logging import logger
from .base import RawPlace, Viewport

# Our category tags -> Places API (New) place types. Tags without a close
# Google equivalent fall back to the nearest broader type.
GOOGLE_PLACE_TYPES: Dict[str, str] = {
    "amusement_park": "amusement_park",
    "aquarium": "aquarium",
    "beach": "beach",
    "campground": "campground",
    "castle": "historical_landmark",
    "fairground": "amusement_center",
    "fortress": "historical_landmark",
    "national_monument": "historical_landmark",
    "national_park": "national_park",
    "planetarium": "planetarium",
    "spa": "spa",
    "zoo": "zoo",
    "museum": "museum",
    "library": "library",
    "movie_theater": "movie_theater",
    "park": "park",
    "stadium": "stadium",
    "theater": "performing_arts_center",
}

# Shared Google types map back to one tag.
GOOGLE_TYPE_CATEGORIES: Dict[str, str] = {
    "historical_landmark": "national_monument",
    "amusement_center": "fairground",
    "performing_arts_center": "theater",
}

MAX_SEARCH_RADIUS_M = 50_000.0


def _safe_get(d: Dict[str, Any], path: List[str], default=None):
    cur: Any = d
    for key in path:
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def _extract_address_components(addr: str) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Lightweight parsing for city/region/country from Google's formattedAddress.
    Expected-ish format: "street, City, Region Postal, Country"
    """
    if not addr:
        return None, None, None
    parts = [p.strip() for p in addr.split(",") if p.strip()]
    country = parts[-1] if parts else None
    region = parts[-2] if len(parts) >= 2 else None
    city = parts[-3] if len(parts) >= 3 else None
    return city, region, country


def _included_types(category_filter: Sequence[str]) -> List[str]:
    types: List[str] = []
    for tag in category_filter:
        t = GOOGLE_PLACE_TYPES.get(tag, tag)
        if t not in types:
            types.append(t)
    return types


def _category_for(primary_type: Optional[str]) -> Optional[str]:
    if not primary_type:
        return None
    return GOOGLE_TYPE_CATEGORIES.get(primary_type, primary_type)


@dataclass(frozen=True)
class GooglePlacesConfig:
    api_key: str
    # e.g. "en" or "ja"
    language_code: str = "en"
    timeout_s: float = 20.0
    max_result_count: int = 20

    # Keep the mask lean to reduce billing/latency.
    field_mask: str = (
        "places.id,"
        "places.displayName.text,"
        "places.formattedAddress,"
        "places.location,"
        "places.primaryType,"
        "places.nationalPhoneNumber,"
        "places.websiteUri"
    )


class GooglePlacesProvider:
    """
    Google Places API v1 nearby search:
      - POST https://places.googleapis.com/v1/places:searchNearby

    Auth header:
      - X-Goog-Api-Key: <key>
    Field mask:
      - X-Goog-FieldMask: <comma-separated fields>

    One attempt per search; failures surface as TourGuideError subclasses.
    """

    provider_name = "google_places"
    _BASE_URL = "https://places.googleapis.com/v1"

    def __init__(self, cfg: GooglePlacesConfig, client: Optional[httpx.AsyncClient] = None):
        if not cfg.api_key:
            raise ValueError("GooglePlacesConfig.api_key is required")
        self.cfg = cfg
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.cfg.timeout_s)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("GooglePlacesProvider must be used with 'async with' or provide a client.")
        return self._client

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Goog-Api-Key": self.cfg.api_key,
            "X-Goog-FieldMask": self.cfg.field_mask,
            "Content-Type": "application/json",
        }

    def _body(self, viewport: Viewport, category_filter: Sequence[str]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "maxResultCount": self.cfg.max_result_count,
            "languageCode": self.cfg.language_code,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": viewport.center.lat, "longitude": viewport.center.lng},
                    "radius": min(max(viewport.radius_meters(), 1.0), MAX_SEARCH_RADIUS_M),
                }
            },
        }
        types = _included_types(category_filter)
        if types:
            body["includedTypes"] = types
        return body

    async def search(self, viewport: Viewport, category_filter: Sequence[str]) -> List[RawPlace]:
        url = f"{self._BASE_URL}/places:searchNearby"
        try:
            resp = await self.client.post(url, headers=self._headers(), json=self._body(viewport, category_filter))
        except httpx.DecodingError as e:
            raise EncodingError(e) from e
        except httpx.RequestError as e:
            raise NetworkError(e) from e

        if not 200 <= resp.status_code <= 299:
            logger.warning("places_http_error", status_code=resp.status_code)
            raise HttpError(resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise EncodingError(e) from e
        if not isinstance(data, dict):
            raise InvalidResponseShape("Expected JSON object response")

        # searchNearby answers an empty object when nothing matches.
        places = data.get("places") or []
        if not places:
            raise SearchNotFound("no places in this area")

        results: List[RawPlace] = []
        for p in places:
            place_id = _safe_get(p, ["id"])
            lat = _safe_get(p, ["location", "latitude"])
            lng = _safe_get(p, ["location", "longitude"])
            if not place_id or lat is None or lng is None:
                continue

            formatted_address = _safe_get(p, ["formattedAddress"], "") or ""
            city, region, country = _extract_address_components(formatted_address)
            results.append(
                RawPlace(
                    source=self.provider_name,
                    source_id=str(place_id),
                    name=_safe_get(p, ["displayName", "text"]),
                    lat=float(lat),
                    lng=float(lng),
                    category=_category_for(p.get("primaryType")),
                    phone=p.get("nationalPhoneNumber"),
                    website_url=p.get("websiteUri"),
                    address_full=formatted_address,
                    city=city,
                    region=region,
                    country=country,
                    payload={"search_place": p},
                )
            )
        return results
