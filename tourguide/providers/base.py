# Provider interfaces and dataclasses.
# tourguide/providers/base.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

# Metres per degree of latitude, close enough for sizing a visible region.
METERS_PER_DEGREE = 111_320.0


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class Viewport:
    """The visible map region: a center plus a span in degrees."""
    center: Coordinate
    lat_delta: float
    lng_delta: float

    @classmethod
    def from_meters(cls, center: Coordinate, lat_meters: float, lng_meters: float) -> "Viewport":
        lat_delta = lat_meters / METERS_PER_DEGREE
        cos_lat = math.cos(math.radians(center.lat))
        lng_delta = lng_meters / (METERS_PER_DEGREE * cos_lat) if cos_lat > 1e-12 else 360.0
        return cls(center=center, lat_delta=lat_delta, lng_delta=min(lng_delta, 360.0))

    def is_close(self, other: Optional["Viewport"], tolerance: float = 0.0001) -> bool:
        if other is None:
            return False
        return (
            abs(self.center.lat - other.center.lat) < tolerance
            and abs(self.center.lng - other.center.lng) < tolerance
            and abs(self.lat_delta - other.lat_delta) < tolerance
            and abs(self.lng_delta - other.lng_delta) < tolerance
        )

    def radius_meters(self) -> float:
        """Radius of the circle that covers the viewport's larger half-span."""
        lat_m = self.lat_delta * METERS_PER_DEGREE
        lng_m = self.lng_delta * METERS_PER_DEGREE * math.cos(math.radians(self.center.lat))
        return max(lat_m, lng_m) / 2.0


@dataclass(frozen=True)
class RawPlace:
    """
    A provider-agnostic place returned by a places supplier.
    `payload` keeps the raw-ish provider response for debugging/provenance.
    """
    source: str
    source_id: str
    name: Optional[str]
    lat: float
    lng: float
    category: Optional[str] = None
    phone: Optional[str] = None
    website_url: Optional[str] = None
    address_full: str = ""
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def place_id(self) -> str:
        return f"{self.source}:{self.source_id}"

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class PlaceResult:
    """A place ranked against a viewport center."""
    place: RawPlace
    distance_m: float
    rating: float

    @property
    def place_id(self) -> str:
        return self.place.place_id


class PlacesSupplier(Protocol):
    provider_name: str

    async def search(
        self,
        viewport: Viewport,
        category_filter: Sequence[str],
    ) -> List[RawPlace]:
        """
        Returns the places inside the viewport matching the category filter.
        Raises SearchNotFound when the area simply has no matching places.
        """
        ...
