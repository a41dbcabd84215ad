from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from ..core.describe import DescriptionSnapshot
from ..core.errors import HttpError, TourGuideError
from ..core.search import SearchSnapshot
from ..providers.base import PlaceResult, Viewport

AuthorizationLiteral = Literal["undetermined", "denied", "restricted", "granted"]

class ViewportIn(BaseModel):
    center_lat: float = Field(ge=-90.0, le=90.0)
    center_lng: float = Field(ge=-180.0, le=180.0)
    lat_delta: float = Field(gt=0.0, le=180.0)
    lng_delta: float = Field(gt=0.0, le=360.0)

    @classmethod
    def from_viewport(cls, viewport: Viewport) -> "ViewportIn":
        return cls(
            center_lat=viewport.center.lat,
            center_lng=viewport.center.lng,
            lat_delta=viewport.lat_delta,
            lng_delta=viewport.lng_delta,
        )

class ErrorOut(BaseModel):
    code: str
    message: str
    status_code: Optional[int] = None

    @classmethod
    def from_exception(cls, exc: Optional[BaseException]) -> Optional["ErrorOut"]:
        if exc is None:
            return None
        code = exc.code if isinstance(exc, TourGuideError) else "unexpected_error"
        status_code = exc.status_code if isinstance(exc, HttpError) else None
        return cls(code=code, message=str(exc), status_code=status_code)

class PlaceOut(BaseModel):
    place_id: str
    name: Optional[str] = None
    lat: float
    lng: float
    category: Optional[str] = None
    phone: Optional[str] = None
    website_url: Optional[str] = None
    address_full: str = ""
    distance_m: float
    rating: float

    @classmethod
    def from_result(cls, r: PlaceResult) -> "PlaceOut":
        p = r.place
        return cls(
            place_id=r.place_id,
            name=p.name,
            lat=p.lat,
            lng=p.lng,
            category=p.category,
            phone=p.phone,
            website_url=p.website_url,
            address_full=p.address_full,
            distance_m=r.distance_m,
            rating=r.rating,
        )

class SearchStatusResponse(BaseModel):
    state: str
    generation: int
    viewport: Optional[ViewportIn] = None
    results: List[PlaceOut] = []
    error: Optional[ErrorOut] = None
    selected_place_id: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snap: SearchSnapshot) -> "SearchStatusResponse":
        return cls(
            state=snap.state.value,
            generation=snap.generation,
            viewport=ViewportIn.from_viewport(snap.viewport) if snap.viewport else None,
            results=[PlaceOut.from_result(r) for r in snap.results],
            error=ErrorOut.from_exception(snap.error),
            selected_place_id=snap.selected_place_id,
        )

class SelectPlaceResponse(BaseModel):
    place: PlaceOut
    description_requested: bool

class DescriptionResponse(BaseModel):
    subject: Optional[str] = None
    text: str = ""
    generating: bool = False
    error: Optional[ErrorOut] = None

    @classmethod
    def from_snapshot(cls, snap: DescriptionSnapshot) -> "DescriptionResponse":
        return cls(
            subject=snap.subject,
            text=snap.text,
            generating=snap.generating,
            error=ErrorOut.from_exception(snap.error),
        )

class LocationFixIn(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    accuracy_m: float = Field(default=0.0, ge=0.0)

class AuthorizationIn(BaseModel):
    status: AuthorizationLiteral

class LocationStatusResponse(BaseModel):
    status: AuthorizationLiteral
    lat: Optional[float] = None
    lng: Optional[float] = None
    accuracy_m: Optional[float] = None
    error: Optional[ErrorOut] = None
