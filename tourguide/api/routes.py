from fastapi import APIRouter, Depends, HTTPException, Request
from .schemas import (
    AuthorizationIn,
    DescriptionResponse,
    ErrorOut,
    LocationFixIn,
    LocationStatusResponse,
    SearchStatusResponse,
    SelectPlaceResponse,
    ViewportIn,
    PlaceOut,
)
from ..core.auth import require_api_key
from ..core.errors import TourGuideError
from ..core.location import AuthorizationStatus, LocationFix, LocationTracker
from ..providers.base import Coordinate, Viewport

router = APIRouter(dependencies=[Depends(require_api_key)])

def get_services(request: Request):
    return request.app.state.services

def _location_status(tracker: LocationTracker) -> LocationStatusResponse:
    fix = tracker.current
    return LocationStatusResponse(
        status=tracker.status.value,
        lat=fix.coordinate.lat if fix else None,
        lng=fix.coordinate.lng if fix else None,
        accuracy_m=fix.accuracy_m if fix else None,
        error=ErrorOut.from_exception(tracker.error),
    )

@router.post("/viewport", response_model=SearchStatusResponse, status_code=202)
async def change_viewport(body: ViewportIn, services=Depends(get_services)):
    viewport = Viewport(
        center=Coordinate(body.center_lat, body.center_lng),
        lat_delta=body.lat_delta,
        lng_delta=body.lng_delta,
    )
    services.coordinator.on_viewport_changed(viewport)
    return SearchStatusResponse.from_snapshot(services.coordinator.snapshot)

@router.get("/search", response_model=SearchStatusResponse)
async def read_search(services=Depends(get_services)):
    return SearchStatusResponse.from_snapshot(services.coordinator.snapshot)

@router.post("/places/{place_id}/select", response_model=SelectPlaceResponse)
async def select_place(place_id: str, services=Depends(get_services)):
    result = services.coordinator.on_annotation_selected(place_id)
    if result is None:
        raise HTTPException(status_code=404, detail="place not found")
    requested = services.describer.describe(result.place)
    return SelectPlaceResponse(place=PlaceOut.from_result(result), description_requested=requested)

@router.get("/description", response_model=DescriptionResponse)
async def read_description(services=Depends(get_services)):
    return DescriptionResponse.from_snapshot(services.describer.snapshot)

@router.post("/location", response_model=LocationStatusResponse)
async def update_location(body: LocationFixIn, services=Depends(get_services)):
    services.tracker.on_location(LocationFix(Coordinate(body.lat, body.lng), body.accuracy_m))
    return _location_status(services.tracker)

@router.post("/location/authorization", response_model=LocationStatusResponse)
async def update_authorization(body: AuthorizationIn, services=Depends(get_services)):
    services.tracker.on_authorization_changed(AuthorizationStatus(body.status))
    return _location_status(services.tracker)

@router.post("/location/recenter", response_model=SearchStatusResponse, status_code=202)
async def recenter(services=Depends(get_services)):
    try:
        services.tracker.move_to_current_location()
    except TourGuideError as e:
        raise HTTPException(status_code=409, detail=e.code)
    return SearchStatusResponse.from_snapshot(services.coordinator.snapshot)
