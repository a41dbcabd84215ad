"""Reacts to device location updates on behalf of the search coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, Optional, Union

from ..providers.base import Coordinate
from .errors import LocationPermissionDenied, LocationUnavailable, TourGuideError
from .logging import logger
from .search import SearchCoordinator


class AuthorizationStatus(str, Enum):
    UNDETERMINED = "undetermined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    GRANTED = "granted"


@dataclass(frozen=True)
class LocationFix:
    coordinate: Coordinate
    accuracy_m: float


class LocationTracker:
    def __init__(self, coordinator: SearchCoordinator) -> None:
        self._coordinator = coordinator
        self.status = AuthorizationStatus.UNDETERMINED
        self.current: Optional[LocationFix] = None
        self.error: Optional[TourGuideError] = None
        self._centered = False

    @property
    def authorized(self) -> bool:
        return self.status is AuthorizationStatus.GRANTED

    def on_authorization_changed(self, status: AuthorizationStatus) -> None:
        self.status = AuthorizationStatus(status)
        if self.status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            logger.info("location_permission_denied", status=self.status.value)
            self.error = LocationPermissionDenied("location permission is required")
        elif self.status is AuthorizationStatus.GRANTED:
            self.error = None
            self._center_once()

    def on_location(self, fix: LocationFix) -> None:
        self.current = fix
        self._center_once()

    async def run(self, updates: AsyncIterable[Union[AuthorizationStatus, LocationFix]]) -> None:
        async for update in updates:
            if isinstance(update, LocationFix):
                self.on_location(update)
            else:
                self.on_authorization_changed(update)

    def move_to_current_location(self) -> Coordinate:
        if not self.authorized:
            raise LocationPermissionDenied("location permission is required")
        if self.current is None:
            raise LocationUnavailable("current location is not available")
        self._coordinator.center_on(self.current.coordinate)
        return self.current.coordinate

    def _center_once(self) -> None:
        if self._centered or not self.authorized or self.current is None:
            return
        self._centered = True
        self._coordinator.center_on(self.current.coordinate)
