"""Error taxonomy shared by the search, location and text-generation code."""

from __future__ import annotations

from typing import Optional


class TourGuideError(Exception):
    """Base class. `code` is a stable identifier exposed to observers."""

    code = "tourguide_error"


class CredentialMissing(TourGuideError):
    code = "credential_missing"


class InvalidInput(TourGuideError):
    code = "invalid_input"


class InvalidEndpoint(TourGuideError):
    code = "invalid_endpoint"


class InvalidResponseShape(TourGuideError):
    code = "invalid_response_shape"


class HttpError(TourGuideError):
    code = "http_error"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error: {status_code}")
        self.status_code = status_code


class NoContent(TourGuideError):
    code = "no_content"


class NetworkError(TourGuideError):
    code = "network_error"

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Network error: {cause}" if cause else "Network error")
        self.cause = cause


class EncodingError(TourGuideError):
    code = "encoding_error"

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Encoding error: {cause}" if cause else "Encoding error")
        self.cause = cause


class LocationPermissionDenied(TourGuideError):
    code = "location_permission_denied"


class LocationUnavailable(TourGuideError):
    code = "location_unavailable"


class SearchNotFound(TourGuideError):
    """No places in the searched area. Treated as an empty result, never shown."""

    code = "search_not_found"


__all__ = [
    "TourGuideError",
    "CredentialMissing",
    "InvalidInput",
    "InvalidEndpoint",
    "InvalidResponseShape",
    "HttpError",
    "NoContent",
    "NetworkError",
    "EncodingError",
    "LocationPermissionDenied",
    "LocationUnavailable",
    "SearchNotFound",
]
