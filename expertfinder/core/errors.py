from __future__ import annotations

from typing import Optional


class ExpertFinderError(RuntimeError):
    """Base class for discovery engine failures."""


class LocationUnavailable(ExpertFinderError):
    """Every location source was tried and none produced a coordinate."""


class ApiError(ExpertFinderError):
    """Transport failure or non-2xx answer from the Planora API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DirectoryUnavailable(ApiError):
    """The nearby search could not be answered; displayed results must be cleared."""


class GeocodingError(ExpertFinderError):
    """The geocoder could not be reached or answered garbage."""


class NoActiveProject(ExpertFinderError):
    def __init__(self):
        super().__init__("Please select or create a project first.")


class AssignmentError(ExpertFinderError):
    def __init__(self, message: str, professional_id: Optional[str] = None):
        super().__init__(message)
        self.professional_id = professional_id
