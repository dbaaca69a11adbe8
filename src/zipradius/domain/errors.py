"""Error types raised at the edges of the search/layout pipeline."""

from __future__ import annotations


class InvalidCoordinateError(ValueError):
    """Latitude/longitude outside the valid range."""

    def __init__(self, lat: float, lon: float):
        super().__init__(f"Invalid coordinate lat={lat!r} lon={lon!r}; expected lat in [-90, 90], lon in [-180, 180]")
        self.lat = lat
        self.lon = lon


class EmptySeedSetError(ValueError):
    """A layout or search was requested without any located seed."""


class UnresolvedSeedLabelError(LookupError):
    """A seed label could not be located in the dataset nor by the geocoder."""

    def __init__(self, label: str):
        super().__init__(f"Seed '{label}' could not be located")
        self.label = label
