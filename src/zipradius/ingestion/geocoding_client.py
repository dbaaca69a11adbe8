"""
Postcode geocoding client (Mapbox Geocoding v5).

Only used as a fallback for seed labels missing from the local dataset. Lookups are
cached on disk; a transport error serves an expired cached answer when one exists.
Every failure mode ends in `None` (plus a warning) because an unlocatable seed is a
per-label problem, never a reason to abort the whole search.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from zipradius.config.settings import Settings
from zipradius.core.cache import FileCache
from zipradius.core.geo import validated_point
from zipradius.core.http import get_json
from zipradius.domain.errors import InvalidCoordinateError
from zipradius.domain.models import GeoPoint

logger = logging.getLogger(__name__)

_CACHE_NAMESPACE = "geocoding"


def _first_center(payload: Any) -> list[float] | None:
    """Extract `[lon, lat]` of the first feature, or None when nothing matched."""
    if not isinstance(payload, dict):
        raise ValueError("Unexpected geocoding response shape; expected an object.")
    features = payload.get("features") or []
    if not isinstance(features, list) or not features:
        return None
    center = features[0].get("center") if isinstance(features[0], dict) else None
    if not isinstance(center, list) or len(center) < 2:
        raise ValueError("Unexpected geocoding feature; missing 'center'.")
    return [float(center[0]), float(center[1])]


class GeocodingClient:
    """Resolves a postcode label to a coordinate via Mapbox, with an on-disk cache."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache
        self._warned_no_token = False

    @property
    def available(self) -> bool:
        cfg = self._settings.geocoding
        return bool(cfg.enabled and cfg.access_token)

    def _fetch(self, label: str) -> list[float] | None:
        cfg = self._settings.geocoding
        url = f"{cfg.base_url.rstrip('/')}/{quote(label, safe='')}.json"
        params = {"access_token": cfg.access_token, "types": cfg.types, "country": cfg.country}
        payload = get_json(url, params=params, timeout_seconds=self._settings.app.http_timeout_seconds)
        return _first_center(payload)

    def geocode_postcode(self, label: str) -> GeoPoint | None:
        """Return the coordinate for `label`, or None when it cannot be located."""
        if not self.available:
            if not self._warned_no_token:
                logger.warning("Geocoding fallback disabled (no access token configured).")
                self._warned_no_token = True
            return None

        cfg = self._settings.geocoding
        cache_key = f"mapbox:{cfg.types}:{cfg.country}:{label}"
        try:
            center = self._cache.get_or_set(
                _CACHE_NAMESPACE,
                cache_key,
                lambda: self._fetch(label),
                ttl_seconds=int(cfg.cache_ttl_seconds),
                stale_if_error=True,
                stale_predicate=lambda exc: isinstance(exc, httpx.TransportError),
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Geocoding failed for '%s': %s", label, exc)
            return None

        if center is None:
            logger.info("Geocoder found no postcode match for '%s'.", label)
            return None
        lon, lat = center[0], center[1]
        try:
            return validated_point(lat, lon)
        except InvalidCoordinateError as exc:
            logger.warning("Geocoder returned an invalid coordinate for '%s': %s", label, exc)
            return None
