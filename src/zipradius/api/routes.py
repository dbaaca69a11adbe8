"""
API routes.

Endpoints:
- POST `/api/search`: resolve seeds, find every postcode within the radius, plan the maps.
- POST `/api/layout`: layout/bounds/circles for seeds with known coordinates.
- GET  `/api/dataset`: reference dataset stats.
- GET  `/api/settings`: public settings (geocoding token redacted).
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException

from zipradius.catalog.loader import ReferenceDataset, load_reference_dataset
from zipradius.config.settings import get_settings
from zipradius.core.cache import record_cache_stats
from zipradius.domain.models import LayoutRequest, LayoutResponse, SearchRequest, SearchResponse
from zipradius.ingestion.geocoding_client import GeocodingClient
from zipradius.planner.plan import build_cache, plan_layout, plan_search

router = APIRouter()


@lru_cache
def _dataset() -> ReferenceDataset:
    return load_reference_dataset(get_settings().dataset.path)


@lru_cache
def _geocoder() -> GeocodingClient:
    settings = get_settings()
    return GeocodingClient(settings, build_cache(settings))


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(exc)})


def _internal_error(exc: Exception) -> HTTPException:
    return HTTPException(status_code=500, detail={"code": "INTERNAL_ERROR", "message": str(exc)})


@router.post("/api/search", response_model=SearchResponse)
def post_search(request: SearchRequest) -> SearchResponse:
    """Run a radius search for the requested seeds."""
    try:
        with record_cache_stats() as stats:
            result = plan_search(request, dataset=_dataset(), settings=get_settings(), geocoder=_geocoder())
        return result.model_copy(update={"meta": {**result.meta, "cache": stats.as_dict()}})
    except ValueError as e:
        raise _bad_request(e) from e
    except Exception as e:
        raise _internal_error(e) from e


@router.post("/api/layout", response_model=LayoutResponse)
def post_layout(request: LayoutRequest) -> LayoutResponse:
    """Decide the viewport plan for already-located seeds."""
    try:
        return plan_layout(request, settings=get_settings())
    except ValueError as e:
        raise _bad_request(e) from e


@router.get("/api/dataset")
def get_dataset() -> dict:
    """Return reference dataset stats (loads the dataset on first call)."""
    settings = get_settings()
    try:
        dataset = _dataset()
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=503,
            detail={"code": "DATASET_UNAVAILABLE", "message": f"Dataset not found: {settings.dataset.path}"},
        ) from e
    return {"path": settings.dataset.path, "stats": dataset.stats.model_dump(mode="json")}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return settings the UI needs (secrets redacted)."""
    payload = get_settings().model_dump(mode="json")
    geocoding = payload.get("geocoding") or {}
    geocoding["access_token"] = "***" if geocoding.get("access_token") else None
    payload["geocoding"] = geocoding
    return payload
