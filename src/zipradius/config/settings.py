"""
Runtime settings.

Values come from the packaged `zipradius/config/defaults.yaml`, or from the YAML file named
by `ZIPRADIUS_CONFIG_PATH` instead. A few environment variables (also read from `.env`)
are layered on top; see `ENV_OVERRIDES`. Layout and search constants such as the
30-mile cluster threshold are read from here rather than written into the algorithms.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from zipradius.core.env import load_dotenv_if_present

# env var -> settings path. Later entries win, so MAPBOX_TOKEN beats ZIPRADIUS_MAPBOX_TOKEN.
ENV_OVERRIDES: tuple[tuple[str, tuple[str, str]], ...] = (
    ("ZIPRADIUS_CACHE_DIR", ("cache", "dir")),
    ("ZIPRADIUS_LOG_LEVEL", ("app", "log_level")),
    ("ZIPRADIUS_DATASET_PATH", ("dataset", "path")),
    ("ZIPRADIUS_MAPBOX_TOKEN", ("geocoding", "access_token")),
    ("MAPBOX_TOKEN", ("geocoding", "access_token")),
)


def _parse_yaml_mapping(text: str, source: str) -> dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{source}: expected a YAML mapping at the top level")
    return data


def _packaged_yaml(filename: str) -> dict[str, Any]:
    text = resources.files("zipradius.config").joinpath(filename).read_text(encoding="utf-8")
    return _parse_yaml_mapping(text, filename)


class AppSettings(BaseModel):
    name: str = "ZipRadius"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/zipradius"
    default_ttl_seconds: int = 60 * 60 * 24 * 30


class DatasetSettings(BaseModel):
    path: str = "data/zipCodeDatabase.json"


class SearchSettings(BaseModel):
    default_radius_mi: float = Field(10, ge=0)
    min_radius_mi: float = Field(1, ge=0)
    max_radius_mi: float = Field(50, gt=0)
    use_spatial_index: bool = True
    index_cell_size_deg: float = Field(0.5, gt=0, le=90)

    @model_validator(mode="after")
    def _validate_range(self) -> "SearchSettings":
        if self.min_radius_mi > self.max_radius_mi:
            raise ValueError("search.min_radius_mi must be <= search.max_radius_mi")
        return self


class LayoutSettings(BaseModel):
    default_mode: Literal["auto", "single", "split"] = "auto"
    cluster_threshold_mi: float = Field(30, gt=0)
    split_fraction: float = Field(0.5, gt=0, lt=1)


class BoundsSettings(BaseModel):
    padding_fraction: float = Field(0.1, ge=0)
    miles_per_degree: float = Field(69.0, gt=0)
    viewport_width_px: int = Field(1024, ge=1)
    viewport_height_px: int = Field(768, ge=1)
    max_zoom: float = Field(22, ge=0)


class CircleSettings(BaseModel):
    point_count: int = Field(64, ge=3, le=1024)


class GeocodingSettings(BaseModel):
    enabled: bool = True
    base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places"
    types: str = "postcode"
    country: str = "US"
    cache_ttl_seconds: int = 60 * 60 * 24 * 30
    access_token: str | None = None


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    dataset: DatasetSettings = Field(default_factory=DatasetSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    bounds: BoundsSettings = Field(default_factory=BoundsSettings)
    circle: CircleSettings = Field(default_factory=CircleSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of `data` with the `ENV_OVERRIDES` variables that are set written in."""
    out = {section: dict(values or {}) for section, values in data.items()}
    for var, (section, key) in ENV_OVERRIDES:
        value = os.getenv(var)
        if value:
            out.setdefault(section, {})[key] = value
    return out


@lru_cache
def get_settings() -> Settings:
    """Validated settings, loaded once per process (`get_settings.cache_clear()` reloads)."""
    load_dotenv_if_present()
    config_path = os.getenv("ZIPRADIUS_CONFIG_PATH")
    if config_path:
        raw = _parse_yaml_mapping(Path(config_path).read_text(encoding="utf-8"), config_path)
    else:
        raw = _packaged_yaml("defaults.yaml")
    return Settings.model_validate(_apply_env_overrides(raw))


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """`logging.config.dictConfig` payload from the packaged `logging.yaml`."""
    return _packaged_yaml("logging.yaml")
