# src/jpycmap/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/jpycmap/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `SUPABASE_URL`, `SUPABASE_ANON_KEY`)
- an external YAML file via `JPYCMAP_CONFIG_PATH`

Design rule:
- Tuning knobs (radius limits, fallback coordinate, table names) live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from jpycmap.core.env import load_dotenv_if_present, resolve_data_path


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `jpycmap.config`."""
    text = resources.files("jpycmap.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "JPYC Map"
    timezone: str = "Asia/Tokyo"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class StoreSettings(BaseModel):
    """Connection details for the hosted Supabase project."""

    url: str = ""
    anon_key: str = ""
    shops_table: str = "shops"
    merchants_table: str = "online_merchants"

    @property
    def configured(self) -> bool:
        return bool(self.url.strip() and self.anon_key.strip())


class CatalogSettings(BaseModel):
    shops_path: str = "data/catalogs/shops.json"
    merchants_path: str = "data/catalogs/online_merchants.json"


class FallbackCoordinate(BaseModel):
    lat: float = Field(35.6812, ge=-90, le=90)
    lng: float = Field(139.7671, ge=-180, le=180)


class GeolocationSettings(BaseModel):
    provider: Literal["none", "ip"] = "none"
    ip_lookup_url: str = "http://ip-api.com/json/"
    fallback: FallbackCoordinate = Field(default_factory=FallbackCoordinate)


class NearbySettings(BaseModel):
    default_radius_km: float = Field(10, gt=0)
    min_radius_km: float = Field(1, gt=0)
    max_radius_km: float = Field(50, gt=0)

    @model_validator(mode="after")
    def _validate_range(self) -> "NearbySettings":
        if not self.min_radius_km <= self.default_radius_km <= self.max_radius_km:
            raise ValueError("nearby.default_radius_km must lie within [min_radius_km, max_radius_km]")
        return self


class SessionSettings(BaseModel):
    """Lifetime of in-memory registration sessions."""

    ttl_seconds: float = Field(1800, gt=0)
    # Finished sessions only need to live long enough for the client to read the result.
    submitted_ttl_seconds: float = Field(300, gt=0)
    max_sessions: int = Field(1000, ge=1)


class ApiSettings(BaseModel):
    """Browser access to the API (the map frontend runs on another origin)."""

    cors_origins: list[str] = Field(default_factory=list)
    # Allow http://localhost:<port> and http://127.0.0.1:<port> when no origins are listed.
    cors_allow_local: bool = True


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    geolocation: GeolocationSettings = Field(default_factory=GeolocationSettings)
    nearby: NearbySettings = Field(default_factory=NearbySettings)
    sessions: SessionSettings = Field(default_factory=SessionSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small; everything else goes through YAML.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("JPYCMAP_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    provider = os.getenv("JPYCMAP_GEOLOCATION_PROVIDER")
    if provider:
        data.setdefault("geolocation", {})["provider"] = provider.strip().lower()

    store_url = os.getenv("SUPABASE_URL")
    anon_key = os.getenv("SUPABASE_ANON_KEY")
    if store_url:
        data.setdefault("store", {})["url"] = store_url
    if anon_key:
        data.setdefault("store", {})["anon_key"] = anon_key

    cors_origins = os.getenv("JPYCMAP_CORS_ORIGINS")
    if cors_origins is not None:
        data.setdefault("api", {})["cors_origins"] = [s.strip() for s in cors_origins.split(",") if s.strip()]

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("JPYCMAP_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    settings = Settings.model_validate(raw)
    if config_path:
        # Catalog paths in an external settings file are relative to that file.
        base = Path(config_path).expanduser().resolve().parent
        settings.catalog = CatalogSettings(
            shops_path=str(resolve_data_path(settings.catalog.shops_path, base=base)),
            merchants_path=str(resolve_data_path(settings.catalog.merchants_path, base=base)),
        )
    return settings


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
