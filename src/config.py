"""Configuration loader for the ride companion service."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml


@dataclass(frozen=True)
class ProviderConfig:
    """Ride provider API configuration."""

    sandbox: bool
    timeout_seconds: int


@dataclass(frozen=True)
class PlacesConfig:
    """Places lookup configuration."""

    api_key: str
    search_radius_meters: int
    search_types: str


@dataclass(frozen=True)
class TripConfig:
    """Trip status rendering and receipt timing."""

    status_ttl_seconds: int
    receipt_delay_seconds: float


@dataclass(frozen=True)
class StorageConfig:
    """Last trip id storage."""

    path: str


@dataclass(frozen=True)
class ServerConfig:
    """Device transport HTTP server."""

    host: str
    port: int
    worker_threads: int


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    provider: ProviderConfig
    places: PlacesConfig
    trip: TripConfig
    storage: StorageConfig
    server: ServerConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _require_section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = _require_key(data, name, name)
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' config must be a mapping")
    return section


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    google_api_key = os.environ.get("GOOGLE_API_KEY", "")
    force_production = os.environ.get("RIDE_PROVIDER_PRODUCTION", "") == "YES"
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    provider_section = _require_section(data, "provider")
    places_section = _require_section(data, "places")
    trip_section = _require_section(data, "trip")
    storage_section = _require_section(data, "storage")
    server_section = _require_section(data, "server")
    logging_section = _require_section(data, "logging")

    sandbox = bool(_require_key(provider_section, "sandbox", "provider"))
    provider = ProviderConfig(
        sandbox=False if force_production else sandbox,
        timeout_seconds=_require_key(provider_section, "timeout_seconds", "provider"),
    )

    places = PlacesConfig(
        api_key=google_api_key,
        search_radius_meters=_require_key(places_section, "search_radius_meters", "places"),
        search_types=_require_key(places_section, "search_types", "places"),
    )

    trip = TripConfig(
        status_ttl_seconds=_require_key(trip_section, "status_ttl_seconds", "trip"),
        receipt_delay_seconds=_require_key(trip_section, "receipt_delay_seconds", "trip"),
    )
    if trip.status_ttl_seconds <= 0:
        raise ValueError("'trip.status_ttl_seconds' must be positive")
    if trip.receipt_delay_seconds <= 0:
        raise ValueError("'trip.receipt_delay_seconds' must be positive")

    storage = StorageConfig(path=_require_key(storage_section, "path", "storage"))

    server = ServerConfig(
        host=_require_key(server_section, "host", "server"),
        port=_require_key(server_section, "port", "server"),
        worker_threads=_require_key(server_section, "worker_threads", "server"),
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(
        provider=provider,
        places=places,
        trip=trip,
        storage=storage,
        server=server,
        log=logging,
    )
