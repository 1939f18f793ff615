"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="WPO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Waypoint Optimizer API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Google Routes API (route provider)
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Google Routes API. Enables provider-optimized routes.",
    )
    google_routes_url: str = Field(
        default="https://routes.googleapis.com/directions/v2:computeRoutes",
        description="Google Routes computeRoutes endpoint.",
    )
    region_code: str = Field(default="fr")
    language_code: str = Field(default="fr-FR")
    avoid_tolls: bool = True

    # OpenRouteService (geocoding + distance matrix)
    openroute_service_api_key: Optional[str] = Field(
        default=None,
        description="API key for OpenRouteService. Enables brute-force matrix optimization.",
    )
    ors_base_url: str = Field(default="https://api.openrouteservice.org")
    ors_profile: str = Field(default="driving-car")
    geocode_country: str = Field(default="FRA", description="ISO-3166 alpha-3 boundary for geocoding.")

    http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    http_max_retries: int = Field(default=2, ge=0)
    http_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # Exact search
    max_brute_force_waypoints: int = Field(
        default=8,
        ge=0,
        description="Largest intermediate count for which all permutations are evaluated.",
    )
    close_loop: bool = Field(
        default=False,
        description="Include the leg from the last waypoint back to the start in route cost.",
    )
    max_parallel_geocode_requests: int = Field(default=10, ge=1)

    # Mock fallback
    allow_mock_strategy: bool = Field(
        default=True,
        description="Allow the random, non-optimized ordering when no provider is configured.",
    )
    mock_seed: Optional[int] = Field(default=None, description="Seed for reproducible mock ordering.")
    mock_latency_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Artificial delay applied in mock mode to mimic network latency.",
    )

    @field_validator("google_maps_api_key", "openroute_service_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
