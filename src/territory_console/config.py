"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TERRITORY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Territory Console API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase key used for backend queries and the geocode upsert RPC.",
    )

    # Geocoding provider
    google_maps_api_key: Optional[str] = Field(default=None, description="Google Geocoding API key.")
    geocoding_base_url: str = Field(default="https://maps.googleapis.com/maps/api/geocode/json")
    geocoding_region: str = Field(default="us", description="Region hint sent with every geocode request.")
    geocoding_timeout_seconds: float = Field(default=5.0, gt=0.0)
    geocoding_max_attempts: int = Field(default=2, ge=1)
    geocoding_backoff_seconds: float = Field(default=1.0, ge=0.0)

    # Marker pipeline
    marker_batch_size: int = Field(default=50, ge=1)
    marker_geocode_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Pause applied after each address that had to go to the geocoder.",
    )
    marker_cache_ttl_seconds: float = Field(default=24 * 60 * 60, gt=0.0)

    # Sales
    sales_current_year: Optional[int] = Field(
        default=None,
        description="Reporting year for YTD rollups. Defaults to the current calendar year.",
    )
    sales_page_size: int = Field(default=1000, ge=1)
    sales_id_column: str = Field(
        default="sale_id",
        description="Primary key of the sales table; last sort key so paged reads never reorder tied rows.",
    )
    top_accounts_limit: int = Field(default=20, ge=1)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
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
