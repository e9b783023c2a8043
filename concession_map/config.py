"""
Application configuration using Pydantic settings.
"""
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Dataset Source Configuration
    dataset_base_url: str = Field(
        default="http://localhost:5173",
        description="Base URL serving the static GeoJSON and CSV datasets"
    )
    concessions_path: str = Field(
        default="/Indonesia_oil_palm_concessions.geojson",
        description="Path of the concession polygons feature collection"
    )
    ponds_path: str = Field(
        default="/telangana_ponds_final_cleaned.geojson",
        description="Path of the pond points feature collection"
    )
    concessions_csv_path: str = Field(
        default="/Indonesia_oil_palm_concessions.csv",
        description="Path of the concessions CSV export"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for dataset requests"
    )

    # Base Map
    maptiler_key: str = Field(
        default="",
        description="MapTiler API key for the base map style"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of attempts for dataset fetches"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Geometry
    centroid_method: Literal["vertex_mean", "area_weighted"] = Field(
        default="vertex_mean",
        description="How display positions are derived from polygon rings"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=30,
        description="Maximum reload/export requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Concession Map API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
