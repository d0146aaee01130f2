"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = "Landguard"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    database_url: str = "sqlite+aiosqlite:///./landguard.db"

    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Polygon validation
    near_zero_area_m2: float = 1.0
    min_parcel_area_m2: float = 10.0
    max_parcel_area_m2: float = 100_000_000.0
    max_vertices: int = 1000
    max_aspect_ratio: float = 20.0
    coordinate_tolerance_deg: float = 1e-7
    # (min_lng, min_lat, max_lng, max_lat); None disables the check
    service_region_bounds: Optional[tuple[float, float, float, float]] = None

    # Overlap bands, as a percentage of the candidate's own area
    blocking_overlap_percentage: float = 20.0
    near_duplicate_overlap_percentage: float = 80.0
    minor_overlap_percentage: float = 5.0

    # Multi-account heuristics
    rapid_listing_window_hours: int = 24
    rapid_listing_threshold: int = 5
    repeat_offender_threshold: int = 3

    # Price anomaly heuristics
    price_drop_severe_percentage: float = 50.0
    price_drop_notable_percentage: float = 30.0
    regional_min_comparables: int = 3
    regional_comparable_limit: int = 20
    regional_low_ratio: float = 0.4
    regional_high_ratio: float = 3.0
    absolute_min_price: float = 1_000_000.0
    absolute_max_price: float = 10_000_000_000.0

    # "append" keeps every detection run; "skip_existing" drops rows already recorded
    signal_dedup_policy: Literal["append", "skip_existing"] = "append"


@lru_cache
def get_settings() -> Settings:
    return Settings()
